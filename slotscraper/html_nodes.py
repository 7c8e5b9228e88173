from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString

from slotscraper.domain import ParseError


def parse_text_nodes(html: str) -> list[str]:
    """Return every text node of the document, in document order.

    Comments, doctype, CDATA and processing instructions are markup, not
    text, and are left out.
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception as e:
        raise ParseError(f"Failed to parse HTML ({type(e).__name__}: {e})") from e

    return [
        str(node)
        for node in soup.descendants
        if isinstance(node, NavigableString) and not isinstance(node, PreformattedString)
    ]
