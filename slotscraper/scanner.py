from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)

# Zero-padded DD/MM/YYYY; whatever follows the date on the same line is kept
# as part of the label. ASCII digits only; the match must reach the end of
# the text, so a line break after it rules the node out.
DATE_RE = re.compile(r"\d{2}/\d{2}/\d{4}.*\Z", re.ASCII)
TIME_RE = re.compile(r"\d+:\d{2}.*\Z", re.ASCII)

_NBSP_ARTIFACTS = ("&nbsp;", "\xa0")


@dataclass(frozen=True)
class ScanState:
    """Accumulator carried across text nodes.

    ``last_date`` is the most recent date label seen in document order,
    ``slots`` the candidates appended so far (adjacent repeats dropped).
    """

    last_date: str | None = None
    slots: tuple[str, ...] = ()


def _clean_time(raw: str) -> str:
    for artifact in _NBSP_ARTIFACTS:
        raw = raw.replace(artifact, "")
    return raw.strip()


def step(state: ScanState, text: str) -> ScanState:
    last_date = state.last_date
    slots = state.slots

    date_found = DATE_RE.search(text)
    if date_found:
        last_date = date_found.group(0).strip()
        logger.debug("Date: %s", last_date)

    time_found = TIME_RE.search(text)
    if time_found:
        if last_date is None:
            logger.debug("Time without date, skipped: %s", time_found.group(0))
        else:
            candidate = f"{last_date}-{_clean_time(time_found.group(0))}"
            # Only the immediate predecessor is compared; a repeat further
            # back in scan order is kept.
            if slots and slots[-1] == candidate:
                logger.debug("Dup timeslot found: %s", candidate)
            else:
                slots = slots + (candidate,)

    return ScanState(last_date=last_date, slots=slots)


def scan_slots(texts: Iterable[str]) -> list[str]:
    """Extract sorted slot identifiers (``"<date>-<time>"``) from text nodes."""
    state = ScanState()
    for text in texts:
        state = step(state, text)
    return sorted(state.slots)
