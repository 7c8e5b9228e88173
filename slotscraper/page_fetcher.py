from __future__ import annotations

import logging

import httpx
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from slotscraper.domain import TransportError

logger = logging.getLogger(__name__)


def _short_exc(retry_state: RetryCallState) -> str | None:
    if retry_state.outcome is None or not retry_state.outcome.failed:
        return None
    exc = retry_state.outcome.exception()
    if exc is None:
        return None
    msg = str(exc).strip()
    return f"{type(exc).__name__}: {msg}" if msg else type(exc).__name__


def _log_before_sleep(retry_state: RetryCallState) -> None:
    sleep_seconds = getattr(retry_state.next_action, "sleep", None)
    logger.info(
        "Fetch attempt %s failed (%s), next attempt in %s sec.",
        retry_state.attempt_number,
        _short_exc(retry_state),
        f"{sleep_seconds:.0f}" if sleep_seconds is not None else "?",
    )


def _fetch(client: httpx.Client, url: str) -> str:
    try:
        r = client.get(url)
        logger.info("statusCode: %s", r.status_code)
        r.raise_for_status()
    except httpx.HTTPError as e:
        raise TransportError(f"Failed to fetch {url} ({type(e).__name__}: {e})") from e

    content = r.text
    logger.info("Content length: %d", len(content))
    return content


def fetch_page(
    url: str,
    *,
    timeout_seconds: float = 30.0,
    retry_attempts: int = 1,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """GET ``url`` and return the decoded body.

    ``retry_attempts`` > 1 retries transport failures with exponential wait;
    the last failure is re-raised as :class:`TransportError`.
    """
    decorated = retry(
        stop=stop_after_attempt(retry_attempts),
        wait=wait_exponential(multiplier=2, min=2, max=4),
        retry=retry_if_exception_type(TransportError),
        before_sleep=_log_before_sleep,
        reraise=True,
    )(_fetch)

    with httpx.Client(timeout=timeout_seconds, transport=transport, follow_redirects=True) as client:
        return decorated(client, url)
