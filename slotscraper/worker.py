from __future__ import annotations

import json
import logging
from typing import Any, Callable

from slotscraper.config import Settings, load_settings
from slotscraper.html_nodes import parse_text_nodes
from slotscraper.notifier import Notifier, build_sns_notifier
from slotscraper.page_fetcher import fetch_page
from slotscraper.reconciler import reconcile
from slotscraper.scanner import scan_slots
from slotscraper.slot_store import SlotStore, build_dynamo_store

logger = logging.getLogger(__name__)


def _fetch(settings: Settings) -> str:
    return fetch_page(
        settings.page_url,
        timeout_seconds=settings.fetch_timeout_seconds,
        retry_attempts=settings.fetch_retry_attempts,
    )


def _run(
    settings: Settings,
    *,
    fetch: Callable[[Settings], str],
    store: SlotStore | None,
    notifier: Notifier | None,
) -> list[str]:
    content = fetch(settings)

    texts = parse_text_nodes(content)
    logger.info("Successfully parsed: %d text elements", len(texts))

    slots = scan_slots(texts)
    logger.info("Scanned timeslots (%d)", len(slots))

    if store is None:
        store = build_dynamo_store(settings.timeslots_table_name, region_name=settings.aws_region)
    if notifier is None:
        notifier = build_sns_notifier(settings.notification_topic_arn, region_name=settings.aws_region)

    outcome = reconcile(
        slots,
        store=store,
        notifier=notifier,
        source=settings.page_url,
        subject=settings.notification_subject,
    )
    logger.info(
        "Run done: slots=%d new=%d batches=%d",
        len(outcome.slots),
        len(outcome.new_slots),
        outcome.batches_written,
    )
    return outcome.slots


def run_once(
    settings: Settings,
    *,
    fetch: Callable[[Settings], str] = _fetch,
    store: SlotStore | None = None,
    notifier: Notifier | None = None,
) -> dict[str, Any]:
    """Run the whole pipeline once. Never raises.

    Returns ``{"slots": [...]}`` on success and ``{"error": "..."}`` when any
    stage failed. A failure after the notification went out looks the same
    as one before it.
    """
    try:
        return {"slots": _run(settings, fetch=fetch, store=store, notifier=notifier)}
    except Exception as e:
        # No traceback: type and message only.
        logger.error("Run failed (%s: %s)", type(e).__name__, e)
        return {"error": f"{type(e).__name__}: {e}"}


def handler(event: Any, context: Any) -> dict[str, Any]:
    """Lambda-style entrypoint: always 200, the outcome is in the body."""
    try:
        settings = load_settings()
    except Exception as e:
        logger.error("Configuration failed (%s: %s)", type(e).__name__, e)
        payload: dict[str, Any] = {"error": f"{type(e).__name__}: {e}"}
    else:
        payload = run_once(settings)

    return {"statusCode": 200, "body": json.dumps(payload)}
