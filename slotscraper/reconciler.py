from __future__ import annotations

import json
import logging
from typing import Sequence

from slotscraper.batch_writer import write_batches
from slotscraper.domain import LookupResult, ReconcileOutcome
from slotscraper.notifier import Notifier, format_new_slots_message
from slotscraper.slot_store import SlotStore

logger = logging.getLogger(__name__)


def new_slots(slots: Sequence[str], lookup: LookupResult) -> list[str]:
    # Unknown ids are not in ``confirmed``, so they count as new.
    return [s for s in slots if s not in lookup.confirmed]


def reconcile(
    slots: Sequence[str],
    *,
    store: SlotStore,
    notifier: Notifier,
    source: str,
    subject: str = "New slots",
) -> ReconcileOutcome:
    """Diff ``slots`` against the store, then notify and persist what is new.

    Order is notify-then-persist: if the write fails after the publish, the
    slots are still new for the next run and get notified again.
    """
    slots = list(slots)
    lookup = store.lookup(slots) if slots else LookupResult()

    if lookup.unknown:
        logger.warning("Unconfirmed timeslots (%d), treated as not existing: %s", len(lookup.unknown), sorted(lookup.unknown))

    logger.info("Existing timeslots (%d): %s", len(lookup.confirmed), json.dumps(sorted(lookup.confirmed)))
    # The payload keeps scan duplicates; notification and writes name each id once.
    fresh = list(dict.fromkeys(new_slots(slots, lookup)))
    logger.info("New timeslots (%d): %s", len(fresh), json.dumps(fresh))

    if not fresh:
        return ReconcileOutcome(slots=slots, unknown=lookup.unknown)

    notifier.publish(subject, format_new_slots_message(source, fresh))
    batches = write_batches(store, fresh)

    return ReconcileOutcome(
        slots=slots,
        new_slots=fresh,
        unknown=lookup.unknown,
        notified=True,
        batches_written=batches,
    )
