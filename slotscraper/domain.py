from __future__ import annotations

from dataclasses import dataclass, field

# DynamoDB BatchWriteItem accepts at most 25 put requests per call.
BATCH_LIMIT = 25


@dataclass(frozen=True)
class LookupResult:
    """Answer of a bulk existence lookup.

    ``confirmed`` are ids the store returned. ``unknown`` are ids the store
    could not answer for in this call (unprocessed keys); they are neither
    "present" nor "absent".
    """

    confirmed: frozenset[str] = frozenset()
    unknown: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ReconcileOutcome:
    slots: list[str]
    new_slots: list[str] = field(default_factory=list)
    unknown: frozenset[str] = frozenset()
    notified: bool = False
    batches_written: int = 0


class ScraperError(RuntimeError):
    """Base for every failure that aborts a run."""


class TransportError(ScraperError):
    """The page could not be fetched."""


class ParseError(ScraperError):
    """The page could not be turned into text nodes."""


class StoreError(ScraperError):
    """The slot store rejected a lookup or a write."""


class NotificationError(ScraperError):
    """The notification channel rejected a publish."""
