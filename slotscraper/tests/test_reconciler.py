from __future__ import annotations

from typing import Sequence
from unittest.mock import MagicMock

import pytest

from slotscraper.domain import LookupResult, NotificationError, StoreError
from slotscraper.reconciler import new_slots, reconcile

SOURCE = "https://example.com/signup"


class _FakeStore:
    def __init__(self, stored: set[str] = frozenset(), *, unknown: set[str] = frozenset(), fail_put: bool = False):
        self.stored = set(stored)
        self.unknown = set(unknown)
        self.fail_put = fail_put
        self.lookups: list[list[str]] = []
        self.puts: list[list[str]] = []

    def lookup(self, ids: Sequence[str]) -> LookupResult:
        self.lookups.append(list(ids))
        return LookupResult(
            confirmed=frozenset(i for i in ids if i in self.stored and i not in self.unknown),
            unknown=frozenset(i for i in ids if i in self.unknown),
        )

    def put_many(self, ids: Sequence[str]) -> None:
        if self.fail_put:
            raise StoreError("write rejected")
        self.puts.append(list(ids))


def test_new_slots_excludes_confirmed_and_keeps_order() -> None:
    lookup = LookupResult(confirmed=frozenset({"b"}))
    assert new_slots(["a", "b", "c"], lookup) == ["a", "c"]


def test_new_slots_treats_unknown_as_not_existing() -> None:
    lookup = LookupResult(confirmed=frozenset({"a"}), unknown=frozenset({"b"}))
    assert new_slots(["a", "b"], lookup) == ["b"]


def test_nothing_new_means_no_notification_and_no_write() -> None:
    store = _FakeStore({"01/01/2024-9:00", "02/01/2024-10:00", "03/01/2024-9:00"})
    notifier = MagicMock()

    outcome = reconcile(["01/01/2024-9:00", "02/01/2024-10:00"], store=store, notifier=notifier, source=SOURCE)

    assert outcome.new_slots == []
    assert outcome.slots == ["01/01/2024-9:00", "02/01/2024-10:00"]
    assert outcome.notified is False
    assert outcome.batches_written == 0
    notifier.publish.assert_not_called()
    assert store.puts == []


def test_empty_scan_does_not_query_the_store() -> None:
    store = _FakeStore()
    notifier = MagicMock()

    outcome = reconcile([], store=store, notifier=notifier, source=SOURCE)

    assert outcome.slots == []
    assert store.lookups == []
    notifier.publish.assert_not_called()


def test_new_slot_is_notified_once_then_written() -> None:
    store = _FakeStore({"01/01/2024-9:00"})
    calls: list[str] = []
    notifier = MagicMock()
    notifier.publish.side_effect = lambda subject, message: calls.append("publish")
    original_put = store.put_many
    store.put_many = lambda ids: (calls.append("put"), original_put(ids))

    outcome = reconcile(["01/01/2024-9:00", "02/01/2024-10:00"], store=store, notifier=notifier, source=SOURCE)

    assert outcome.new_slots == ["02/01/2024-10:00"]
    assert outcome.notified is True
    assert outcome.batches_written == 1
    notifier.publish.assert_called_once_with("New slots", f"{SOURCE}: New slots are 02/01/2024-10:00")
    assert store.puts == [["02/01/2024-10:00"]]
    assert calls == ["publish", "put"]


def test_message_lists_new_ids_comma_joined() -> None:
    store = _FakeStore()
    notifier = MagicMock()

    reconcile(["a", "b", "c"], store=store, notifier=notifier, source=SOURCE, subject="Slots!")

    notifier.publish.assert_called_once_with("Slots!", f"{SOURCE}: New slots are a,b,c")


def test_unknown_ids_are_reported_and_treated_as_new(caplog: pytest.LogCaptureFixture) -> None:
    store = _FakeStore({"a", "b"}, unknown={"b"})
    notifier = MagicMock()

    outcome = reconcile(["a", "b"], store=store, notifier=notifier, source=SOURCE)

    assert outcome.unknown == frozenset({"b"})
    assert outcome.new_slots == ["b"]
    assert store.puts == [["b"]]
    assert "Unconfirmed timeslots" in caplog.text


def test_notification_failure_aborts_before_write() -> None:
    store = _FakeStore()
    notifier = MagicMock()
    notifier.publish.side_effect = NotificationError("denied")

    with pytest.raises(NotificationError):
        reconcile(["a"], store=store, notifier=notifier, source=SOURCE)
    assert store.puts == []


def test_write_failure_after_notification_propagates() -> None:
    store = _FakeStore(fail_put=True)
    notifier = MagicMock()

    with pytest.raises(StoreError):
        reconcile(["a"], store=store, notifier=notifier, source=SOURCE)
    notifier.publish.assert_called_once()
