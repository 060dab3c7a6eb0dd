"""Outbox relay: pending records -> registry -> mark published."""
from dataclasses import dataclass

import pytest
from structlog.testing import capture_logs

from eventroute import Registry
from eventroute.events import OutboxRecord, OutboxRelay, OutboxSource


@dataclass
class OrderCompleted:
    OrderID: str


class Declined(Exception):
    pass


class InMemoryOutbox:
    def __init__(self, records):
        self.records = list(records)
        self.published_calls = []

    def fetch_pending(self):
        published = {i for call in self.published_calls for i in call}
        return [r for r in self.records if r.id not in published]

    def mark_published(self, ids):
        self.published_calls.append(list(ids))


@pytest.fixture
def wired():
    registry = Registry()
    seen = []

    def on_completed(event: OrderCompleted) -> Declined | None:
        seen.append(event.OrderID)
        if event.OrderID == "bad":
            return Declined(event.OrderID)
        return None

    registry.react_to("order.completed", on_completed)
    return registry, seen


def test_source_protocol():
    assert isinstance(InMemoryOutbox([]), OutboxSource)


def test_relay_marks_dispatched_records(wired):
    registry, seen = wired
    outbox = InMemoryOutbox([
        OutboxRecord(1, "order.completed", b'{"OrderID": "a"}'),
        OutboxRecord(2, "order.completed", b'{"OrderID": "b"}'),
    ])

    report = OutboxRelay(registry, outbox).relay_once()

    assert report.published == [1, 2]
    assert report.total == 2
    assert outbox.published_calls == [[1, 2]]
    assert seen == ["a", "b"]


def test_failures_stay_pending(wired):
    registry, seen = wired
    outbox = InMemoryOutbox([
        OutboxRecord(1, "order.completed", b'{"OrderID": "bad"}'),
        OutboxRecord(2, "order.completed", b'{"OrderID": 7}'),
        OutboxRecord(3, "order.completed", b'{"OrderID": "ok"}'),
    ])

    with capture_logs() as logs:
        report = OutboxRelay(registry, outbox).relay_once()

    assert report.failed == [1, 2]
    assert report.published == [3]
    assert outbox.published_calls == [[3]]
    assert [r.id for r in outbox.fetch_pending()] == [1, 2]
    failed = [entry for entry in logs if entry["event"] == "outbox_dispatch_failed"]
    assert [entry["error_type"] for entry in failed] == ["Declined", "DecodeError"]


def test_unroutable_without_hook_stays_pending(wired):
    registry, _ = wired
    outbox = InMemoryOutbox([OutboxRecord("x", "order.refunded", b"{}")])

    report = OutboxRelay(registry, outbox).relay_once()

    assert report.unroutable == ["x"]
    assert outbox.published_calls == []


def test_unroutable_with_dead_letter_hook(wired):
    registry, _ = wired
    dead = []
    outbox = InMemoryOutbox([
        OutboxRecord("x", "order.refunded", b"{}"),
        OutboxRecord("y", "order.completed", b'{"OrderID": "y"}'),
    ])

    report = OutboxRelay(registry, outbox, on_unroutable=lambda r, e: dead.append((r.id, e.event_name))).relay_once()

    assert report.unroutable == ["x"]
    assert report.published == ["y"]
    assert dead == [("x", "order.refunded")]
    assert outbox.published_calls == [["x", "y"]]


def test_empty_outbox(wired):
    registry, _ = wired
    outbox = InMemoryOutbox([])
    report = OutboxRelay(registry, outbox).relay_once()
    assert report.total == 0
    assert outbox.published_calls == []


def test_failing_dead_letter_hook_does_not_redeliver(wired):
    registry, seen = wired
    outbox = InMemoryOutbox([
        OutboxRecord(1, "order.completed", b'{"OrderID": "a"}'),
        OutboxRecord(2, "order.refunded", b"{}"),
    ])

    def broken_hook(record, error):
        raise RuntimeError("dead-letter queue is down")

    relay = OutboxRelay(registry, outbox, on_unroutable=broken_hook)
    with capture_logs() as logs:
        first = relay.relay_once()
        second = relay.relay_once()

    assert first.published == [1]
    assert first.failed == [2]
    assert second.published == []
    assert second.failed == [2]
    assert seen == ["a"]
    assert outbox.published_calls == [[1]]
    hook_failures = [entry for entry in logs if entry["event"] == "outbox_unroutable_hook_failed"]
    assert [entry["record_id"] for entry in hook_failures] == [2, 2]


def test_interrupted_pass_marks_records_already_dispatched(wired):
    registry, seen = wired

    def stop(event: OrderCompleted) -> None:
        raise KeyboardInterrupt

    registry.react_to("order.stop", stop)
    outbox = InMemoryOutbox([
        OutboxRecord(1, "order.completed", b'{"OrderID": "a"}'),
        OutboxRecord(9, "order.stop", b"{}"),
        OutboxRecord(2, "order.completed", b'{"OrderID": "b"}'),
    ])

    with pytest.raises(KeyboardInterrupt):
        OutboxRelay(registry, outbox).relay_once()

    assert seen == ["a"]
    assert outbox.published_calls == [[1]]
