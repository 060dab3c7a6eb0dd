"""
Run from this folder: python main.py
Shows direct dispatch, subject-derived names, the outbox relay and the HTTP ingress app.
"""
from __future__ import annotations

from typing import Any

from handlers import registry

from eventroute import DecodeError, NoHandlerError, Settings, SubjectRouter, configure_logging
from eventroute.events import OutboxRecord, OutboxRelay
from eventroute.http import create_ingress


class InMemoryOutbox:
    """Stand-in for a table written in the same transaction as the aggregate."""

    def __init__(self, records: list[OutboxRecord]) -> None:
        self.records = {r.id: r for r in records}

    def fetch_pending(self) -> list[OutboxRecord]:
        return list(self.records.values())

    def mark_published(self, ids: list[Any]) -> None:
        for record_id in ids:
            self.records.pop(record_id, None)


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level, json_format=settings.log_json)

    registry.dispatch("order.completed", b'{"OrderID": "123"}')

    try:
        registry.dispatch("order.completed", b'{"OrderID": 123}')
    except DecodeError as e:
        print(f"rejected: {e}")

    try:
        registry.dispatch("unknown.event", b"{}")
    except NoHandlerError as e:
        print(f"dead-letter: {e.event_name}")

    # NATS subject: sales.events.private.<entity>.<id>.<action>
    router = SubjectRouter(registry, "sales.events.private.", drop=[1])
    router.dispatch("sales.events.private.order.456.completed", b'{"OrderID": "456"}')

    outbox = InMemoryOutbox([
        OutboxRecord(1, "order.created", b'{"order_id": "789", "customer_id": "c-1", "total_cents": 1999}'),
        OutboxRecord(2, "stock.reserved", b'{"sku": "sku-1", "quantity": 3, "order_id": "789"}'),
        OutboxRecord(3, "stock.reserved", b'{"sku": "sku-1", "quantity": 99, "order_id": "790"}'),
    ])
    report = OutboxRelay(registry, outbox).relay_once()
    print(f"outbox: published={report.published} failed={report.failed}")


# serve with any ASGI server, e.g. uvicorn main:ingress
ingress = create_ingress(registry)


if __name__ == "__main__":
    main()
