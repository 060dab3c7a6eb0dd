"""
Outbox relay. Contract: fetch pending records + dispatch + mark published.
Storage (DB schema, polling schedule): user's implementation of OutboxSource.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, runtime_checkable

import structlog

from eventroute.events.decoder import Payload
from eventroute.events.errors import NoHandlerError
from eventroute.events.registry import Registry

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OutboxRecord:
    """One stored event: written in the same transaction as the aggregate, dispatched later."""

    id: Any
    event_name: str
    payload: Payload


@runtime_checkable
class OutboxSource(Protocol):
    """
    Fetch unpublished records and mark them done.
    User implements for their DB; the relay calls it from a worker/cron.
    """

    def fetch_pending(self) -> list[OutboxRecord]:
        ...

    def mark_published(self, ids: list[Any]) -> None:
        ...


@dataclass
class RelayReport:
    published: list[Any] = field(default_factory=list)
    unroutable: list[Any] = field(default_factory=list)
    failed: list[Any] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.published) + len(self.unroutable) + len(self.failed)


class OutboxRelay:
    """
    Drains an OutboxSource into a Registry.
    on_unroutable(record, error) is the dead-letter hook for NoHandlerError; when set,
    unroutable records are marked published. Other failures, including a failing hook,
    stay pending for the next run.
    """

    def __init__(
        self,
        registry: Registry,
        source: OutboxSource,
        *,
        on_unroutable: Callable[[OutboxRecord, NoHandlerError], None] | None = None,
    ) -> None:
        self._registry = registry
        self._source = source
        self._on_unroutable = on_unroutable

    def relay_once(self) -> RelayReport:
        """
        One pass over the pending records. Records dispatched (or dead-lettered) so far are
        marked published even when the pass is interrupted.
        """
        report = RelayReport()
        done: list[Any] = []
        try:
            for record in self._source.fetch_pending():
                try:
                    self._registry.dispatch(record.event_name, record.payload)
                except NoHandlerError as e:
                    if self._dead_letter(record, e):
                        report.unroutable.append(record.id)
                        if self._on_unroutable is not None:
                            done.append(record.id)
                    else:
                        report.failed.append(record.id)
                except Exception as e:
                    report.failed.append(record.id)
                    logger.warning(
                        "outbox_dispatch_failed",
                        record_id=record.id,
                        event_name=record.event_name,
                        error_type=type(e).__name__,
                        error=str(e),
                    )
                else:
                    report.published.append(record.id)
                    done.append(record.id)
        finally:
            if done:
                self._source.mark_published(done)
        logger.debug(
            "outbox_relayed",
            published=len(report.published),
            unroutable=len(report.unroutable),
            failed=len(report.failed),
        )
        return report

    def _dead_letter(self, record: OutboxRecord, error: NoHandlerError) -> bool:
        """Run on_unroutable; False when the hook itself fails (the record stays pending)."""
        if self._on_unroutable is None:
            return True
        try:
            self._on_unroutable(record, error)
        except Exception as e:
            logger.warning(
                "outbox_unroutable_hook_failed",
                record_id=record.id,
                event_name=record.event_name,
                error_type=type(e).__name__,
                error=str(e),
            )
            return False
        return True
