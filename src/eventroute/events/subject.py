"""Event names derived from broker subjects / topics (NATS, Kafka, ...)."""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from eventroute.events.decoder import Payload
from eventroute.events.registry import Registry

if TYPE_CHECKING:
    from eventroute.core.config import Settings


def event_name_from_subject(subject: str, prefix: str = "", *, drop: Iterable[int] = ()) -> str:
    """
    Strip prefix and drop positional segments.

    event_name_from_subject("sales.events.private.order.123.completed", "sales.events.private.", drop=[1])
    -> "order.completed"
    """
    if not subject.startswith(prefix):
        raise ValueError(f"subject {subject!r} does not start with prefix {prefix!r}")
    parts = subject[len(prefix):].split(".")
    skip = {i if i >= 0 else len(parts) + i for i in drop}
    return ".".join(p for i, p in enumerate(parts) if i not in skip)


class SubjectRouter:
    """Dispatch by subject: the event name is derived, then handed to the registry."""

    def __init__(self, registry: Registry, prefix: str = "", *, drop: Iterable[int] = ()) -> None:
        self.registry = registry
        self.prefix = prefix
        self.drop = tuple(drop)

    @classmethod
    def from_settings(cls, registry: Registry, settings: Settings, *, drop: Iterable[int] = ()) -> SubjectRouter:
        return cls(registry, settings.subject_prefix, drop=drop)

    def event_name(self, subject: str) -> str:
        return event_name_from_subject(subject, self.prefix, drop=self.drop)

    def dispatch(self, subject: str, payload: Payload) -> None:
        self.registry.dispatch(self.event_name(subject), payload)
