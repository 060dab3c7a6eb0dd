"""Error taxonomy: registration errors are programmer errors, dispatch errors are recoverable."""
from __future__ import annotations

from typing import Any


class EventRouteError(Exception):
    """Base class for every error raised by the registry itself."""


class EmptyNameError(EventRouteError, ValueError):
    """Event name is empty (registration or dispatch)."""

    def __init__(self) -> None:
        super().__init__("eventroute: event name is empty")


class RegistrationError(EventRouteError):
    """Wiring bug detected at registration time. Not meant to be caught."""


class ValidationError(RegistrationError, TypeError):
    """
    Handler does not have the shape func(event: Record) -> Exception | None.
    rule is one of "callable", "arity", "input", "output"; found describes what was there instead.
    """

    def __init__(self, rule: str, message: str, found: Any = None) -> None:
        super().__init__(f"eventroute: {message}")
        self.rule = rule
        self.found = found


class DuplicateRegistrationError(RegistrationError):
    """Event name already has a handler."""

    def __init__(self, event_name: str) -> None:
        super().__init__(f"eventroute: event {event_name!r} already has a handler")
        self.event_name = event_name


class DispatchError(EventRouteError):
    """Dispatch-time failure produced by the registry (not by the handler)."""


class NoHandlerError(DispatchError, LookupError):
    """No handler registered for the event; typically routed to a dead-letter path."""

    def __init__(self, event_name: str) -> None:
        super().__init__(f"eventroute: no handler for event {event_name!r}")
        self.event_name = event_name


class DecodeError(DispatchError):
    """Payload could not be decoded into the handler's record type. The decoder failure is __cause__."""

    def __init__(self, event_name: str, cause: BaseException | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"eventroute: failed to decode event {event_name!r}{detail}")
        self.event_name = event_name
        self.__cause__ = cause
