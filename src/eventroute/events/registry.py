"""
Registry: event name -> handler. react_to() at startup, dispatch() per incoming message.

    registry = Registry()

    @registry.on("order.completed")
    def order_completed(event: OrderCompleted) -> Exception | None:
        ...

    registry.dispatch("order.completed", b'{"OrderID": "123"}')

Not synchronized: finish registration before dispatching from several threads.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterator

import structlog

from eventroute.events.decoder import DEFAULT_DECODER, Decoder, Payload, as_bytes
from eventroute.events.errors import (
    DecodeError,
    DuplicateRegistrationError,
    EmptyNameError,
    NoHandlerError,
)
from eventroute.events.handler import Handler, HandlerDescriptor

if TYPE_CHECKING:
    from eventroute.core.config import Settings

logger = structlog.get_logger(__name__)


class Registry:
    """Maps event names to handlers and dispatches raw payloads to them."""

    def __init__(self, decoder: Decoder | None = None) -> None:
        self._handlers: dict[str, HandlerDescriptor] | None = None
        self.decoder = decoder

    @classmethod
    def from_settings(cls, settings: Settings) -> Registry:
        return cls(decoder=settings.build_decoder())

    def react_to(self, event_name: str, handler: Handler) -> None:
        """
        Register handler for event_name.
        Raises EmptyNameError, ValidationError or DuplicateRegistrationError; all are wiring bugs.
        """
        if not event_name:
            raise EmptyNameError()

        descriptor = HandlerDescriptor.of(event_name, handler)

        if self._handlers is None:
            self._handlers = {}
        if event_name in self._handlers:
            raise DuplicateRegistrationError(event_name)

        self._handlers[event_name] = descriptor
        logger.debug(
            "handler_registered",
            event_name=event_name,
            event_type=descriptor.event_type.__qualname__,
            handler=getattr(handler, "__qualname__", repr(handler)),
        )

    def on(self, event_name: str) -> Callable[[Handler], Handler]:
        """Decorator form of react_to(); returns the function unchanged."""

        def decorator(fn: Handler) -> Handler:
            self.react_to(event_name, fn)
            return fn

        return decorator

    def dispatch(self, event_name: str, payload: Payload) -> None:
        """
        Decode payload into the handler's record type and call the handler once.
        Raises EmptyNameError, NoHandlerError, DecodeError; handler errors propagate unchanged.
        """
        if not event_name:
            raise EmptyNameError()

        descriptor = self.handler_for(event_name)
        if descriptor is None:
            logger.info("no_handler", event_name=event_name)
            raise NoHandlerError(event_name)

        try:
            event = self._decode(as_bytes(payload), descriptor.event_type)
        except Exception as e:
            logger.warning(
                "decode_failed",
                event_name=event_name,
                event_type=descriptor.event_type.__qualname__,
                error=str(e),
            )
            raise DecodeError(event_name, e) from e

        descriptor.invoke(event)
        logger.debug("event_dispatched", event_name=event_name)

    def _decode(self, data: bytes, target: type) -> object:
        decoder = self.decoder
        if decoder is None:
            decoder = DEFAULT_DECODER
        return decoder.decode(data, target)

    def handler_for(self, event_name: str) -> HandlerDescriptor | None:
        if not self._handlers:
            return None
        return self._handlers.get(event_name)

    def names(self) -> list[str]:
        """Registered event names, sorted."""
        return sorted(self._handlers or ())

    def __contains__(self, event_name: object) -> bool:
        return event_name in (self._handlers or {})

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._handlers or ())

    def __repr__(self) -> str:
        return f"Registry(events={len(self)}, decoder={self.decoder or DEFAULT_DECODER!r})"
