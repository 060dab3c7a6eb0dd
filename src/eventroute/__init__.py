"""
eventroute: in-process event dispatch by name.
Register one typed handler per event name; dispatch raw payloads; the registry decodes and calls.
"""
from eventroute.core import Settings, configure_logging
from eventroute.events import (
    DEFAULT_DECODER,
    DecodeError,
    DecodeFunc,
    Decoder,
    DispatchError,
    DuplicateRegistrationError,
    EmptyNameError,
    EventRouteError,
    JsonDecoder,
    MsgpackDecoder,
    NoHandlerError,
    Registry,
    RegistrationError,
    SubjectRouter,
    ValidationError,
    event_name_from_subject,
    validate_handler,
)

__all__ = [
    "Registry",
    "validate_handler",
    "Decoder",
    "DecodeFunc",
    "JsonDecoder",
    "MsgpackDecoder",
    "DEFAULT_DECODER",
    "EventRouteError",
    "EmptyNameError",
    "RegistrationError",
    "ValidationError",
    "DuplicateRegistrationError",
    "DispatchError",
    "NoHandlerError",
    "DecodeError",
    "SubjectRouter",
    "event_name_from_subject",
    "Settings",
    "configure_logging",
]
