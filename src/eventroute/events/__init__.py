from eventroute.events.decoder import (
    DEFAULT_DECODER,
    JSON_DECODER,
    Decoder,
    DecodeFunc,
    JsonDecoder,
    MsgpackDecoder,
    decoder_for,
)
from eventroute.events.errors import (
    DecodeError,
    DispatchError,
    DuplicateRegistrationError,
    EmptyNameError,
    EventRouteError,
    NoHandlerError,
    RegistrationError,
    ValidationError,
)
from eventroute.events.handler import HandlerDescriptor, validate_handler
from eventroute.events.outbox import OutboxRecord, OutboxRelay, OutboxSource, RelayReport
from eventroute.events.registry import Registry
from eventroute.events.subject import SubjectRouter, event_name_from_subject

__all__ = [
    "Registry",
    "HandlerDescriptor",
    "validate_handler",
    "Decoder",
    "DecodeFunc",
    "JsonDecoder",
    "MsgpackDecoder",
    "JSON_DECODER",
    "DEFAULT_DECODER",
    "decoder_for",
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
    "OutboxRecord",
    "OutboxSource",
    "OutboxRelay",
    "RelayReport",
]
