"""
Decoder capability: raw bytes + record type -> populated instance.
One decoder per Registry; JSON by default, msgpack or a user function on request.

The built-in decoders start from the zero value of the record: a required field the payload
leaves out gets "" / 0 / False / an empty container / None, and a null payload decodes to
the all-zero record.
"""
from __future__ import annotations

import dataclasses
import json
import types
from collections.abc import Mapping, Sequence
from collections.abc import Set as AbstractSet
from dataclasses import MISSING
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import (
    Annotated,
    Any,
    Callable,
    Literal,
    Protocol,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
    runtime_checkable,
)

from pydantic import BaseModel, TypeAdapter

from eventroute.events.handler import is_record_type

T = TypeVar("T")

Payload = bytes | bytearray | memoryview | str


@runtime_checkable
class Decoder(Protocol):
    """Decode payload into an instance of target. Raise on failure."""

    def decode(self, payload: bytes, target: type[T]) -> T:
        ...


class DecodeFunc:
    """Adapts a plain function fn(payload, target) -> instance to the Decoder protocol."""

    def __init__(self, fn: Callable[[bytes, type[Any]], Any]) -> None:
        self._fn = fn

    def decode(self, payload: bytes, target: type[T]) -> T:
        return self._fn(payload, target)

    def __repr__(self) -> str:
        return f"DecodeFunc({getattr(self._fn, '__name__', self._fn)!r})"


@lru_cache(maxsize=None)
def _adapter(target: type[Any]) -> TypeAdapter[Any]:
    return TypeAdapter(target)


_NO_ZERO = object()


@lru_cache(maxsize=None)
def _fields(target: type[Any]) -> tuple[tuple[tuple[str, ...], Any, bool], ...]:
    """(payload keys, resolved type, required) per field of a dataclass or pydantic model."""
    if isinstance(target, type) and issubclass(target, BaseModel):
        return tuple(
            ((info.alias, name) if info.alias else (name,), info.annotation, info.is_required())
            for name, info in target.model_fields.items()
        )
    hints = get_type_hints(target)
    return tuple(
        ((f.name,), hints.get(f.name, Any), f.default is MISSING and f.default_factory is MISSING)
        for f in dataclasses.fields(target)
        if f.init
    )


def zero_value(tp: Any) -> Any:
    """
    JSON-compatible zero value for tp: "" for str, 0 for numbers, False, empty containers,
    None for Optional and Any, a zero-filled mapping for a nested record.
    Types without a zero value (datetime, enums) return _NO_ZERO and stay missing.
    """
    origin = get_origin(tp)
    if tp is Any or tp is None or tp is type(None):
        return None
    if origin is Annotated:
        return zero_value(get_args(tp)[0])
    if origin in (Union, types.UnionType):
        args = get_args(tp)
        return None if type(None) in args else zero_value(args[0])
    if origin is Literal:
        return get_args(tp)[0]
    if origin is not None:
        tp = origin
    if is_record_type(tp):
        return fill_zero_values(tp, {})
    if not isinstance(tp, type) or issubclass(tp, Enum):
        return _NO_ZERO
    if issubclass(tp, (str, bytes)):
        return ""
    if issubclass(tp, bool):
        return False
    if issubclass(tp, (int, Decimal)):
        return 0
    if issubclass(tp, float):
        return 0.0
    if issubclass(tp, Mapping):
        return {}
    if issubclass(tp, (Sequence, AbstractSet)):
        return []
    return _NO_ZERO


def fill_zero_values(target: type[Any], data: Any) -> Any:
    """
    Give every required field of target that data leaves out its zero value, recursing into
    nested records present as mappings. Non-mapping data is returned unchanged for the
    validator to reject. Returns data itself when nothing was filled.
    """
    if not isinstance(data, dict) or not is_record_type(target):
        return data
    filled: dict[str, Any] | None = None
    for keys, tp, required in _fields(target):
        key = next((k for k in keys if k in data), keys[0])
        if key in data:
            value = data[key]
            nested = fill_zero_values(tp, value) if isinstance(value, dict) else value
            if nested is value:
                continue
        elif required:
            nested = zero_value(tp)
            if nested is _NO_ZERO:
                continue
        else:
            continue
        if filled is None:
            filled = dict(data)
        filled[key] = nested
    return data if filled is None else filled


class JsonDecoder:
    """
    UTF-8 JSON object -> record type via pydantic.
    Keys map to field names; unknown keys are ignored; missing fields take their zero value;
    wrong types fail. strict=True turns off lax coercions such as "5" -> 5.
    """

    def __init__(self, *, strict: bool = False) -> None:
        self.strict = strict

    def decode(self, payload: bytes, target: type[T]) -> T:
        data = json.loads(payload)
        filled = fill_zero_values(target, {} if data is None else data)
        if filled is data:
            return _adapter(target).validate_json(payload, strict=self.strict)
        return _adapter(target).validate_json(json.dumps(filled), strict=self.strict)

    def __repr__(self) -> str:
        return f"JsonDecoder(strict={self.strict})"


class MsgpackDecoder:
    """msgpack map -> record type. Field rules are the same as JsonDecoder."""

    def __init__(self, *, strict: bool = False) -> None:
        self.strict = strict

    def decode(self, payload: bytes, target: type[T]) -> T:
        try:
            import msgpack
        except ImportError:
            raise RuntimeError("MsgpackDecoder requires msgpack; pip install 'eventroute[msgpack]'")
        data = msgpack.unpackb(payload, raw=False)
        data = fill_zero_values(target, {} if data is None else data)
        return _adapter(target).validate_python(data, strict=self.strict)

    def __repr__(self) -> str:
        return f"MsgpackDecoder(strict={self.strict})"


JSON_DECODER = JsonDecoder()

DEFAULT_DECODER: Decoder = JSON_DECODER

_DECODERS: dict[str, type[JsonDecoder] | type[MsgpackDecoder]] = {
    "json": JsonDecoder,
    "msgpack": MsgpackDecoder,
}


def decoder_for(name: str, *, strict: bool = False) -> Decoder:
    """Decoder by configured name ("json", "msgpack")."""
    try:
        cls = _DECODERS[name.strip().lower()]
    except KeyError:
        raise ValueError(f"unknown decoder {name!r}; expected one of {sorted(_DECODERS)}") from None
    return cls(strict=strict)


def as_bytes(payload: Payload) -> bytes:
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return bytes(payload)
