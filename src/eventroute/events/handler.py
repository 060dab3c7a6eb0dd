"""
Handler shape validation and the descriptor stored in the registry.

A handler is a function (or callable object) of the form

    def on_order_completed(event: OrderCompleted) -> Exception | None:
        ...

where OrderCompleted is a record type: a dataclass or a pydantic model.
Returning None signals success; returning an exception instance signals failure.
"""
from __future__ import annotations

import dataclasses
import functools
import inspect
import types
from dataclasses import dataclass
from typing import Any, Callable, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from eventroute.events.errors import ValidationError

Handler = Callable[[Any], Union[BaseException, None]]

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def is_record_type(tp: Any) -> bool:
    """True for dataclass classes and pydantic model classes."""
    if not isinstance(tp, type) or get_origin(tp) is not None:
        return False
    if dataclasses.is_dataclass(tp):
        return True
    return issubclass(tp, BaseModel)


def _is_exception_class(tp: Any) -> bool:
    return isinstance(tp, type) and get_origin(tp) is None and issubclass(tp, BaseException)


def is_error_signal(tp: Any) -> bool:
    """True for None, an exception class, or an Optional/union of exception classes."""
    if tp is None or tp is type(None):
        return True
    if get_origin(tp) in (Union, types.UnionType):
        args = get_args(tp)
        errors = [a for a in args if a is not type(None)]
        return len(errors) < len(args) and all(_is_exception_class(a) for a in errors)
    return _is_exception_class(tp)


def _type_hints(handler: Any) -> dict[str, Any]:
    """typing.get_type_hints of the function behind handler: partial, wrapper or callable object."""
    if isinstance(handler, functools.partial):
        handler = handler.func
    fn = inspect.unwrap(handler) if inspect.isroutine(handler) else type(handler).__call__
    return get_type_hints(fn)


def _mentions(annotation: Any, e: Exception) -> bool:
    name = getattr(e, "name", None)
    return isinstance(annotation, str) and bool(name) and name in annotation


def _name(tp: Any) -> str:
    return getattr(tp, "__qualname__", None) or repr(tp)


def inspect_handler(handler: Any) -> type:
    """Check the handler shape and return its record type. Raises ValidationError."""
    if isinstance(handler, type) or not callable(handler):
        kind = "class" if isinstance(handler, type) else type(handler).__name__
        raise ValidationError("callable", f"handler is not a function (got: {kind})", found=handler)

    try:
        sig = inspect.signature(handler)
    except (TypeError, ValueError) as e:
        raise ValidationError("callable", f"handler signature cannot be inspected ({e})", found=handler) from e

    params = list(sig.parameters.values())
    if len(params) != 1 or params[0].kind not in _POSITIONAL:
        shown = ", ".join(str(p) for p in params)
        raise ValidationError(
            "arity",
            f"handler should have 1 positional input parameter (got: {len(params)}: ({shown}))",
            found=len(params),
        )

    param = params[0]
    if param.annotation is inspect.Parameter.empty:
        raise ValidationError("input", f"handler input parameter {param.name!r} has no type annotation")
    event_type, returns = param.annotation, sig.return_annotation
    if isinstance(event_type, str) or isinstance(returns, str):
        try:
            hints = _type_hints(handler)
        except (NameError, SyntaxError) as e:
            if _mentions(returns, e) and not _mentions(event_type, e):
                raise ValidationError("output", f"handler output: cannot resolve {returns!r}: {e}", found=returns) from e
            raise ValidationError(
                "input",
                f"handler input parameter {param.name!r}: cannot resolve {event_type!r}: {e}",
                found=event_type,
            ) from e
        if isinstance(event_type, str):
            event_type = hints.get(param.name, event_type)
        if isinstance(returns, str):
            returns = hints.get("return", returns)

    if not is_record_type(event_type):
        raise ValidationError(
            "input",
            f"handler input parameter should be a dataclass or pydantic model (got: {_name(event_type)})",
            found=event_type,
        )

    if returns is inspect.Signature.empty:
        raise ValidationError("output", "handler should declare 1 output of type Exception | None (got: none)")
    if not is_error_signal(returns):
        raise ValidationError(
            "output",
            f"handler output should be Exception | None (got: {_name(returns)})",
            found=returns,
        )
    return event_type


def validate_handler(handler: Any) -> ValidationError | None:
    """Non-fatal shape check: returns the ValidationError instead of raising it. Registers nothing."""
    try:
        inspect_handler(handler)
    except ValidationError as e:
        return e
    return None


@dataclass(frozen=True)
class HandlerDescriptor:
    """Registered handler: record type to decode into plus the function to call."""

    event_name: str
    event_type: type
    handler: Handler

    @classmethod
    def of(cls, event_name: str, handler: Handler) -> HandlerDescriptor:
        return cls(event_name=event_name, event_type=inspect_handler(handler), handler=handler)

    def invoke(self, event: Any) -> None:
        """Call the handler; a returned exception is raised as-is."""
        result = self.handler(event)
        if result is None:
            return
        if isinstance(result, BaseException):
            raise result
        raise TypeError(
            f"eventroute: handler for {self.event_name!r} returned {type(result).__name__}, "
            "expected an exception or None"
        )
