"""validate_handler: every shape rule, non-fatal, nothing registered."""
import functools
from dataclasses import dataclass
from typing import Any, Optional, Union

import pytest
from pydantic import BaseModel

from eventroute import Registry, ValidationError, validate_handler
from eventroute.events import HandlerDescriptor
from eventroute.events.handler import inspect_handler
from tests import sample_handlers


@dataclass
class OrderCompleted:
    OrderID: str


class OrderModel(BaseModel):
    order_id: str


class BusinessError(Exception):
    pass


class TestValidHandlers:
    def test_dataclass_input_exception_or_none(self):
        def handler(event: OrderCompleted) -> Exception | None:
            return None

        assert validate_handler(handler) is None

    def test_pydantic_input_returns_none(self):
        def handler(event: OrderModel) -> None:
            pass

        assert validate_handler(handler) is None

    @pytest.mark.parametrize(
        "returns",
        [None, Exception, BusinessError, Optional[BusinessError], Union[BusinessError, ValueError, None]],
    )
    def test_error_signal_returns(self, returns):
        def handler(event: OrderCompleted):
            return None

        handler.__annotations__["return"] = returns
        assert validate_handler(handler) is None

    def test_string_annotations_are_resolved(self):
        assert validate_handler(sample_handlers.order_completed) is None

    def test_string_annotations_on_callable_object(self):
        assert inspect_handler(sample_handlers.OrderAudit()) is sample_handlers.OrderCompleted

    def test_string_annotations_on_partial(self):
        handler = functools.partial(sample_handlers.tagged, "audit")
        assert inspect_handler(handler) is sample_handlers.OrderCompleted

    def test_callable_object(self):
        class Handler:
            def __call__(self, event: OrderCompleted) -> None:
                pass

        assert validate_handler(Handler()) is None

    def test_partial_binding_the_leading_arguments(self):
        def handler(prefix: str, event: OrderCompleted) -> None:
            pass

        assert validate_handler(functools.partial(handler, "x")) is None

    def test_validation_does_not_register(self):
        registry = Registry()

        def handler(event: OrderCompleted) -> None:
            pass

        assert validate_handler(handler) is None
        assert len(registry) == 0


class TestInvalidHandlers:
    @pytest.mark.parametrize("value", [None, 42, "order.completed", OrderCompleted(OrderID="1")])
    def test_not_callable(self, value):
        err = validate_handler(value)
        assert isinstance(err, ValidationError)
        assert err.rule == "callable"
        assert "not a function" in str(err)

    def test_class_is_not_a_handler(self):
        err = validate_handler(OrderCompleted)
        assert err.rule == "callable"
        assert "class" in str(err)

    def test_no_parameters(self):
        def handler() -> None:
            pass

        err = validate_handler(handler)
        assert err.rule == "arity"
        assert "got: 0" in str(err)
        assert err.found == 0

    def test_two_parameters(self):
        err = validate_handler(sample_handlers.not_a_handler)
        assert err.rule == "arity"
        assert "got: 2" in str(err)

    def test_var_args_only(self):
        def handler(*events: OrderCompleted) -> None:
            pass

        assert validate_handler(handler).rule == "arity"

    def test_keyword_only(self):
        def handler(*, event: OrderCompleted) -> None:
            pass

        assert validate_handler(handler).rule == "arity"

    def test_missing_input_annotation(self):
        def handler(event) -> None:
            pass

        err = validate_handler(handler)
        assert err.rule == "input"
        assert "no type annotation" in str(err)

    @pytest.mark.parametrize("annotation", [str, int, dict, Any, Optional[OrderCompleted], list[OrderCompleted]])
    def test_input_not_a_record(self, annotation):
        def handler(event) -> None:
            pass

        handler.__annotations__["event"] = annotation
        err = validate_handler(handler)
        assert err.rule == "input"
        assert "dataclass or pydantic model" in str(err)
        assert err.found is annotation

    def test_plain_class_input(self):
        class NotARecord:
            pass

        def handler(event: NotARecord) -> None:
            pass

        err = validate_handler(handler)
        assert err.rule == "input"
        assert "NotARecord" in str(err)

    def test_unresolvable_string_annotation(self):
        def handler(event: "MissingType") -> None:
            pass

        err = validate_handler(handler)
        assert err.rule == "input"
        assert "MissingType" in str(err)
        assert isinstance(err.__cause__, NameError)

    def test_unresolvable_string_return_annotation(self):
        err = validate_handler(sample_handlers.unknown_output)
        assert err.rule == "output"
        assert "RefundRejected" in str(err)
    def test_missing_return_annotation(self):
        def handler(event: OrderCompleted):
            pass

        err = validate_handler(handler)
        assert err.rule == "output"
        assert "got: none" in str(err)

    @pytest.mark.parametrize("returns", [int, bool, str, OrderCompleted, Optional[int], Union[BusinessError, int]])
    def test_wrong_return_type(self, returns):
        def handler(event: OrderCompleted):
            pass

        handler.__annotations__["return"] = returns
        err = validate_handler(handler)
        assert err.rule == "output"
        assert "Exception | None" in str(err)

    def test_builtin_with_two_parameters(self):
        assert validate_handler(dict.fromkeys).rule == "arity"


def test_validation_error_is_type_error():
    err = validate_handler(42)
    assert isinstance(err, TypeError)
    assert str(err).startswith("eventroute: ")


def test_descriptor_is_immutable():
    descriptor = HandlerDescriptor.of("order.completed", sample_handlers.order_completed)
    assert descriptor.event_type is sample_handlers.OrderCompleted
    with pytest.raises(AttributeError):
        descriptor.event_name = "other"  # type: ignore[misc]


def test_descriptor_of_invalid_handler_raises():
    with pytest.raises(ValidationError):
        HandlerDescriptor.of("order.completed", sample_handlers.not_a_handler)
