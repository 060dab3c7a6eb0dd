"""Handlers wired into one registry. CLI: eventroute names handlers:registry"""
from __future__ import annotations

from domain import InsufficientStock, OrderCompleted, OrderCreated, StockReserved

from eventroute import Registry

registry = Registry()

stock: dict[str, int] = {"sku-1": 10}
orders: dict[str, str] = {}


@registry.on("order.created")
def order_created(event: OrderCreated) -> None:
    orders[event.order_id] = "created"


@registry.on("order.completed")
def order_completed(event: OrderCompleted) -> None:
    print(f"Order {event.OrderID!r} is completed")
    orders[event.OrderID] = "completed"


@registry.on("stock.reserved")
def stock_reserved(event: StockReserved) -> InsufficientStock | None:
    available = stock.get(event.sku, 0)
    if event.quantity > available:
        return InsufficientStock(event.sku, event.quantity, available)
    stock[event.sku] = available - event.quantity
    return None
