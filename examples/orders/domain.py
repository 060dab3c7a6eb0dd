"""Orders domain: events and the business error handlers may report."""
from dataclasses import dataclass

from pydantic import BaseModel


@dataclass
class OrderCreated:
    order_id: str
    customer_id: str
    total_cents: int


@dataclass
class OrderCompleted:
    OrderID: str


class StockReserved(BaseModel):
    sku: str
    quantity: int
    order_id: str


class InsufficientStock(Exception):
    def __init__(self, sku: str, requested: int, available: int) -> None:
        super().__init__(f"insufficient stock for {sku}: requested {requested}, available {available}")
        self.sku = sku
