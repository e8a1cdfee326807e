"""Data Transfer Objects: plain containers that cross layer boundaries.

``OrderItemSpec`` is what callers hand in; ``OrderSnapshot`` is the frozen,
point-in-time view of an order that observers and the CLI receive.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from orderflow.domain.model.order import Order
from orderflow.domain.model.status import OrderStatus
from orderflow.domain.model.value_objects import Money


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one requested line (product id, quantity, unit price)."""

    product_id: str
    quantity: int
    unit_price: str | int | float | Decimal


@dataclass(frozen=True)
class LineItemSnapshot:
    product_id: str
    quantity: int
    unit_price: Money
    line_total: Money


@dataclass(frozen=True)
class OrderSnapshot:
    """Output: an order as it was at one instant."""

    id: str
    status: OrderStatus
    items: tuple[LineItemSnapshot, ...]
    total: Money
    created_at: datetime
    updated_at: datetime

    @staticmethod
    def from_order(order: Order) -> OrderSnapshot:
        # status and updated_at must come from the same instant
        with order.exclusive():
            status = order.status
            updated_at = order.updated_at
        return OrderSnapshot(
            id=order.id,
            status=status,
            items=tuple(
                LineItemSnapshot(
                    product_id=item.product_id,
                    quantity=item.quantity.value,
                    unit_price=item.unit_price,
                    line_total=item.line_total,
                )
                for item in order.items
            ),
            total=order.total,
            created_at=order.created_at,
            updated_at=updated_at,
        )
