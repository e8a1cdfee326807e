"""Domain service: Order Factory.

Builds line items and new orders.  The factory owns the two things an
order cannot invent for itself: its identifier and the clock used for its
timestamps.  Tests inject both to get deterministic orders.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable
from decimal import Decimal

from orderflow.domain.model.order import Clock, LineItem, Order, utc_now
from orderflow.domain.model.value_objects import Money, Quantity


def new_order_id() -> str:
    return str(uuid.uuid4())


class OrderFactory:

    def __init__(
        self,
        id_factory: Callable[[], str] = new_order_id,
        clock: Clock = utc_now,
    ) -> None:
        self._id_factory = id_factory
        self._clock = clock

    def create_line_item(
        self,
        product_id: str,
        quantity: int,
        unit_price: str | int | float | Decimal,
    ) -> LineItem:
        """Validate raw values and build a LineItem.

        Raises ValidationError for an empty product id, a non-positive
        quantity or a non-positive price.
        """
        product = product_id.strip() if isinstance(product_id, str) else product_id
        return LineItem(
            product_id=product,
            quantity=Quantity(quantity),
            unit_price=Money.of(unit_price),
        )

    def create_order(self, items: Iterable[LineItem]) -> Order:
        """Create a new order in PENDING with a fresh identifier."""
        return Order.create(self._id_factory(), items, clock=self._clock)
