"""Order aggregate, the core of the domain.

The Order owns an immutable tuple of line items and the single source of
truth for its status.  Status only ever changes through
``request_transition`` or ``advance``, both of which hold the order's own
lock, so at most one transition is in flight per order.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone

from orderflow.domain.exceptions import InvalidTransitionError, ValidationError
from orderflow.domain.model.status import OrderStatus, can_transition, next_status
from orderflow.domain.model.value_objects import Money, Quantity

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LineItem:
    """One product line: what was ordered, how many, at what unit price."""

    product_id: str
    quantity: Quantity
    unit_price: Money

    def __post_init__(self) -> None:
        if not isinstance(self.product_id, str) or not self.product_id.strip():
            raise ValidationError("Product ID cannot be empty")
        if not isinstance(self.quantity, Quantity):
            raise ValidationError("Line item quantity must be a Quantity")
        if not isinstance(self.unit_price, Money):
            raise ValidationError("Line item unit price must be Money")
        if not self.unit_price.is_positive:
            raise ValidationError(
                f"Price for {self.product_id} must be greater than zero"
            )

    @property
    def line_total(self) -> Money:
        return self.unit_price.times(self.quantity)


class Order:
    """Aggregate root for customer orders.

    Use ``Order.create()`` for new orders; it enforces the invariants.
    The ``__init__`` trusts its arguments.
    """

    def __init__(
        self,
        id: str,
        items: tuple[LineItem, ...],
        created_at: datetime,
        status: OrderStatus = OrderStatus.PENDING,
        clock: Clock = utc_now,
    ) -> None:
        self._id = id
        self._items = items
        self._total = _sum_line_totals(items)
        self._created_at = created_at
        self._updated_at = created_at
        self._status = status
        self._history: list[OrderStatus] = [status]
        self._clock = clock
        self._lock = threading.RLock()

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_id: str,
        items: Iterable[LineItem],
        clock: Clock = utc_now,
    ) -> Order:
        """Create a new PENDING order, enforcing all invariants."""
        if not order_id:
            raise ValidationError("Order ID is required")

        snapshot = tuple(items)
        if not snapshot:
            raise ValidationError("Order must contain at least one item")
        for item in snapshot:
            if not isinstance(item, LineItem):
                raise ValidationError(
                    f"Order items must be LineItem, got {type(item).__name__}"
                )

        order = Order(id=order_id, items=snapshot, created_at=clock(), clock=clock)
        logger.debug(
            "Created order %s with %d item(s), total %s",
            order.id, len(snapshot), order.total,
        )
        return order

    # --- Read access ----------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def items(self) -> tuple[LineItem, ...]:
        return self._items

    @property
    def total(self) -> Money:
        return self._total

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        with self._lock:
            return self._updated_at

    @property
    def status(self) -> OrderStatus:
        with self._lock:
            return self._status

    @property
    def history(self) -> tuple[OrderStatus, ...]:
        """Every status this order has held, oldest first."""
        with self._lock:
            return tuple(self._history)

    @contextmanager
    def exclusive(self) -> Iterator[Order]:
        """Hold this order's lock across a check-then-act sequence.

        The lock is reentrant, so ``request_transition`` and ``advance`` may
        be called inside the block.
        """
        with self._lock:
            yield self

    # --- State transitions ----------------------------------------------------

    def request_transition(self, target: OrderStatus) -> None:
        """Move to *target* or raise InvalidTransitionError naming both ends."""
        with self._lock:
            current = self._status
            if not can_transition(current, target):
                logger.debug(
                    "Order %s: %s -> %s rejected", self._id, current.value, target.value
                )
                raise InvalidTransitionError(current, target)
            self._apply(target)

    def advance(self) -> OrderStatus | None:
        """Take the default forward step.

        Returns the new status, or None if the order is already terminal.
        """
        with self._lock:
            target = next_status(self._status)
            if target is None:
                return None
            self.request_transition(target)
            return target

    # --- Internal helpers -----------------------------------------------------

    def _apply(self, target: OrderStatus) -> None:
        previous = self._status
        self._status = target
        self._updated_at = self._clock()
        self._history.append(target)
        logger.debug("Order %s: %s -> %s", self._id, previous.value, target.value)

    def __repr__(self) -> str:
        return (
            f"Order(id={self._id!r}, status={self.status.value}, "
            f"items={len(self._items)}, total={self._total})"
        )


def _sum_line_totals(items: Iterable[LineItem]) -> Money:
    result = Money.zero()
    for item in items:
        result = result + item.line_total
    return result
