"""Order lifecycle state machine.

The set of statuses is closed, so the rules are plain lookup tables keyed by
``OrderStatus`` rather than one class per state.  Every member must appear in
each table; the test suite checks that, so adding a status without deciding
its transitions fails loudly.

    PENDING ──► PROCESSING ──► SHIPPED ──► DELIVERED
       │
       └──────► CANCELLED
"""

from __future__ import annotations

from enum import Enum

from orderflow.domain.exceptions import ValidationError


class OrderStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def description(self) -> str:
        return DESCRIPTIONS[self]

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self)

    @staticmethod
    def parse(value: OrderStatus | str) -> OrderStatus:
        """Accept an ``OrderStatus`` or its name in any case."""
        if isinstance(value, OrderStatus):
            return value
        try:
            return OrderStatus[str(value).strip().upper()]
        except KeyError:
            allowed = ", ".join(s.value for s in OrderStatus)
            raise ValidationError(
                f"Unknown order status {value!r} (expected one of: {allowed})"
            ) from None


# ---------------------------------------------------------------------------
# Transition rules
# ---------------------------------------------------------------------------

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# Default forward step; None marks a terminal status.
ADVANCES: dict[OrderStatus, OrderStatus | None] = {
    OrderStatus.PENDING: OrderStatus.PROCESSING,
    OrderStatus.PROCESSING: OrderStatus.SHIPPED,
    OrderStatus.SHIPPED: OrderStatus.DELIVERED,
    OrderStatus.DELIVERED: None,
    OrderStatus.CANCELLED: None,
}

DESCRIPTIONS: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Order received, waiting to be processed",
    OrderStatus.PROCESSING: "Order is being prepared for shipment",
    OrderStatus.SHIPPED: "Order has left the warehouse",
    OrderStatus.DELIVERED: "Order has been delivered to the customer",
    OrderStatus.CANCELLED: "Order was cancelled before processing",
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """True iff *target* is in the transition table row for *current*."""
    return target in TRANSITIONS[current]


def next_status(current: OrderStatus) -> OrderStatus | None:
    """Return where "advance" leads from *current*, or None when terminal."""
    return ADVANCES[current]


def is_terminal(status: OrderStatus) -> bool:
    return not TRANSITIONS[status]
