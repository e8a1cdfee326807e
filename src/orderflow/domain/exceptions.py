"""Errors raised by the order lifecycle.

Bad input, a store id collision and a forbidden status change each have
their own class under DomainException; ``orderflow demo`` turns any of them
into a one-line ``Error:`` message instead of a traceback.

"Not found" is deliberately absent: lookups return ``None`` and cancellation
returns ``False`` because those are ordinary outcomes, not failures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from orderflow.domain.model.status import OrderStatus


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """Input was malformed; nothing was constructed."""


class InvalidTransitionError(DomainException):
    """A status change was requested that the transition table forbids."""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Cannot transition from {from_status.value} to {to_status.value}"
        )


class DuplicateOrderError(DomainException):
    """An order id was inserted twice into the store."""
