"""Abstract repository for the Order aggregate.

Implementations must be safe to call from several threads at once without
any locking by the caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderflow.domain.model.order import Order
from orderflow.domain.model.status import OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def add(self, order: Order) -> None:
        """Register a new order.

        Raises DuplicateOrderError if the id is already present.
        """

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return the canonical order instance, or None if unknown."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return a point-in-time snapshot of every order, in no particular order."""

    @abstractmethod
    def list_by_status(self, status: OrderStatus) -> list[Order]:
        """Return orders whose status is *status* at the time of the call."""
