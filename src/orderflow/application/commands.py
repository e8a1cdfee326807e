"""Application service: Create Order as an undoable command."""

from __future__ import annotations

from collections.abc import Iterable

from orderflow.application.dto import OrderItemSpec
from orderflow.application.order_coordinator import OrderCoordinator
from orderflow.domain.model.order import Order


class CreateOrderCommand:
    """Creates one order on ``execute``; ``undo`` cancels it.

    Undo goes through the normal cancellation rules, so it only succeeds
    while the order is still PENDING.
    """

    def __init__(
        self,
        coordinator: OrderCoordinator,
        item_specs: Iterable[OrderItemSpec],
    ) -> None:
        self._coordinator = coordinator
        self._item_specs = tuple(item_specs)
        self._created: Order | None = None

    @property
    def created_order_id(self) -> str | None:
        return self._created.id if self._created is not None else None

    def execute(self) -> Order:
        if self._created is not None:
            raise RuntimeError(f"Command already executed (order {self._created.id})")
        self._created = self._coordinator.create_order(self._item_specs)
        return self._created

    def undo(self) -> bool:
        if self._created is None:
            return False
        return self._coordinator.cancel_order(self._created.id)
