"""Application service: the single entry point for the order lifecycle.

Composes the factory, the store and the observer notifier.  Creation,
cancellation and shipment progression all go through here; every committed
status change is announced to the observers (one of which is normally the
PendingOrderScheduler).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from orderflow.application.dto import OrderItemSpec
from orderflow.application.notifier import OrderNotifier, OrderObserver
from orderflow.domain.exceptions import ValidationError
from orderflow.domain.model.order import Order
from orderflow.domain.model.status import OrderStatus
from orderflow.domain.repository.order_repository import OrderRepository
from orderflow.domain.service.order_factory import OrderFactory

logger = logging.getLogger(__name__)


class OrderCoordinator:

    def __init__(
        self,
        order_repo: OrderRepository,
        factory: OrderFactory | None = None,
        notifier: OrderNotifier | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._factory = factory or OrderFactory()
        self._notifier = notifier or OrderNotifier()

    def add_observer(self, observer: OrderObserver) -> None:
        self._notifier.subscribe(observer)

    # --- Commands -------------------------------------------------------------

    def create_order(
        self, item_specs: Iterable[OrderItemSpec | tuple[str, int, object]]
    ) -> Order:
        """Create a PENDING order, store it and announce it.

        Each item is an ``OrderItemSpec`` or a plain
        ``(product_id, quantity, unit_price)`` tuple.  Every item is
        validated before anything is stored, so a ValidationError leaves
        the store untouched.

        Observers run after the order is stored.  ``build_order_system``
        subscribes the scheduler first, so its deferred advance is armed
        before any other observer runs.  If a later observer raises, the
        exception reaches the caller, but the order stays stored in PENDING
        and will still be auto-advanced.
        """
        line_items = [
            self._factory.create_line_item(spec.product_id, spec.quantity, spec.unit_price)
            for spec in map(_as_spec, item_specs)
        ]
        order = self._factory.create_order(line_items)
        # held across add so no transition can be announced before PENDING
        with order.exclusive():
            self._order_repo.add(order)
            pending = self._notifier.prepare(order)
        self._notifier.deliver(pending)
        return order

    def cancel_order(self, order_id: str) -> bool:
        """Cancel a PENDING order.

        Returns False for an unknown id or any other status; the two cases
        are deliberately indistinguishable.  Status is checked first so the
        common "too late" case never raises, and the check and the
        transition happen under the order's lock so the deferred advance
        cannot slip in between.
        """
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            return False

        with order.exclusive():
            if order.status is not OrderStatus.PENDING:
                logger.debug(
                    "Cancel refused for order %s in %s", order_id, order.status.value
                )
                return False
            order.request_transition(OrderStatus.CANCELLED)
            pending = self._notifier.prepare(order)

        self._notifier.deliver(pending)
        return True

    def ship_order(self, order_id: str) -> Order | None:
        """PROCESSING -> SHIPPED.  Raises InvalidTransitionError otherwise."""
        return self._transition(order_id, OrderStatus.SHIPPED)

    def deliver_order(self, order_id: str) -> Order | None:
        """SHIPPED -> DELIVERED.  Raises InvalidTransitionError otherwise."""
        return self._transition(order_id, OrderStatus.DELIVERED)

    def advance_order(self, order_id: str) -> OrderStatus | None:
        """Apply the default forward step.

        Returns the new status, or None if the order is unknown or terminal.
        """
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            return None
        with order.exclusive():
            new_status = order.advance()
            if new_status is None:
                return None
            pending = self._notifier.prepare(order)
        self._notifier.deliver(pending)
        return new_status

    # --- Queries --------------------------------------------------------------

    def get_order(self, order_id: str) -> Order | None:
        return self._order_repo.get_by_id(order_id)

    def list_orders(self) -> list[Order]:
        return self._order_repo.list_all()

    def list_orders_by_status(self, status: OrderStatus | str) -> list[Order]:
        return self._order_repo.list_by_status(OrderStatus.parse(status))

    # --- Internal helpers -----------------------------------------------------

    def _transition(self, order_id: str, target: OrderStatus) -> Order | None:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            return None
        with order.exclusive():
            order.request_transition(target)
            pending = self._notifier.prepare(order)
        self._notifier.deliver(pending)
        return order


def _as_spec(item: OrderItemSpec | tuple[str, int, object]) -> OrderItemSpec:
    if isinstance(item, OrderItemSpec):
        return item
    try:
        product_id, quantity, unit_price = item
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            f"Order item must be (product_id, quantity, unit_price), got {item!r}"
        ) from exc
    return OrderItemSpec(product_id, quantity, unit_price)
