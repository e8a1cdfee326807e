"""Thread-safe in-memory implementation of OrderRepository."""

from __future__ import annotations

import logging
import threading

from orderflow.domain.exceptions import DuplicateOrderError
from orderflow.domain.model.order import Order
from orderflow.domain.model.status import OrderStatus
from orderflow.domain.repository.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class InMemoryOrderRepository(OrderRepository):
    """Dict of order id -> Order guarded by a single lock.

    The lock covers only the mapping.  Each order guards its own status, so
    ``list_by_status`` is a best-effort view: a returned order may change
    status right after the snapshot is taken.
    """

    def __init__(self) -> None:
        self._store: dict[str, Order] = {}
        self._lock = threading.Lock()

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> None:
        with self._lock:
            if order.id in self._store:
                raise DuplicateOrderError(f"Order {order.id} already exists")
            self._store[order.id] = order
        logger.debug("Stored order %s", order.id)

    def get_by_id(self, order_id: str) -> Order | None:
        with self._lock:
            return self._store.get(order_id)

    def list_all(self) -> list[Order]:
        with self._lock:
            return list(self._store.values())

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        return [order for order in self.list_all() if order.status is status]

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
