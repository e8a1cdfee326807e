"""Application service: automatic PENDING -> PROCESSING advance.

Registered as an order observer.  When it sees an order in PENDING it arms a
one-shot task that fires after the configured delay.  The task looks the
order up again and re-reads its status under the order's lock at fire time;
an order cancelled in the meantime is left alone.  The PROCESSING snapshot is
taken under the same lock, so observers never see a later status in its place.  Cancelling an order never
touches the armed task, which simply finds nothing to do.
"""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from functools import partial

from orderflow.application.dto import OrderSnapshot
from orderflow.application.notifier import OrderNotifier
from orderflow.application.scheduling import DeferredExecutor, ScheduledTask
from orderflow.domain.exceptions import ValidationError
from orderflow.domain.model.status import OrderStatus
from orderflow.domain.repository.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class PendingOrderScheduler:

    def __init__(
        self,
        order_repo: OrderRepository,
        executor: DeferredExecutor,
        notifier: OrderNotifier,
        delay: timedelta,
    ) -> None:
        if delay <= timedelta(0):
            raise ValidationError(f"Processing delay must be positive, got {delay}")
        self._order_repo = order_repo
        self._executor = executor
        self._notifier = notifier
        self._delay = delay
        self._tasks: dict[str, ScheduledTask] = {}
        self._lock = threading.Lock()

    @property
    def delay(self) -> timedelta:
        return self._delay

    @property
    def armed_order_ids(self) -> set[str]:
        """Orders whose deferred advance has not run or been cancelled yet."""
        with self._lock:
            return {oid for oid, task in self._tasks.items() if not task.done}

    # --- Observer entry point -------------------------------------------------

    def __call__(self, snapshot: OrderSnapshot) -> None:
        self.on_order_changed(snapshot)

    def on_order_changed(self, snapshot: OrderSnapshot) -> None:
        """Arm a deferred advance if the order has just entered PENDING."""
        if snapshot.status is not OrderStatus.PENDING:
            return

        with self._lock:
            existing = self._tasks.get(snapshot.id)
            if existing is not None and not existing.done:
                return
            self._tasks[snapshot.id] = self._executor.schedule(
                self._delay.total_seconds(),
                partial(self.process_pending, snapshot.id),
            )
        logger.debug(
            "Armed auto-advance for order %s in %s", snapshot.id, self._delay
        )

    # --- Deferred task body ---------------------------------------------------

    def process_pending(self, order_id: str) -> bool:
        """Advance the order to PROCESSING if it is still PENDING right now.

        Returns True if this call moved the order.  Safe to call any number
        of times: only the first call that finds PENDING does anything.
        """
        with self._lock:
            self._tasks.pop(order_id, None)

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            logger.debug("Auto-advance skipped: order %s not found", order_id)
            return False

        with order.exclusive():
            current = order.status
            if current is not OrderStatus.PENDING:
                logger.debug(
                    "Auto-advance skipped: order %s is %s", order_id, current.value
                )
                return False
            order.advance()
            pending = self._notifier.prepare(order)

        logger.debug("Auto-advanced order %s to PROCESSING", order_id)
        self._notifier.deliver(pending)
        return True

    # --- Lifecycle ------------------------------------------------------------

    def shutdown(self) -> int:
        """Cancel every armed task; returns how many were actually stopped."""
        with self._lock:
            tasks = list(self._tasks.values())
            self._tasks.clear()
        cancelled = sum(1 for task in tasks if task.cancel())
        logger.debug("Scheduler shut down, %d pending task(s) cancelled", cancelled)
        return cancelled
