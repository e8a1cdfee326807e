"""Builds a ready-to-use order system from Settings.

Picks the in-memory store and the threaded executor unless the caller
passes its own executor, and subscribes the pending-order scheduler ahead
of any extra observers so new orders are armed first.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from orderflow.application.notifier import OrderNotifier, OrderObserver
from orderflow.application.order_coordinator import OrderCoordinator
from orderflow.application.pending_order_scheduler import PendingOrderScheduler
from orderflow.application.scheduling import DeferredExecutor
from orderflow.domain.service.order_factory import OrderFactory
from orderflow.infrastructure.config import Settings
from orderflow.infrastructure.memory.in_memory_order_repository import (
    InMemoryOrderRepository,
)
from orderflow.infrastructure.scheduling.threaded_executor import (
    ThreadedDeferredExecutor,
)


@dataclass
class OrderSystem:
    coordinator: OrderCoordinator
    scheduler: PendingOrderScheduler
    executor: DeferredExecutor
    repository: InMemoryOrderRepository
    notifier: OrderNotifier

    def shutdown(self) -> None:
        self.scheduler.shutdown()
        self.executor.shutdown()

    def __enter__(self) -> OrderSystem:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


def build_order_system(
    settings: Settings | None = None,
    executor: DeferredExecutor | None = None,
    factory: OrderFactory | None = None,
    observers: Iterable[OrderObserver] = (),
) -> OrderSystem:
    """Build a ready-to-use order system.

    The scheduler is always the first observer, so it hears about a new
    order before any caller-supplied observer does.
    """
    settings = settings or Settings.from_env()
    executor = executor or ThreadedDeferredExecutor()
    repository = InMemoryOrderRepository()
    notifier = OrderNotifier()
    scheduler = PendingOrderScheduler(
        order_repo=repository,
        executor=executor,
        notifier=notifier,
        delay=settings.processing_delay,
    )
    notifier.subscribe(scheduler)
    for observer in observers:
        notifier.subscribe(observer)

    coordinator = OrderCoordinator(
        order_repo=repository,
        factory=factory or OrderFactory(),
        notifier=notifier,
    )
    return OrderSystem(
        coordinator=coordinator,
        scheduler=scheduler,
        executor=executor,
        repository=repository,
        notifier=notifier,
    )
