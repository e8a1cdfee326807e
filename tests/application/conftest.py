from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

import pytest

from orderflow.application.notifier import OrderNotifier
from orderflow.application.order_coordinator import OrderCoordinator
from orderflow.application.pending_order_scheduler import PendingOrderScheduler
from orderflow.domain.service.order_factory import OrderFactory
from orderflow.infrastructure.memory.in_memory_order_repository import (
    InMemoryOrderRepository,
)
from tests.fakes import ManualExecutor, RecordingObserver, SequentialIds

DELAY = timedelta(minutes=5)


@dataclass
class Harness:
    coordinator: OrderCoordinator
    scheduler: PendingOrderScheduler
    executor: ManualExecutor
    repository: InMemoryOrderRepository
    notifier: OrderNotifier
    recorder: RecordingObserver

    def elapse(self, delta: timedelta = DELAY) -> int:
        return self.executor.advance(delta.total_seconds())


@pytest.fixture
def harness() -> Harness:
    repository = InMemoryOrderRepository()
    executor = ManualExecutor()
    notifier = OrderNotifier()
    recorder = RecordingObserver()
    scheduler = PendingOrderScheduler(repository, executor, notifier, DELAY)
    notifier.subscribe(scheduler)
    notifier.subscribe(recorder)
    coordinator = OrderCoordinator(
        repository, OrderFactory(id_factory=SequentialIds()), notifier
    )
    return Harness(coordinator, scheduler, executor, repository, notifier, recorder)
