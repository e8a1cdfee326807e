"""Observers see each order's status changes exactly as the order recorded them."""

import threading
from datetime import timedelta

from orderflow.application.dto import OrderItemSpec
from orderflow.application.notifier import OrderNotifier, PendingNotification
from orderflow.application.order_coordinator import OrderCoordinator
from orderflow.application.pending_order_scheduler import PendingOrderScheduler
from orderflow.domain.model.status import OrderStatus
from orderflow.domain.service.order_factory import OrderFactory
from orderflow.infrastructure.memory.in_memory_order_repository import (
    InMemoryOrderRepository,
)

from tests.fakes import ManualExecutor, RecordingObserver, SequentialIds

DELAY = timedelta(minutes=5)
ITEMS = [OrderItemSpec("SKU-1", 1, "9.99")]
TIMEOUT = 5


class PausingNotifier(OrderNotifier):
    """Holds the delivery of one status until the test releases it."""

    def __init__(self, pause_on: OrderStatus) -> None:
        super().__init__()
        self._pause_on = pause_on
        self.reached = threading.Event()
        self.release = threading.Event()

    def deliver(self, pending: PendingNotification):
        if pending.snapshot.status is self._pause_on and not self.reached.is_set():
            self.reached.set()
            self.release.wait(TIMEOUT)
        return super().deliver(pending)


def _build(notifier):
    repository = InMemoryOrderRepository()
    recorder = RecordingObserver()
    scheduler = PendingOrderScheduler(repository, ManualExecutor(), notifier, DELAY)
    notifier.subscribe(scheduler)
    notifier.subscribe(recorder)
    coordinator = OrderCoordinator(
        repository, OrderFactory(id_factory=SequentialIds()), notifier
    )
    return coordinator, scheduler, recorder


def _run_together(*targets):
    barrier = threading.Barrier(len(targets))

    def run(target):
        barrier.wait()
        target()

    threads = [threading.Thread(target=run, args=(t,)) for t in targets]
    for t in threads:
        t.start()
    for t in threads:
        t.join(TIMEOUT)
    assert not any(t.is_alive() for t in threads)


class TestDelayedDelivery:

    def test_slow_processing_delivery_is_not_overtaken_by_ship(self):
        notifier = PausingNotifier(pause_on=OrderStatus.PROCESSING)
        coordinator, scheduler, recorder = _build(notifier)
        order = coordinator.create_order(ITEMS)

        advancer = threading.Thread(target=scheduler.process_pending, args=(order.id,))
        advancer.start()
        assert notifier.reached.wait(TIMEOUT)

        shipper = threading.Thread(target=coordinator.ship_order, args=(order.id,))
        shipper.start()
        shipper.join(0.2)
        assert shipper.is_alive()
        assert order.status is OrderStatus.SHIPPED
        assert recorder.statuses_for(order.id) == [OrderStatus.PENDING]

        notifier.release.set()
        advancer.join(TIMEOUT)
        shipper.join(TIMEOUT)
        assert not advancer.is_alive() and not shipper.is_alive()
        assert recorder.statuses_for(order.id) == [
            OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.SHIPPED,
        ]
        assert recorder.statuses_for(order.id) == list(order.history)

    def test_delivered_snapshot_keeps_the_status_it_was_taken_with(self):
        notifier = PausingNotifier(pause_on=OrderStatus.PROCESSING)
        coordinator, scheduler, recorder = _build(notifier)
        order = coordinator.create_order(ITEMS)

        advancer = threading.Thread(target=scheduler.process_pending, args=(order.id,))
        advancer.start()
        assert notifier.reached.wait(TIMEOUT)
        order.advance()
        notifier.release.set()
        advancer.join(TIMEOUT)

        [_, processing] = [s for s in recorder.snapshots if s.id == order.id]
        assert processing.status is OrderStatus.PROCESSING
        assert order.status is OrderStatus.SHIPPED


class TestConcurrentTransitions:

    def test_observed_sequence_matches_history_under_contention(self):
        coordinator, scheduler, recorder = _build(OrderNotifier())
        for _ in range(50):
            order = coordinator.create_order(ITEMS)
            _run_together(
                lambda: scheduler.process_pending(order.id),
                lambda: coordinator.advance_order(order.id),
                lambda: coordinator.advance_order(order.id),
                lambda: coordinator.advance_order(order.id),
            )
            assert recorder.statuses_for(order.id) == list(order.history)
            assert order.status is OrderStatus.DELIVERED

    def test_cancel_racing_advance_is_observed_once_and_in_order(self):
        coordinator, scheduler, recorder = _build(OrderNotifier())
        for _ in range(50):
            order = coordinator.create_order(ITEMS)
            _run_together(
                lambda: coordinator.cancel_order(order.id),
                lambda: scheduler.process_pending(order.id),
                lambda: coordinator.advance_order(order.id),
            )
            observed = recorder.statuses_for(order.id)
            assert observed == list(order.history)
            assert observed[0] is OrderStatus.PENDING
            assert len(set(observed)) == len(observed)
