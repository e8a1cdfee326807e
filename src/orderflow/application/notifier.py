"""Observer registry for committed order status changes.

Notification is split in two steps so observers see every commit of an
order exactly once and in commit order:

* ``prepare(order)`` is called while the caller still holds
  ``order.exclusive()``; it captures the snapshot of the status just
  committed and takes the next delivery ticket for that order.
* ``deliver(pending)`` is called after the lock is released; it waits until
  every earlier ticket of the same order has been delivered, then calls the
  observers on the current thread.

Orders do not wait on each other.  An observer that itself changes the same
order gets its nested notification delivered immediately, since waiting for
the outer delivery would never finish.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from orderflow.application.dto import OrderSnapshot
from orderflow.domain.model.order import Order

logger = logging.getLogger(__name__)

OrderObserver = Callable[[OrderSnapshot], None]


@dataclass(frozen=True)
class PendingNotification:
    snapshot: OrderSnapshot
    ticket: int


@dataclass
class _Channel:
    """Delivery bookkeeping for one order."""

    cond: threading.Condition = field(default_factory=threading.Condition)
    issued: int = 0
    next_ticket: int = 0
    finished: set[int] = field(default_factory=set)
    owner: int | None = None
    terminal: bool = False


class OrderNotifier:
    """Delivers an ``OrderSnapshot`` to every observer, synchronously.

    Observers are called in registration order on the notifying thread and
    all of them have run by the time ``deliver`` returns.  An exception from
    an observer propagates to whoever triggered the notification.
    """

    def __init__(self, observers: Iterable[OrderObserver] = ()) -> None:
        self._observers: list[OrderObserver] = list(observers)
        self._channels: dict[str, _Channel] = {}
        self._lock = threading.Lock()

    def subscribe(self, observer: OrderObserver) -> None:
        with self._lock:
            self._observers.append(observer)

    @property
    def observers(self) -> tuple[OrderObserver, ...]:
        with self._lock:
            return tuple(self._observers)

    @property
    def tracked_order_ids(self) -> set[str]:
        """Orders whose delivery bookkeeping is still held."""
        with self._lock:
            return set(self._channels)

    # --- Two-step notification ------------------------------------------------

    def prepare(self, order: Order) -> PendingNotification:
        """Capture the committed state; call while holding the order's lock."""
        snapshot = OrderSnapshot.from_order(order)
        with self._lock:
            channel = self._channels.setdefault(order.id, _Channel())
            with channel.cond:
                ticket = channel.issued
                channel.issued += 1
        return PendingNotification(snapshot=snapshot, ticket=ticket)

    def deliver(self, pending: PendingNotification) -> OrderSnapshot:
        """Run every observer for *pending* once its turn has come."""
        snapshot = pending.snapshot
        with self._lock:
            channel = self._channels[snapshot.id]
            observers = tuple(self._observers)

        me = threading.get_ident()
        with channel.cond:
            nested = channel.owner == me
            if not nested:
                while channel.next_ticket != pending.ticket:
                    channel.cond.wait()
                channel.owner = me

        logger.debug(
            "Notifying %d observer(s): order %s is %s",
            len(observers), snapshot.id, snapshot.status.value,
        )
        try:
            for observer in observers:
                observer(snapshot)
        finally:
            self._finish(channel, pending, nested)
        return snapshot

    def notify(self, order: Order) -> OrderSnapshot:
        """Prepare and deliver in one call, for orders nobody else is changing."""
        with order.exclusive():
            pending = self.prepare(order)
        return self.deliver(pending)

    # --- Internal helpers -----------------------------------------------------

    def _finish(self, channel: _Channel, pending: PendingNotification, nested: bool) -> None:
        with channel.cond:
            channel.finished.add(pending.ticket)
            while channel.next_ticket in channel.finished:
                channel.finished.remove(channel.next_ticket)
                channel.next_ticket += 1
            if not nested:
                channel.owner = None
            if pending.snapshot.status.is_terminal:
                channel.terminal = True
            drained = channel.next_ticket == channel.issued
            channel.cond.notify_all()

        # a terminal order commits nothing more, so its channel can go
        if drained and channel.terminal:
            with self._lock:
                with channel.cond:
                    current = self._channels.get(pending.snapshot.id)
                    if current is channel and channel.next_ticket == channel.issued:
                        del self._channels[pending.snapshot.id]
