"""Port for running a callable once after a delay.

The application layer depends only on these abstractions; the threaded
implementation lives in infrastructure and tests use a manual fake clock.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable


class ScheduledTask(ABC):

    @abstractmethod
    def cancel(self) -> bool:
        """Stop the task from running.

        Returns False, without raising, if it already ran, is running,
        or was cancelled before.
        """

    @property
    @abstractmethod
    def done(self) -> bool:
        """True once the task has finished running or was cancelled."""


class DeferredExecutor(ABC):

    @abstractmethod
    def schedule(self, delay_seconds: float, fn: Callable[[], object]) -> ScheduledTask:
        """Run *fn* once, *delay_seconds* from now, without blocking the caller."""

    @abstractmethod
    def shutdown(self) -> None:
        """Cancel everything still waiting and release worker resources."""
