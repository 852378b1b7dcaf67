"""
Clock - Cancellable delayed callbacks and the session countdown.

The session never sleeps. Every delay is a callback handed to a
Scheduler, and every callback can be cancelled.

Two schedulers:
- AsyncioScheduler: real time, on an asyncio event loop
- ManualScheduler: simulated time, advanced explicitly (tests, replays)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import asyncio
import heapq
import itertools
from typing import Callable


class TimerHandle(ABC):
    """A scheduled callback that may still be cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call twice."""
        ...

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        ...


class Scheduler(ABC):
    """
    Abstract source of delayed callbacks.
    """

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once, after delay seconds."""
        ...

    @abstractmethod
    def now(self) -> float:
        """Current time on this scheduler's clock, in seconds."""
        ...


# =============================================================================
# Asyncio
# =============================================================================

class _AsyncioHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by loop.call_later.

    Must be created and used on the loop's thread.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self.loop = loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return _AsyncioHandle(self.loop.call_later(delay, callback))

    def now(self) -> float:
        return self.loop.time()


# =============================================================================
# Simulated time
# =============================================================================

class _ManualHandle(TimerHandle):
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """
    Scheduler on a simulated clock.

    Usage:
        scheduler = ManualScheduler()
        scheduler.call_later(0.5, callback)
        scheduler.advance(0.5)  # callback runs here

    Callbacks fire in due-time order; ties fire in scheduling order.
    Callbacks scheduled while advancing fire in the same call if they
    fall due before the target time.
    """

    def __init__(self, start: float = 0.0):
        self._time = start
        self._queue: list[tuple[float, int, _ManualHandle]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _ManualHandle(self._time + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (handle.due, next(self._counter), handle))
        return handle

    def now(self) -> float:
        return self._time

    @property
    def pending(self) -> int:
        """Number of live (not cancelled) callbacks."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, running everything that falls due.

        Returns the number of callbacks run.
        """
        target = self._time + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._time = due
            handle.callback()
            fired += 1
        self._time = target
        return fired


# =============================================================================
# Countdown
# =============================================================================

class Countdown:
    """
    Repeating tick source for one session.

    Each tick reschedules the next one until stopped.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_tick: Callable[[], None],
        interval: float = 1.0,
    ):
        self.scheduler = scheduler
        self.on_tick = on_tick
        self.interval = interval
        self._handle: TimerHandle | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._schedule_next()

    def stop(self) -> None:
        self._running = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule_next(self) -> None:
        self._handle = self.scheduler.call_later(self.interval, self._fire)

    def _fire(self) -> None:
        if not self._running:
            return
        self.on_tick()
        # on_tick may have stopped us (session ended)
        if self._running:
            self._schedule_next()
