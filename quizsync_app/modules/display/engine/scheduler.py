"""
Tick Scheduler
==============
Abstracts render ticks and timers so the engine never depends on real
display refresh timing.

Implementations
---------------
* ``VirtualTickScheduler``: manual clock for tests; time only moves through
  ``advance()``.
* ``MonotonicTickScheduler``: wall clock (``time.monotonic``); due callbacks
  run when the owner calls ``run_due()``, e.g. at the start of each request.
* ``AsyncioTickScheduler``: delegates to a running asyncio event loop.

All of them are single-threaded: callbacks run one at a time on the caller's
thread and a callback may schedule further callbacks.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class ScheduledCall:
    """Handle returned by the schedulers; ``cancel()`` is idempotent."""

    __slots__ = ('due', 'callback', 'cancelled', '_handle')

    def __init__(self, due: float, callback: Callback, handle=None):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self._handle = handle

    def cancel(self) -> None:
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()


class TickScheduler(ABC):
    """Contract for the clock and timer source used by the engine."""

    tick_ms: float = 16

    @abstractmethod
    def now(self) -> float:
        """Current time in milliseconds."""
        ...

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callback) -> ScheduledCall:
        ...

    def request_tick(self, callback: Callback) -> ScheduledCall:
        """Run ``callback`` on the next render tick."""
        return self.call_later(self.tick_ms, callback)

    def call_at(self, when_ms: float, callback: Callback) -> ScheduledCall:
        return self.call_later(max(0.0, when_ms - self.now()), callback)


def _run_callback(call: ScheduledCall) -> None:
    try:
        call.callback()
    except Exception:
        logger.exception("Scheduled callback failed")


class _QueueScheduler(TickScheduler):
    """Shared heap of pending calls ordered by due time, then FIFO."""

    def __init__(self, tick_ms: float = 16):
        self.tick_ms = tick_ms
        self._queue: List[Tuple[float, int, ScheduledCall]] = []
        self._counter = itertools.count()

    def call_later(self, delay_ms: float, callback: Callback) -> ScheduledCall:
        call = ScheduledCall(self.now() + max(0.0, float(delay_ms)), callback)
        heapq.heappush(self._queue, (call.due, next(self._counter), call))
        return call

    @property
    def pending(self) -> int:
        return sum(1 for _, _, call in self._queue if not call.cancelled)

    def next_due(self) -> Optional[float]:
        for due, _, call in sorted(self._queue):
            if not call.cancelled:
                return due
        return None

    def _pop_due(self, limit: float) -> Optional[ScheduledCall]:
        while self._queue and self._queue[0][0] <= limit:
            _, _, call = heapq.heappop(self._queue)
            if not call.cancelled:
                return call
        return None


class VirtualTickScheduler(_QueueScheduler):
    """Manual clock. Nothing runs until ``advance``/``flush`` is called."""

    def __init__(self, tick_ms: float = 16, start: float = 0.0):
        super().__init__(tick_ms)
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def advance(self, ms: float) -> int:
        """Move the clock forward, running every callback that falls due."""
        target = self._now + max(0.0, float(ms))
        ran = 0
        while True:
            call = self._pop_due(target)
            if call is None:
                break
            self._now = max(self._now, call.due)
            _run_callback(call)
            ran += 1
        self._now = target
        return ran

    def advance_to(self, when_ms: float) -> int:
        return self.advance(max(0.0, when_ms - self._now))

    def flush(self, max_ms: float = 60_000) -> int:
        """Run callbacks until the queue drains or ``max_ms`` of virtual time passes."""
        deadline = self._now + max_ms
        ran = 0
        while True:
            due = self.next_due()
            if due is None or due > deadline:
                break
            ran += self.advance_to(due)
        return ran


class MonotonicTickScheduler(_QueueScheduler):
    """Wall-clock scheduler pumped explicitly with ``run_due()``."""

    def __init__(self, tick_ms: float = 16, clock: Callable[[], float] = time.monotonic):
        super().__init__(tick_ms)
        self._clock = clock
        # Due time of the callback being drained; None outside run_due().
        self._draining_at: Optional[float] = None

    def now(self) -> float:
        if self._draining_at is not None:
            return self._draining_at
        return self._clock() * 1000.0

    def run_due(self) -> int:
        """
        Run every callback due by the wall clock, in due order.

        While draining, ``now()`` reports the due time of the running
        callback; timers chained from it start from that time.
        """
        limit = self._clock() * 1000.0
        ran = 0
        try:
            while True:
                call = self._pop_due(limit)
                if call is None:
                    return ran
                if self._draining_at is None or call.due > self._draining_at:
                    self._draining_at = call.due
                _run_callback(call)
                ran += 1
        finally:
            self._draining_at = None


class AsyncioTickScheduler(TickScheduler):
    """Scheduler backed by an asyncio event loop (``loop.call_later``)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None, tick_ms: float = 16):
        self.tick_ms = tick_ms
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callback) -> ScheduledCall:
        delay = max(0.0, float(delay_ms))
        call = ScheduledCall(self.now() + delay, callback)

        def run() -> None:
            if not call.cancelled:
                _run_callback(call)

        call._handle = self.loop.call_later(delay / 1000.0, run)
        return call
