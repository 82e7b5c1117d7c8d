"""
Display Text Stream
===================
The single "current display text" producer the UI subscribes to.

* **lazy**: nothing is resolved while nobody subscribes or reads
* **lossy**: invalidations inside one coalescing window collapse into one
  resolution; only changed text is emitted
* **restartable**: a new subscriber immediately receives the latest text,
  never a replay of history
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Callable, List, Optional

from quizsync_app.core.signals import display_text_changed

from ..engine.resolver import DisplayResolver
from ..engine.scheduler import ScheduledCall, TickScheduler
from ..schemas import CombinedFrame, Resolution

logger = logging.getLogger(__name__)

Subscriber = Callable[[str], None]


class DisplayTextStream:
    def __init__(
        self,
        scheduler: TickScheduler,
        resolver: DisplayResolver,
        frame_supplier: Callable[[], CombinedFrame],
        coalesce_ms: float = 16,
        sender=None,
    ):
        self.scheduler = scheduler
        self.resolver = resolver
        self.coalesce_ms = coalesce_ms
        self._frame_supplier = frame_supplier
        self._sender = sender if sender is not None else self
        self._subscribers: List[Subscriber] = []
        self._latest: Optional[Resolution] = None
        self._dirty = True
        self._pending: Optional[ScheduledCall] = None
        self._recheck: Optional[ScheduledCall] = None
        self.emit_count = 0

    @property
    def latest(self) -> Optional[str]:
        return self._latest.text if self._latest else None

    @property
    def latest_resolution(self) -> Optional[Resolution]:
        return self._latest

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def invalidate(self) -> None:
        """Ask for a resolution at the end of the current coalescing window."""
        self._dirty = True
        if not self._subscribers or self._pending is not None:
            return
        self._pending = self.scheduler.call_later(self.coalesce_ms, self._run_pending)

    def _run_pending(self) -> None:
        self._pending = None
        self.flush()

    def flush(self) -> str:
        """Resolve now and emit if the text changed."""
        self._dirty = False
        frame = self._frame_supplier()
        now = self.scheduler.now()
        resolution = self.resolver.resolve(frame, now)

        if resolution.held and frame.quiet_until > now:
            self._schedule_recheck(frame.quiet_until)

        previous = self._latest
        self._latest = resolution
        if previous is None or previous.text != resolution.text:
            self._emit(resolution)
        return resolution.text

    def read(self) -> str:
        """Latest text, resolving first if inputs changed since the last flush."""
        if self._dirty or self._latest is None:
            return self.flush()
        return self._latest.text

    def _schedule_recheck(self, when: float) -> None:
        if self._recheck is not None and not self._recheck.cancelled:
            if self._recheck.due >= when:
                return
            self._recheck.cancel()

        def recheck() -> None:
            self._recheck = None
            self.invalidate()

        self._recheck = self.scheduler.call_at(when, recheck)

    def _emit(self, resolution: Resolution) -> None:
        self.emit_count += 1
        logger.debug("Display text -> %r (%s)", resolution.text[:80], resolution.state.value)
        for subscriber in list(self._subscribers):
            try:
                subscriber(resolution.text)
            except Exception:
                logger.exception("Display subscriber failed")
        display_text_changed.send(
            self._sender,
            text=resolution.text,
            index=resolution.index,
            state=resolution.state.value,
        )

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        if self._dirty or self._latest is None:
            self.flush()
        self._subscribers.append(callback)
        callback(self._latest.text)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def iterate(self) -> AsyncIterator[str]:
        """Async iteration that only ever yields the newest text."""
        ready = asyncio.Event()
        box: List[str] = []

        def on_text(text: str) -> None:
            box[:] = [text]
            ready.set()

        unsubscribe = self.subscribe(on_text)
        try:
            while True:
                await ready.wait()
                ready.clear()
                yield box[0]
        finally:
            unsubscribe()
