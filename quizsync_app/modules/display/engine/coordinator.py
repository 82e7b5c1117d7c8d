"""
Reset/Purge Coordinator
=======================
Runs the navigation protocol against the shared context:

1. bump the generation ledger
2. lock the explanation channel
3. purge every record except the target index
4. re-arm ``set_pending(target)``
5. schedule an unlock (one render tick + settle delay) tagged with the token
6. when the unlock fires, reopen the channel only if the token is current

A later navigation cancels an earlier unlock implicitly: its token is no
longer current when it fires.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from quizsync_app.core.signals import navigation_completed, navigation_started

from ..schemas import NavigationEvent
from .context import DisplaySyncContext

logger = logging.getLogger(__name__)


class ResetCoordinator:
    def __init__(
        self,
        context: DisplaySyncContext,
        unlock_delay_ms: float = 32,
        quiet_zone_ms: float = 150,
        settle_ms: float = 40,
    ):
        self.context = context
        self.unlock_delay_ms = unlock_delay_ms
        self.quiet_zone_ms = quiet_zone_ms
        self.settle_ms = settle_ms
        self._navigating = False
        self._target: Optional[int] = None
        self._listeners: List[Callable[[str], None]] = []

    @property
    def navigating(self) -> bool:
        return self._navigating

    @property
    def target_index(self) -> Optional[int]:
        return self._target

    def add_listener(self, listener: Callable[[str], None]) -> None:
        """``listener(reason)`` runs after navigation start/complete and unlock."""
        self._listeners.append(listener)

    def _notify(self, reason: str) -> None:
        for listener in list(self._listeners):
            listener(reason)

    # ── navigation protocol ──────────────────────────────────────────

    def begin(self, event: NavigationEvent) -> int:
        index = int(event.target_index)
        if index < 0:
            raise ValueError(f"Question index must be non-negative, got {index}")

        ctx = self.context
        generation = ctx.ledger.bump()
        ctx.channel.lock()
        ctx.channel.set_active(index)
        ctx.channel.purge_except(index)
        ctx.channel.set_pending(index)
        ctx.quiet_zone.open(self.quiet_zone_ms, ctx.now())

        self._navigating = True
        self._target = index
        self._schedule_unlock(generation, index)

        logger.info("Navigation to Q%s started (generation=%s)", index + 1, generation)
        navigation_started.send(self, target_index=index, generation=generation, timestamp=event.timestamp)
        self._notify('navigation_started')
        return generation

    def complete(self, event: NavigationEvent) -> bool:
        """Finish navigation; events for a superseded target are ignored."""
        index = int(event.target_index)
        if index != self._target:
            logger.debug(
                "Ignoring completion for Q%s; active target is Q%s",
                index + 1,
                (self._target if self._target is not None else -1) + 1,
            )
            return False

        ctx = self.context
        self._navigating = False
        ctx.quiet_zone.open(self.settle_ms, ctx.now())

        logger.info("Navigation to Q%s completed", index + 1)
        navigation_completed.send(
            self, target_index=index, generation=ctx.ledger.current, timestamp=event.timestamp
        )
        self._notify('navigation_completed')
        return True

    # ── deferred unlock ──────────────────────────────────────────────

    def _schedule_unlock(self, generation: int, index: int) -> None:
        scheduler = self.context.scheduler

        def after_tick() -> None:
            scheduler.call_later(self.unlock_delay_ms, lambda: self._unlock(generation, index))

        scheduler.request_tick(after_tick)

    def _unlock(self, generation: int, index: int) -> None:
        if not self.context.ledger.is_current(generation):
            logger.debug("Stale unlock for Q%s dropped (generation=%s)", index + 1, generation)
            return
        self.context.channel.unlock()
        logger.debug("Channel reopened for Q%s", index + 1)
        self._notify('unlocked')
