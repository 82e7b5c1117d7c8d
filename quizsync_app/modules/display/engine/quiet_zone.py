"""Quiet-Zone Controller: holds display updates for a short settle period."""

from __future__ import annotations

import logging

from ..schemas import QuietWindow

logger = logging.getLogger(__name__)


class QuietZoneController:
    def __init__(self):
        self._window = QuietWindow()

    @property
    def until(self) -> float:
        return self._window.until

    def open(self, duration_ms: float, now: float) -> float:
        """Hold updates until ``now + duration_ms``; never shortens an open window."""
        candidate = now + max(0.0, float(duration_ms))
        if candidate > self._window.until:
            self._window.until = candidate
            logger.debug("Quiet zone set for %sms (until=%.1f)", duration_ms, candidate)
        return self._window.until

    def is_quiet(self, now: float) -> bool:
        return now < self._window.until

    def remaining(self, now: float) -> float:
        return max(0.0, self._window.until - now)
