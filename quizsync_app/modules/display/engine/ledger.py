"""Generation Ledger: one monotonic token per navigation."""

from __future__ import annotations

import logging

from ..schemas import INITIAL_GENERATION

logger = logging.getLogger(__name__)


class GenerationLedger:
    """
    Source of generation tokens.

    Every navigation calls ``bump()``; work started under an older token must
    check ``is_current`` before writing anything back.
    """

    def __init__(self, start: int = INITIAL_GENERATION):
        self._current = start

    @property
    def current(self) -> int:
        return self._current

    def bump(self) -> int:
        self._current += 1
        logger.debug("Generation bumped to %s", self._current)
        return self._current

    def is_current(self, token) -> bool:
        return token is not None and token == self._current

    def __repr__(self) -> str:
        return f"<GenerationLedger current={self._current}>"
