"""Explanation Producer: formats explanation text off the critical path."""

from __future__ import annotations

import inspect
import logging
from typing import Optional

from ..exceptions import MissingExplanationError
from ..logics.formatter import format_explanation
from ..providers import ExplanationSource
from ..schemas import TaggedExplanation

logger = logging.getLogger(__name__)


class ExplanationProducer:
    """
    Builds ``TaggedExplanation`` results.

    The token is captured by the caller when the work is requested; the
    producer never checks it. Consumers decide whether the result still
    applies.
    """

    def __init__(self, source: ExplanationSource, no_explanation_text: str = 'No explanation available'):
        self.source = source
        self.no_explanation_text = no_explanation_text

    def produce(self, index: int, token: int) -> TaggedExplanation:
        raw = self.source.raw_explanation(index)
        if inspect.isawaitable(raw):
            if inspect.iscoroutine(raw):
                raw.close()
            raise TypeError("Explanation source is asynchronous; use produce_async()")
        return self._build(index, token, raw)

    async def produce_async(self, index: int, token: int) -> TaggedExplanation:
        raw = self.source.raw_explanation(index)
        if inspect.isawaitable(raw):
            raw = await raw
        return self._build(index, token, raw)

    def _build(self, index: int, token: int, raw: Optional[str]) -> TaggedExplanation:
        text = format_explanation(raw, self.source.correct_option_numbers(index))
        if not text:
            logger.info("%s; using fallback text", MissingExplanationError(index).message)
            text = self.no_explanation_text
        return TaggedExplanation(index=index, token=token, text=text)
