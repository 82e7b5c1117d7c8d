"""
Display Resolver
================
Combines one ``CombinedFrame`` into the single string the UI should show.

Precedence, first match wins:

1. navigating or quiet zone   -> hold (same index) or question text
2. explanation index mismatch -> question text
3. channel locked             -> question text
4. gate closed / no text      -> question text (or the missing-explanation literal)
5. gate open and eligible     -> explanation text

The resolver remembers the last good question text per index and its own
previous resolution. It never returns an empty string and never raises.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Optional

from ..exceptions import EmptyUpstreamError, IndexMismatchError, MissingExplanationError
from ..schemas import CombinedFrame, DisplayMode, DisplayState, Resolution

logger = logging.getLogger(__name__)

BANNER_MARKUP = '{question} <span class="correct-count">{banner}</span>'


class DisplayResolver:
    def __init__(
        self,
        loading_text: str = 'Loading question…',
        no_explanation_text: str = 'No explanation available',
    ):
        self.loading_text = loading_text
        self.no_explanation_text = no_explanation_text
        self._last_question_by_index: Dict[int, str] = {}
        self._last: Optional[Resolution] = None

    @property
    def last(self) -> Optional[Resolution]:
        return self._last

    def forget(self, keep: Optional[int] = None) -> None:
        """Drop cached question texts for every index except ``keep``."""
        for index in list(self._last_question_by_index):
            if index != keep:
                del self._last_question_by_index[index]

    def resolve(self, frame: CombinedFrame, now: float) -> Resolution:
        try:
            resolution = self._combine(frame, now)
        except Exception:
            logger.exception("Display resolution failed for Q%s; using last good text", frame.index + 1)
            resolution = self._fallback(frame)

        if not resolution.text or not resolution.text.strip():
            resolution = self._fallback(frame)

        self._last = resolution
        return resolution

    # ── internals ────────────────────────────────────────────────────

    def _combine(self, frame: CombinedFrame, now: float) -> Resolution:
        question = self._question_text(frame)
        eligible = (
            frame.should_show
            or frame.mode is DisplayMode.EXPLANATION
            or frame.answered
        )

        if frame.navigating or now < frame.quiet_until:
            last = self._last
            if last is not None and last.index == frame.index:
                return replace(last, held=True)
            return replace(self._question_view(frame, question, DisplayState.QUESTION_ONLY), held=True)

        explanation = frame.explanation
        if explanation.idx != frame.index:
            logger.debug("Suppressed: %s", IndexMismatchError(explanation.idx, frame.index).message)
            return self._question_view(frame, question, DisplayState.QUESTION_ONLY)

        waiting_state = DisplayState.AWAITING_EXPLANATION if eligible else DisplayState.QUESTION_ONLY

        if frame.locked:
            return self._question_view(frame, question, waiting_state)

        text = (explanation.text or '').strip()
        if not explanation.gate or not text:
            if frame.mode is DisplayMode.EXPLANATION and not frame.has_record:
                logger.info("%s", MissingExplanationError(frame.index).message)
                return Resolution(self.no_explanation_text, DisplayState.AWAITING_EXPLANATION, frame.index)
            return self._question_view(frame, question, waiting_state)

        if eligible:
            return Resolution(text, DisplayState.EXPLANATION_VISIBLE, frame.index)

        return self._question_view(frame, question, DisplayState.QUESTION_ONLY)

    def _question_text(self, frame: CombinedFrame) -> str:
        question = (frame.question_text or '').strip()
        if question:
            self._last_question_by_index[frame.index] = question
            return question

        logger.debug("Holding last good text: %s", EmptyUpstreamError(frame.index).message)
        return self._last_question_by_index.get(frame.index) or self.loading_text

    def _question_view(self, frame: CombinedFrame, question: str, state: DisplayState) -> Resolution:
        banner = (frame.banner_text or '').strip()
        if (
            banner
            and frame.multiple_answer
            and frame.mode is DisplayMode.QUESTION
            and question != self.loading_text
        ):
            question = BANNER_MARKUP.format(question=question, banner=banner)
        return Resolution(question, state, frame.index)

    def _fallback(self, frame: CombinedFrame) -> Resolution:
        last = self._last
        if last is not None and last.index == frame.index and last.text.strip():
            return last
        text = self._last_question_by_index.get(frame.index) or self.loading_text
        return Resolution(text, DisplayState.QUESTION_ONLY, frame.index)
