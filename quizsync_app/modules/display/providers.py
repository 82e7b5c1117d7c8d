# File: quizsync_app/modules/display/providers.py
"""
Collaborator contracts
======================
The display engine consumes question data, banners, display modes and raw
explanations from outside. These abstract classes are the only surface it
depends on; ``StaticQuizSource`` and ``InMemoryDisplayModeStore`` are the
in-process implementations used by the HTTP layer and the tests.

* **Pure data in / data out**: no engine objects leak into the providers.
* **Framework-agnostic**: no Flask imports.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from .logics.formatter import correct_answers_banner, correct_option_numbers
from .schemas import DisplayMode, DisplayModeState


class QuestionSource(ABC):
    @abstractmethod
    def question_text(self, index: int) -> str:
        ...

    @abstractmethod
    def is_multiple_answer(self, index: int) -> bool:
        ...

    @abstractmethod
    def option_count(self, index: int) -> int:
        ...


class BannerSource(ABC):
    @abstractmethod
    def correct_answer_banner(self, index: int) -> str:
        ...


class ExplanationSource(ABC):
    @abstractmethod
    def raw_explanation(self, index: int) -> Optional[str]:
        """Raw explanation text, or an awaitable resolving to it."""
        ...

    @abstractmethod
    def correct_option_numbers(self, index: int) -> List[int]:
        ...


class DisplayModeStore(ABC):
    @abstractmethod
    def get(self, index: int) -> DisplayModeState:
        ...

    @abstractmethod
    def set_mode(self, index: int, mode: DisplayMode) -> DisplayModeState:
        ...

    @abstractmethod
    def mark_answered(self, index: int, answered: bool = True) -> DisplayModeState:
        ...


class StaticQuizSource(QuestionSource, BannerSource, ExplanationSource):
    """
    Question, banner and explanation source over a list of question dicts::

        {"text": "...", "options": [{"text": "...", "correct": True}], "explanation": "..."}

    ``questionText`` / ``question`` are accepted for ``text``.
    """

    def __init__(self, questions: Iterable[Dict[str, Any]]):
        self._questions: List[Dict[str, Any]] = [dict(q) for q in questions or []]

    def __len__(self) -> int:
        return len(self._questions)

    def _get(self, index: int) -> Dict[str, Any]:
        if 0 <= index < len(self._questions):
            return self._questions[index]
        return {}

    def update_question(self, index: int, **fields: Any) -> None:
        while len(self._questions) <= index:
            self._questions.append({})
        self._questions[index].update(fields)

    def question_text(self, index: int) -> str:
        question = self._get(index)
        return str(question.get('text') or question.get('questionText') or question.get('question') or '')

    def options(self, index: int) -> List[Dict[str, Any]]:
        return [o for o in self._get(index).get('options') or [] if isinstance(o, dict)]

    def option_count(self, index: int) -> int:
        return len(self.options(index))

    def correct_option_numbers(self, index: int) -> List[int]:
        return correct_option_numbers(self.options(index))

    def is_multiple_answer(self, index: int) -> bool:
        return len(self.correct_option_numbers(index)) > 1

    def correct_answer_banner(self, index: int) -> str:
        if not self.is_multiple_answer(index):
            return ''
        return correct_answers_banner(len(self.correct_option_numbers(index)))

    def raw_explanation(self, index: int) -> Optional[str]:
        return self._get(index).get('explanation')


class InMemoryDisplayModeStore(DisplayModeStore):
    def __init__(self):
        self._states: Dict[int, DisplayModeState] = {}

    def get(self, index: int) -> DisplayModeState:
        return self._states.get(index, DisplayModeState())

    def set_mode(self, index: int, mode: DisplayMode) -> DisplayModeState:
        state = DisplayModeState(mode=DisplayMode.parse(mode), answered=self.get(index).answered)
        self._states[index] = state
        return state

    def mark_answered(self, index: int, answered: bool = True) -> DisplayModeState:
        state = DisplayModeState(mode=self.get(index).mode, answered=bool(answered))
        self._states[index] = state
        return state
