from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

# Ledger value before the first navigation; the first bump issues token 0.
INITIAL_GENERATION = -1


class DisplayMode(str, Enum):
    QUESTION = 'question'
    EXPLANATION = 'explanation'

    @classmethod
    def parse(cls, value: Any) -> 'DisplayMode':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown display mode: {value!r}")


class DisplayState(str, Enum):
    QUESTION_ONLY = 'question_only'
    AWAITING_EXPLANATION = 'awaiting_explanation'
    EXPLANATION_VISIBLE = 'explanation_visible'


class ResolveOutcome(str, Enum):
    """What the channel did with a ``resolve`` call."""

    APPLIED = 'applied'
    PARKED = 'parked'          # valid, held until the channel unlocks
    DUPLICATE = 'duplicate'    # identical to the current record
    STALE = 'stale'            # superseded generation token
    MISMATCH = 'mismatch'      # index is not the active one
    EMPTY = 'empty'            # blank text, no content

    @property
    def accepted(self) -> bool:
        return self in (ResolveOutcome.APPLIED, ResolveOutcome.PARKED, ResolveOutcome.DUPLICATE)


@dataclass
class ExplanationRecord:
    """Per-index slot in the explanation arena."""

    index: int
    text: str = ''
    gate_open: bool = False
    generation: int = INITIAL_GENERATION
    parked_text: Optional[str] = None

    def snapshot(self) -> 'ExplanationSnapshot':
        return ExplanationSnapshot(idx=self.index, text=self.text, gate=self.gate_open)


@dataclass(frozen=True)
class ExplanationSnapshot:
    idx: int
    text: str = ''
    gate: bool = False


@dataclass
class QuietWindow:
    until: float = 0.0


@dataclass(frozen=True)
class DisplayModeState:
    mode: DisplayMode = DisplayMode.QUESTION
    answered: bool = False


@dataclass(frozen=True)
class CombinedFrame:
    """
    Everything the resolver needs for one decision.

    Built fresh for every resolution cycle and never stored.
    """

    index: int
    question_text: str
    banner_text: str
    explanation: ExplanationSnapshot
    should_show: bool
    navigating: bool
    quiet_until: float
    mode: DisplayMode = DisplayMode.QUESTION
    answered: bool = False
    multiple_answer: bool = False
    locked: bool = False
    has_record: bool = True


@dataclass(frozen=True)
class Resolution:
    text: str
    state: DisplayState
    index: Optional[int]
    held: bool = False


@dataclass(frozen=True)
class NavigationEvent:
    target_index: int
    timestamp: float
    phase: str = 'start'    # 'start' | 'complete'


@dataclass(frozen=True)
class TaggedExplanation:
    """Explanation text stamped with the generation it was requested under."""

    index: int
    token: int
    text: str


@dataclass
class DisplaySyncSettings:
    tick_ms: float = 16
    coalesce_ms: float = 16
    unlock_delay_ms: float = 32
    quiet_zone_ms: float = 150
    settle_ms: float = 40
    explanation_delay_ms: float = 0
    loading_text: str = 'Loading question…'
    no_explanation_text: str = 'No explanation available'

    @classmethod
    def from_mapping(cls, mapping: Dict[str, Any]) -> 'DisplaySyncSettings':
        """Build settings from ``DISPLAY_*`` config keys, ignoring missing ones."""
        keys = {
            'DISPLAY_TICK_MS': 'tick_ms',
            'DISPLAY_COALESCE_MS': 'coalesce_ms',
            'DISPLAY_UNLOCK_DELAY_MS': 'unlock_delay_ms',
            'DISPLAY_QUIET_ZONE_MS': 'quiet_zone_ms',
            'DISPLAY_SETTLE_MS': 'settle_ms',
            'DISPLAY_EXPLANATION_DELAY_MS': 'explanation_delay_ms',
        }
        kwargs: Dict[str, Any] = {}
        for config_key, attr in keys.items():
            if config_key in mapping and mapping[config_key] is not None:
                kwargs[attr] = max(0.0, float(mapping[config_key]))
        if mapping.get('DISPLAY_LOADING_TEXT'):
            kwargs['loading_text'] = str(mapping['DISPLAY_LOADING_TEXT'])
        if mapping.get('DISPLAY_NO_EXPLANATION_TEXT'):
            kwargs['no_explanation_text'] = str(mapping['DISPLAY_NO_EXPLANATION_TEXT'])
        return cls(**kwargs)
