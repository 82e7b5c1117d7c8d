# File: quizsync_app/modules/display/services/session_service.py
"""
Display Session
===============
Wires the collaborators (question data, banners, display modes, raw
explanations) to the synchronization engine for one active quiz session.

Lifecycle::

    session = DisplaySession(source, source, modes, scheduler, explanations=source)
    session.start(0)
    session.stream.subscribe(render)
    session.answer()              # option clicked -> explanation requested
    session.navigate(1)           # bump, purge, lock, quiet zone
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, TypeVar

from quizsync_app.core.signals import content_availability_changed

from ..engine.context import DisplaySyncContext
from ..engine.coordinator import ResetCoordinator
from ..engine.resolver import DisplayResolver
from ..engine.scheduler import ScheduledCall, TickScheduler
from ..providers import BannerSource, DisplayModeStore, ExplanationSource, QuestionSource
from ..schemas import (
    CombinedFrame,
    DisplayMode,
    DisplayModeState,
    DisplaySyncSettings,
    ExplanationSnapshot,
    NavigationEvent,
    ResolveOutcome,
    TaggedExplanation,
)
from .display_stream import DisplayTextStream
from .producer import ExplanationProducer

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DisplaySession:
    def __init__(
        self,
        questions: QuestionSource,
        banners: BannerSource,
        modes: DisplayModeStore,
        scheduler: TickScheduler,
        explanations: Optional[ExplanationSource] = None,
        settings: Optional[DisplaySyncSettings] = None,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id
        self.questions = questions
        self.banners = banners
        self.modes = modes
        self.settings = settings or DisplaySyncSettings()

        self.context = DisplaySyncContext(scheduler)
        self.coordinator = ResetCoordinator(
            self.context,
            unlock_delay_ms=self.settings.unlock_delay_ms,
            quiet_zone_ms=self.settings.quiet_zone_ms,
            settle_ms=self.settings.settle_ms,
        )
        self.resolver = DisplayResolver(
            loading_text=self.settings.loading_text,
            no_explanation_text=self.settings.no_explanation_text,
        )
        self.stream = DisplayTextStream(
            scheduler,
            self.resolver,
            self.build_frame,
            coalesce_ms=self.settings.coalesce_ms,
            sender=self,
        )
        self.producer = (
            ExplanationProducer(explanations, self.settings.no_explanation_text)
            if explanations is not None
            else None
        )

        self._index: Optional[int] = None
        self._should_show = False
        self._content_available = False

        self.context.channel.add_listener(lambda index: self._inputs_changed())
        self.coordinator.add_listener(lambda reason: self._inputs_changed())

    # ── read side ────────────────────────────────────────────────────

    @property
    def scheduler(self) -> TickScheduler:
        return self.context.scheduler

    @property
    def current_index(self) -> Optional[int]:
        return self._index

    @property
    def generation(self) -> int:
        return self.context.ledger.current

    @property
    def should_show(self) -> bool:
        return self._should_show

    @property
    def display_text(self) -> str:
        return self.stream.read()

    @property
    def content_available(self) -> bool:
        self._refresh_content_availability()
        return self._content_available

    def build_frame(self) -> CombinedFrame:
        """Collect the latest value of every input into one frame."""
        ctx = self.context
        index = self._index if self._index is not None else 0
        active = ctx.channel.active_index
        explanation = ctx.channel.snapshot(active) if active is not None else ExplanationSnapshot(idx=index)
        mode_state = self._safe(lambda: self.modes.get(index), DisplayModeState())

        return CombinedFrame(
            index=index,
            question_text=self._safe(lambda: self.questions.question_text(index), ''),
            banner_text=self._safe(lambda: self.banners.correct_answer_banner(index), ''),
            explanation=explanation,
            should_show=self._should_show,
            navigating=self.coordinator.navigating,
            quiet_until=ctx.quiet_zone.until,
            mode=mode_state.mode,
            answered=mode_state.answered,
            multiple_answer=bool(self._safe(lambda: self.questions.is_multiple_answer(index), False)),
            locked=ctx.channel.locked,
            has_record=ctx.channel.has_record(index),
        )

    def snapshot(self) -> Dict[str, Any]:
        text = self.display_text
        resolution = self.stream.latest_resolution
        index = self._index
        mode_state = self.modes.get(index) if index is not None else DisplayModeState()
        return {
            'session_id': self.session_id,
            'index': index,
            'text': text,
            'state': resolution.state.value if resolution else None,
            'generation': self.generation,
            'navigating': self.coordinator.navigating,
            'quiet': self.context.is_quiet(),
            'locked': self.context.channel.locked,
            'mode': mode_state.mode.value,
            'answered': mode_state.answered,
            'should_show': self._should_show,
            'gate_open': self.context.channel.get_gate(index) if index is not None else False,
            'content_available': self.content_available,
        }

    # ── navigation ───────────────────────────────────────────────────

    def start(self, index: int = 0) -> int:
        """Initial load: navigate to ``index`` and complete at once."""
        generation = self.begin_navigation(index)
        self.complete_navigation(index)
        return generation

    def begin_navigation(self, target_index: int, timestamp: Optional[float] = None) -> int:
        target_index = int(target_index)
        if target_index < 0:
            raise ValueError(f"Question index must be non-negative, got {target_index}")
        self._index = target_index
        self._should_show = False
        self.resolver.forget(keep=target_index)
        event = NavigationEvent(
            target_index=target_index,
            timestamp=self.scheduler.now() if timestamp is None else timestamp,
            phase='start',
        )
        return self.coordinator.begin(event)

    def complete_navigation(self, target_index: int, timestamp: Optional[float] = None) -> bool:
        event = NavigationEvent(
            target_index=int(target_index),
            timestamp=self.scheduler.now() if timestamp is None else timestamp,
            phase='complete',
        )
        return self.coordinator.complete(event)

    def navigate(self, target_index: int) -> int:
        """Start navigating and complete on the next render tick."""
        generation = self.begin_navigation(target_index)
        self.scheduler.request_tick(lambda: self.complete_navigation(target_index))
        return generation

    # ── explanation flow ─────────────────────────────────────────────

    def resolve_explanation(self, index: int, text: Optional[str], token: int) -> ResolveOutcome:
        """Entry point for external producers holding a tagged result."""
        return self.context.channel.resolve(index, text, token)

    def deliver(self, result: TaggedExplanation) -> ResolveOutcome:
        return self.resolve_explanation(result.index, result.text, result.token)

    def request_explanation(self, index: Optional[int] = None) -> Optional[ScheduledCall]:
        """Produce the explanation for ``index`` on a later tick, tagged with today's token."""
        if self.producer is None:
            logger.warning("No explanation source configured for session %s", self.session_id)
            return None
        index = self._resolve_index(index)
        token = self.generation

        def run() -> None:
            self.deliver(self.producer.produce(index, token))

        return self.scheduler.call_later(self.settings.explanation_delay_ms, run)

    async def fetch_explanation(self, index: Optional[int] = None) -> Optional[ResolveOutcome]:
        """Async variant of ``request_explanation`` for awaitable sources."""
        if self.producer is None:
            logger.warning("No explanation source configured for session %s", self.session_id)
            return None
        index = self._resolve_index(index)
        token = self.generation
        result = await self.producer.produce_async(index, token)
        return self.deliver(result)

    # ── display-mode inputs ──────────────────────────────────────────

    def show_explanation(self, show: bool = True) -> None:
        if self._should_show != bool(show):
            self._should_show = bool(show)
            self._inputs_changed()

    def set_display_mode(self, mode, index: Optional[int] = None) -> DisplayModeState:
        state = self.modes.set_mode(self._resolve_index(index), DisplayMode.parse(mode))
        self._inputs_changed()
        return state

    def mark_answered(self, index: Optional[int] = None, answered: bool = True) -> DisplayModeState:
        state = self.modes.mark_answered(self._resolve_index(index), answered)
        self._inputs_changed()
        return state

    def answer(self, index: Optional[int] = None) -> Optional[ScheduledCall]:
        """Option clicked: mark answered, ask to show, and request the explanation."""
        index = self._resolve_index(index)
        self.mark_answered(index)
        self.show_explanation(True)
        return self.request_explanation(index)

    def refresh(self) -> None:
        """Question data changed upstream."""
        self._inputs_changed()

    # ── internals ────────────────────────────────────────────────────

    def _resolve_index(self, index: Optional[int]) -> int:
        if index is None:
            if self._index is None:
                raise ValueError("Session has not been started")
            return self._index
        return int(index)

    def _inputs_changed(self) -> None:
        self._refresh_content_availability()
        self.stream.invalidate()

    def _refresh_content_availability(self) -> None:
        index = self._index
        available = False
        if index is not None:
            text = self._safe(lambda: self.questions.question_text(index), '')
            options = self._safe(lambda: self.questions.option_count(index), 0)
            available = bool((text or '').strip()) and options > 0
        if available != self._content_available:
            self._content_available = available
            content_availability_changed.send(self, available=available, index=index)

    def _safe(self, getter: Callable[[], T], default: T) -> T:
        try:
            return getter()
        except Exception:
            logger.exception("Collaborator call failed in session %s", self.session_id)
            return default
