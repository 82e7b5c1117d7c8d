# File: quizsync_app/modules/display/interface.py
"""
Display Interface
=================
Public API for other modules to interact with display synchronization.
Cross-module callers use this facade instead of reaching into the engine.
"""

from typing import Any, Dict, Iterable, Optional

from flask import current_app

from quizsync_app.services.config_service import collect_display_settings

from .engine import TickScheduler, VirtualTickScheduler
from .providers import (
    BannerSource,
    DisplayModeStore,
    ExplanationSource,
    InMemoryDisplayModeStore,
    QuestionSource,
    StaticQuizSource,
)
from .schemas import DisplayMode, DisplayState, DisplaySyncSettings, ResolveOutcome
from .services.registry import ManagedSession, SessionRegistry
from .services.session_service import DisplaySession

__all__ = [
    "BannerSource",
    "DisplayInterface",
    "DisplayMode",
    "DisplayModeStore",
    "DisplaySession",
    "DisplayState",
    "ExplanationSource",
    "QuestionSource",
    "ResolveOutcome",
]


class DisplayInterface:
    """Public interface for display module operations."""

    @staticmethod
    def load_settings(mapping: Optional[Dict[str, Any]] = None) -> DisplaySyncSettings:
        """
        Build engine settings from configuration.

        Args:
            mapping: Explicit ``DISPLAY_*`` values; the app config is used when omitted.
        """
        return DisplaySyncSettings.from_mapping(collect_display_settings(mapping))

    @staticmethod
    def build_session(
        questions: Iterable[Dict[str, Any]],
        scheduler: Optional[TickScheduler] = None,
        settings: Optional[DisplaySyncSettings] = None,
        modes: Optional[DisplayModeStore] = None,
        session_id: Optional[str] = None,
    ) -> DisplaySession:
        """
        Create an unstarted session over a list of question dicts.

        Without a scheduler the session runs on a virtual clock, which is
        what offline callers and tests want.
        """
        settings = settings or DisplaySyncSettings()
        source = StaticQuizSource(questions)
        return DisplaySession(
            questions=source,
            banners=source,
            modes=modes or InMemoryDisplayModeStore(),
            scheduler=scheduler or VirtualTickScheduler(tick_ms=settings.tick_ms),
            explanations=source,
            settings=settings,
            session_id=session_id,
        )

    @staticmethod
    def parse_mode(value: Any) -> DisplayMode:
        return DisplayMode.parse(value)

    @staticmethod
    def get_registry() -> SessionRegistry:
        return current_app.extensions["display_sessions"]

    @staticmethod
    def open_session(questions: Iterable[Dict[str, Any]], start_index: int = 0) -> ManagedSession:
        """Register and start a wall-clock session for the current app."""
        return DisplayInterface.get_registry().create(
            questions,
            settings=DisplayInterface.load_settings(),
            start_index=start_index,
        )
