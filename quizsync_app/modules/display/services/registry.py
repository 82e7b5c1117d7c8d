# File: quizsync_app/modules/display/services/registry.py
"""In-process registry of live display sessions for the HTTP layer."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, Optional

from quizsync_app.core.error_handlers import CapacityError, NotFoundError

from ..engine.scheduler import MonotonicTickScheduler
from ..providers import InMemoryDisplayModeStore, StaticQuizSource
from ..schemas import DisplaySyncSettings
from .session_service import DisplaySession

logger = logging.getLogger(__name__)


@dataclass
class ManagedSession:
    session: DisplaySession
    source: StaticQuizSource
    scheduler: MonotonicTickScheduler
    lock: threading.RLock = field(default_factory=threading.RLock)

    def pump(self) -> int:
        """Run the timers that fell due since the last request."""
        return self.scheduler.run_due()


class SessionRegistry:
    def __init__(self, max_sessions: int = 256, clock: Callable[[], float] = time.monotonic):
        self.max_sessions = max_sessions
        self.clock = clock
        self._sessions: Dict[str, ManagedSession] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def create(
        self,
        questions: Iterable[Dict[str, Any]],
        settings: Optional[DisplaySyncSettings] = None,
        start_index: int = 0,
    ) -> ManagedSession:
        settings = settings or DisplaySyncSettings()
        with self._lock:
            if len(self._sessions) >= self.max_sessions:
                raise CapacityError(limit=self.max_sessions)

            session_id = uuid.uuid4().hex
            source = StaticQuizSource(questions)
            scheduler = MonotonicTickScheduler(tick_ms=settings.tick_ms, clock=self.clock)
            session = DisplaySession(
                questions=source,
                banners=source,
                modes=InMemoryDisplayModeStore(),
                scheduler=scheduler,
                explanations=source,
                settings=settings,
                session_id=session_id,
            )
            managed = ManagedSession(session=session, source=source, scheduler=scheduler)
            self._sessions[session_id] = managed

        with managed.lock:
            session.start(start_index)
        logger.info("Display session %s created (%s questions)", session_id, len(source))
        return managed

    def get(self, session_id: str) -> ManagedSession:
        managed = self._sessions.get(session_id)
        if managed is None:
            raise NotFoundError(f"Display session {session_id} not found", resource='display_session')
        return managed

    def remove(self, session_id: str) -> None:
        with self._lock:
            managed = self._sessions.pop(session_id, None)
        if managed is None:
            raise NotFoundError(f"Display session {session_id} not found", resource='display_session')
        logger.info("Display session %s removed", session_id)

    @contextmanager
    def acquire(self, session_id: str) -> Iterator[ManagedSession]:
        """Hold the session's lock and run due timers before yielding it."""
        managed = self.get(session_id)
        with managed.lock:
            managed.pump()
            yield managed
