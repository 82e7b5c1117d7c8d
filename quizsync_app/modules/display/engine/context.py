from __future__ import annotations

from typing import Optional

from .channel import ExplanationChannel
from .ledger import GenerationLedger
from .quiet_zone import QuietZoneController
from .scheduler import TickScheduler


class DisplaySyncContext:
    """
    Owns the engine's shared state for one quiz session.

    Passed explicitly to the coordinator, the stream and the session so that
    nothing lives in module-level globals.
    """

    def __init__(
        self,
        scheduler: TickScheduler,
        ledger: Optional[GenerationLedger] = None,
        channel: Optional[ExplanationChannel] = None,
        quiet_zone: Optional[QuietZoneController] = None,
    ):
        self.scheduler = scheduler
        self.ledger = ledger or GenerationLedger()
        self.channel = channel or ExplanationChannel(self.ledger)
        self.quiet_zone = quiet_zone or QuietZoneController()

    def now(self) -> float:
        return self.scheduler.now()

    def is_quiet(self) -> bool:
        return self.quiet_zone.is_quiet(self.now())
