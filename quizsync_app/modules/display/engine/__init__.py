"""Explanation-display synchronization engine. Pure logic, no Flask."""

from .channel import ExplanationChannel
from .context import DisplaySyncContext
from .coordinator import ResetCoordinator
from .ledger import GenerationLedger
from .quiet_zone import QuietZoneController
from .resolver import DisplayResolver
from .scheduler import (
    AsyncioTickScheduler,
    MonotonicTickScheduler,
    ScheduledCall,
    TickScheduler,
    VirtualTickScheduler,
)

__all__ = [
    "AsyncioTickScheduler",
    "DisplayResolver",
    "DisplaySyncContext",
    "ExplanationChannel",
    "GenerationLedger",
    "MonotonicTickScheduler",
    "QuietZoneController",
    "ResetCoordinator",
    "ScheduledCall",
    "TickScheduler",
    "VirtualTickScheduler",
]
