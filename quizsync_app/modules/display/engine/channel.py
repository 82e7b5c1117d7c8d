"""
Explanation Channel
===================
Arena of explanation records keyed by question index.

The channel is the only shared mutable state in the engine. Every write goes
through ``set_pending``, ``resolve``, ``unlock`` or ``purge``; each of them
checks the generation token and the active index before touching a record.

Lifecycle of one record::

    set_pending(i)            -> {text: '', gate: False, generation: g}
    resolve(i, text, g)       -> {text: text, gate: True}      (unlocked)
                              -> parked until unlock()          (locked)
    purge(i)                  -> record removed
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from quizsync_app.core.signals import explanation_discarded

from ..exceptions import IndexMismatchError, StaleGenerationError
from ..schemas import ExplanationRecord, ExplanationSnapshot, ResolveOutcome
from .ledger import GenerationLedger

logger = logging.getLogger(__name__)

ChangeListener = Callable[[int], None]


class ExplanationChannel:
    def __init__(self, ledger: GenerationLedger):
        self._ledger = ledger
        self._records: Dict[int, ExplanationRecord] = {}
        self._active_index: Optional[int] = None
        self._locked = False
        self._listeners: List[ChangeListener] = []

    # ── observers ────────────────────────────────────────────────────

    def add_listener(self, listener: ChangeListener) -> Callable[[], None]:
        """Call ``listener(index)`` after every effective state change."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self, index: int) -> None:
        for listener in list(self._listeners):
            listener(index)

    # ── state accessors ──────────────────────────────────────────────

    @property
    def active_index(self) -> Optional[int]:
        return self._active_index

    @property
    def locked(self) -> bool:
        return self._locked

    def indices(self) -> List[int]:
        return sorted(self._records)

    def has_record(self, index: int) -> bool:
        return index in self._records

    def get_gate(self, index: int) -> bool:
        record = self._records.get(index)
        return bool(record and record.gate_open)

    def get_text(self, index: int) -> str:
        record = self._records.get(index)
        return record.text if record else ''

    def snapshot(self, index: int) -> ExplanationSnapshot:
        record = self._records.get(index)
        if record is None:
            return ExplanationSnapshot(idx=index)
        return record.snapshot()

    def record(self, index: int) -> Optional[ExplanationRecord]:
        """Return a copy of the record so callers cannot mutate the arena."""
        record = self._records.get(index)
        if record is None:
            return None
        return ExplanationRecord(
            index=record.index,
            text=record.text,
            gate_open=record.gate_open,
            generation=record.generation,
            parked_text=record.parked_text,
        )

    # ── lifecycle ────────────────────────────────────────────────────

    def set_active(self, index: int) -> None:
        if index < 0:
            raise ValueError(f"Question index must be non-negative, got {index}")
        self._active_index = index

    def set_pending(self, index: int) -> None:
        """Mark ``index`` as awaiting its explanation under the current generation."""
        if index < 0:
            raise ValueError(f"Question index must be non-negative, got {index}")
        previous = self._records.get(index)
        self._records[index] = ExplanationRecord(index=index, generation=self._ledger.current)
        if previous is None or previous.text or previous.gate_open:
            self._notify(index)

    def lock(self) -> None:
        self._locked = True

    def unlock(self) -> None:
        """Reopen the channel and promote a parked result for the active index."""
        self._locked = False
        index = self._active_index
        record = self._records.get(index) if index is not None else None
        if record is None or record.parked_text is None:
            return

        text = record.parked_text
        record.parked_text = None
        if not self._ledger.is_current(record.generation):
            logger.debug("Dropping parked explanation for Q%s: generation moved on", index + 1)
            return
        record.text = text
        record.gate_open = True
        logger.debug("Promoted parked explanation for Q%s", index + 1)
        self._notify(index)

    def resolve(self, index: int, text: Optional[str], token: int) -> ResolveOutcome:
        """
        Write explanation text for ``index`` if ``token`` is still current.

        Stale or mismatched results are logged and discarded permanently.
        Blank text counts as no content and never opens the gate.
        """
        if not self._ledger.is_current(token):
            error = StaleGenerationError(index, token, self._ledger.current)
            logger.info("Discarded: %s", error.message)
            explanation_discarded.send(self, index=index, token=token, reason='stale')
            return ResolveOutcome.STALE

        if index != self._active_index:
            error = IndexMismatchError(index, self._active_index)
            logger.info("Discarded: %s", error.message)
            explanation_discarded.send(self, index=index, token=token, reason='mismatch')
            return ResolveOutcome.MISMATCH

        trimmed = (text or '').strip()
        if not trimmed:
            logger.info("No content to resolve for Q%s", index + 1)
            explanation_discarded.send(self, index=index, token=token, reason='empty')
            return ResolveOutcome.EMPTY

        record = self._records.get(index)
        if record is None or record.generation != token:
            # Resolved without a pending slot from this generation; open one.
            record = ExplanationRecord(index=index, generation=token)
            self._records[index] = record

        if self._locked:
            if record.parked_text == trimmed:
                return ResolveOutcome.DUPLICATE
            record.parked_text = trimmed
            logger.debug("Channel locked; parked explanation for Q%s", index + 1)
            return ResolveOutcome.PARKED

        if record.gate_open and record.text == trimmed:
            return ResolveOutcome.DUPLICATE

        record.text = trimmed
        record.gate_open = True
        record.parked_text = None
        logger.debug("Gate opened for Q%s", index + 1)
        self._notify(index)
        return ResolveOutcome.APPLIED

    def purge(self, index: int) -> None:
        """Clear text, close the gate and drop the record for ``index``."""
        record = self._records.pop(index, None)
        if record is None:
            return
        record.text = ''
        record.gate_open = False
        record.parked_text = None
        self._notify(index)

    def purge_except(self, keep: int) -> List[int]:
        purged = [index for index in self._records if index != keep]
        for index in purged:
            self.purge(index)
        if purged:
            logger.debug("Purged stale explanation records %s (keeping Q%s)", purged, keep + 1)
        return purged

    def clear(self) -> None:
        for index in list(self._records):
            self.purge(index)
        self._active_index = None
        self._locked = False
