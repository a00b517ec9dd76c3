"""
agent_chat.hitl.display

The displayed-interrupt state cell.

Responsibilities:
- Hold the displayed record and its change-suppression marker as one unit.
- Run the resolve state machine: idle -> displayed -> resolving -> {idle | displayed}.
- Notify listeners exactly once per visible change.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from agent_chat.hitl.ledger import HandledInterruptLedger
from agent_chat.hitl.models import InterruptRecord
from agent_chat.observability.logging import get_logger

log = get_logger(__name__)

DisplayListener = Callable[[InterruptRecord | None], None]


class Phase(str, Enum):
    idle = "idle"
    displayed = "displayed"
    resolving = "resolving"


@dataclass(frozen=True, slots=True)
class ResolveTicket:
    record: InterruptRecord
    epoch: int


class InterruptDisplay:
    """
    Single owner of "what the UI shows".

    The last-seen marker is derived from the held record, so the two cannot drift apart.
    Only the detector (`offer`/`withdraw`), the coordinator (`begin_resolve`/`complete`/
    `rollback`), and the lifecycle controller (`reset`) call into this object.
    """

    def __init__(self) -> None:
        self._phase = Phase.idle
        self._record: InterruptRecord | None = None
        self._epoch = 0
        self._listeners: list[DisplayListener] = []

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def current(self) -> InterruptRecord | None:
        return self._record if self._phase is Phase.displayed else None

    @property
    def marker(self) -> str | None:
        current = self.current
        return current.interrupt_id if current else None

    @property
    def epoch(self) -> int:
        return self._epoch

    def subscribe(self, listener: DisplayListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    # Detector side ----------------------------------------------------------

    def offer(
        self, record: InterruptRecord, ledger: HandledInterruptLedger
    ) -> InterruptRecord | None:
        """
        Publish `record` unless it is handled, already shown, or a resolve is in flight.

        Returns what is displayed afterwards.
        """

        if self._phase is Phase.resolving:
            return None
        if ledger.contains(record.interrupt_id):
            self.withdraw()
            return None
        if record.same_interrupt(self.current):
            return self._record
        self._set(Phase.displayed, record)
        return record

    def withdraw(self) -> None:
        if self._phase is Phase.displayed:
            self._set(Phase.idle, None)

    # Coordinator side -------------------------------------------------------

    def begin_resolve(self) -> ResolveTicket | None:
        record = self.current
        if record is None:
            return None
        self._phase = Phase.resolving
        self._notify(None)
        return ResolveTicket(record=record, epoch=self._epoch)

    def complete(self, ticket: ResolveTicket) -> None:
        if self._owns(ticket):
            self._phase = Phase.idle
            self._record = None

    def rollback(self, ticket: ResolveTicket, *, restore: bool = True) -> bool:
        """
        Undo an owned resolve. With `restore=False` the cell goes idle instead of
        showing the record again.
        """

        if not self._owns(ticket):
            log.info(
                "resolve_rollback_discarded",
                interrupt_id=ticket.record.interrupt_id,
                ticket_epoch=ticket.epoch,
                epoch=self._epoch,
            )
            return False
        if restore:
            self._set(Phase.displayed, ticket.record)
        else:
            # Already hidden by begin_resolve; nothing visible changes.
            self._phase = Phase.idle
            self._record = None
        return True

    # Lifecycle side ---------------------------------------------------------

    def reset(self) -> None:
        self._epoch += 1
        shown = self._phase is Phase.displayed
        self._phase = Phase.idle
        self._record = None
        if shown:
            self._notify(None)

    def _owns(self, ticket: ResolveTicket) -> bool:
        return (
            ticket.epoch == self._epoch
            and self._phase is Phase.resolving
            and self._record is ticket.record
        )

    def _set(self, phase: Phase, record: InterruptRecord | None) -> None:
        self._phase = phase
        self._record = record
        self._notify(record)

    def _notify(self, record: InterruptRecord | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(record)
            except Exception as e:
                log.warning("display_listener_failed", error=str(e))


# --- Module Notes -----------------------------------------------------------
# Every method is synchronous, so each call is atomic with respect to other coroutines
# on the loop.
