"""
agent_chat.hitl.coordinator

Resume coordinator.

Responsibilities:
- Turn the displayed interrupt plus a human decision into a resume submission.
- Mark the interrupt handled and hide it before the network call starts.
- Roll both back when the submission fails, so the interrupt can be retried.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from agent_chat.hitl.codec import DecisionNotPermitted, encode_resume
from agent_chat.hitl.display import InterruptDisplay
from agent_chat.hitl.ledger import HandledInterruptLedger
from agent_chat.hitl.models import Decision
from agent_chat.observability.logging import get_logger

log = get_logger(__name__)

ResumeSubmitter = Callable[[str, Mapping[str, Any]], Awaitable[Any]]


class ResumeCoordinator:
    def __init__(
        self,
        *,
        ledger: HandledInterruptLedger,
        display: InterruptDisplay,
        submit: ResumeSubmitter,
        has_credentials: Callable[[], bool],
        is_active: Callable[[], bool] | None = None,
    ) -> None:
        self._ledger = ledger
        self._display = display
        self._submit = submit
        self._has_credentials = has_credentials
        self._is_active = is_active or (lambda: True)

    async def resolve(self, decision: Decision) -> bool:
        """
        Returns True when the backend accepted the resume, False otherwise.
        """

        record = self._display.current
        if record is None or not self._has_credentials():
            log.warning(
                "resume_skipped",
                reason="no_interrupt" if record is None else "no_credentials",
            )
            return False

        try:
            resume = encode_resume(record, decision)
        except DecisionNotPermitted as e:
            log.warning("resume_refused", interrupt_id=record.interrupt_id, reason=str(e))
            return False

        # Order matters: ledger first, then hide, then the only await.
        self._ledger.add(record.interrupt_id)
        ticket = self._display.begin_resolve()
        if ticket is None:
            self._ledger.remove(record.interrupt_id)
            log.warning("resume_skipped", interrupt_id=record.interrupt_id, reason="not_displayed")
            return False
        log.info(
            "resume_submitting",
            interrupt_id=record.interrupt_id,
            decision=decision.kind.value,
            decisions=len(resume["decisions"]),
        )

        try:
            await self._submit(record.conversation_id, resume)
        except Exception as e:
            log.warning("resume_failed", interrupt_id=record.interrupt_id, error=str(e))
            # A ticket from a superseded conversation must not touch the current ledger.
            # While inert, the record is unhandled again but stays off screen.
            if self._display.rollback(ticket, restore=self._is_active()):
                self._ledger.remove(record.interrupt_id)
            return False

        self._display.complete(ticket)
        log.info("resume_accepted", interrupt_id=record.interrupt_id)
        return True


# --- Module Notes -----------------------------------------------------------
# A successful resume needs no follow-up here: the next detector tick observes the
# backend's advanced state, and the ledger hides the old interrupt until then.
