"""
agent_chat.hitl.lifecycle

Conversation lifecycle controller for the HITL core.

Responsibilities:
- Own the ledger and display cell for the active conversation.
- Reset both synchronously whenever the conversation changes.
- Start/stop the detector from (conversation, enabled, credentials).
- Expose the displayed interrupt and `resolve` to the presentation layer.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from agent_chat.hitl.coordinator import ResumeCoordinator, ResumeSubmitter
from agent_chat.hitl.detector import InterruptDetector, LiveProbe, StateQuery
from agent_chat.hitl.display import DisplayListener, InterruptDisplay
from agent_chat.hitl.ledger import HandledInterruptLedger
from agent_chat.hitl.models import Decision, DecisionKind, InterruptRecord
from agent_chat.observability.logging import bind_conversation, get_logger

log = get_logger(__name__)


class ConversationController:
    def __init__(
        self,
        *,
        probe: LiveProbe,
        query: StateQuery,
        submit: ResumeSubmitter,
        interval_s: float = 2.0,
        enabled: bool = True,
        has_credentials: bool = False,
    ) -> None:
        self.ledger = HandledInterruptLedger()
        self.display = InterruptDisplay()
        self.detector = InterruptDetector(
            ledger=self.ledger,
            display=self.display,
            probe=probe,
            query=query,
            interval_s=interval_s,
        )
        self.coordinator = ResumeCoordinator(
            ledger=self.ledger,
            display=self.display,
            submit=submit,
            has_credentials=lambda: self._has_credentials,
            is_active=lambda: self.active,
        )

        self._conversation_id: str | None = None
        self._enabled = enabled
        self._has_credentials = has_credentials

    @property
    def conversation_id(self) -> str | None:
        return self._conversation_id

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def has_credentials(self) -> bool:
        return self._has_credentials

    @property
    def active(self) -> bool:
        """True when the detector is allowed to run."""
        return bool(self._enabled and self._conversation_id and self._has_credentials)

    @property
    def interrupt(self) -> InterruptRecord | None:
        return self.display.current if self._enabled else None

    def subscribe(self, listener: DisplayListener):
        return self.display.subscribe(listener)

    def switch(self, conversation_id: str | None) -> None:
        if conversation_id == self._conversation_id:
            return
        log.info(
            "conversation_changed",
            previous=self._conversation_id,
            thread_id=conversation_id,
        )
        self.detector.deactivate()
        self.ledger.clear()
        self.display.reset()
        self._conversation_id = conversation_id
        bind_conversation(conversation_id)
        self._reschedule()

    def set_enabled(self, enabled: bool) -> None:
        if enabled != self._enabled:
            self._enabled = enabled
            self._reschedule()

    def set_credentials_available(self, available: bool) -> None:
        if available != self._has_credentials:
            self._has_credentials = available
            self._reschedule()

    def _reschedule(self) -> None:
        self.detector.deactivate()
        if self.active:
            self.detector.activate(self._conversation_id)
            return
        # Inert: nothing ticks and nothing stays on screen.
        self.display.withdraw()

    async def resolve(
        self,
        decision: Decision | DecisionKind | str,
        edited_args: Mapping[str, Any] | None = None,
    ) -> bool:
        if not self._enabled:
            log.warning("resume_skipped", reason="hitl_disabled")
            return False
        try:
            coerced = Decision.coerce(decision, edited_args)
        except ValueError:
            log.warning("resume_refused", reason=f"unknown decision {decision!r}")
            return False
        return await self.coordinator.resolve(coerced)

    def close(self) -> None:
        self.detector.deactivate()


# --- Module Notes -----------------------------------------------------------
# The ledger is cleared, never replaced, so the detector and coordinator keep sharing
# the same object; stale rollbacks are fenced by the display cell's epoch instead.
