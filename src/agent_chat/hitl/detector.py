"""
agent_chat.hitl.detector

Interrupt detector (live probe first, persisted thread state as fallback).

Responsibilities:
- Tick once on activation and then on a fixed interval, through one code path.
- Normalize whichever channel reports a pause into an `InterruptRecord`.
- Offer the record to the display cell, deduplicated against the ledger.
- Discard results of ticks that a conversation change or deactivation superseded.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from agent_chat.hitl.display import InterruptDisplay
from agent_chat.hitl.ledger import HandledInterruptLedger
from agent_chat.hitl.models import InterruptRecord, LiveInterrupt
from agent_chat.observability.logging import clear_request_context, get_logger

log = get_logger(__name__)

LiveProbe = Callable[[str], LiveInterrupt | None]
StateQuery = Callable[[str], Awaitable[Mapping[str, Any]]]


def interrupts_from_state(state: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    """
    Candidate interrupts of a thread state: top-level list first, then per-task lists.
    """

    candidates: list[Any] = list(state.get("interrupts") or [])
    for task in state.get("tasks") or []:
        if isinstance(task, Mapping):
            candidates.extend(task.get("interrupts") or [])
    return [c for c in candidates if isinstance(c, Mapping)]


class InterruptDetector:
    def __init__(
        self,
        *,
        ledger: HandledInterruptLedger,
        display: InterruptDisplay,
        probe: LiveProbe,
        query: StateQuery,
        interval_s: float = 2.0,
    ) -> None:
        self._ledger = ledger
        self._display = display
        self._probe = probe
        self._query = query
        self._interval_s = interval_s

        self._conversation_id: str | None = None
        self._generation = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def conversation_id(self) -> str | None:
        return self._conversation_id

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def bind(self, conversation_id: str | None) -> None:
        # A new generation marks every tick already in flight as stale.
        self._generation += 1
        self._conversation_id = conversation_id

    def activate(self, conversation_id: str) -> None:
        self.deactivate()
        self.bind(conversation_id)
        self._task = asyncio.create_task(self._run(), name=f"hitl-detector:{conversation_id}")
        log.debug("detector_activated", interval_s=self._interval_s)

    def deactivate(self) -> None:
        self.bind(None)
        if self._task is not None:
            self._task.cancel()
            self._task = None
            log.debug("detector_deactivated")

    async def _run(self) -> None:
        # The loop outlives the request that activated it; keep only the conversation binding.
        clear_request_context()
        while True:
            await self.tick()
            await asyncio.sleep(self._interval_s)

    async def tick(self) -> InterruptRecord | None:
        """
        One detection pass. Returns the record displayed afterwards, if any.
        """

        conversation_id = self._conversation_id
        if conversation_id is None:
            return None
        generation = self._generation

        try:
            record = await self._observe(conversation_id)
        except Exception as e:
            # Detection failures degrade to "no interrupt" for this tick.
            log.warning("hitl_check_failed", thread_id=conversation_id, error=str(e))
            record = None

        if generation != self._generation:
            log.debug("stale_detection_discarded", thread_id=conversation_id)
            return None

        if record is None:
            self._display.withdraw()
            return None
        return self._display.offer(record, self._ledger)

    async def _observe(self, conversation_id: str) -> InterruptRecord | None:
        live = self._probe(conversation_id)
        if live is not None:
            return InterruptRecord.from_payload(
                live.payload,
                conversation_id=conversation_id,
                run_id=live.run_id,
                state=live.values,
            )

        state = await self._query(conversation_id)
        candidates = interrupts_from_state(state)
        if not candidates:
            return None
        return InterruptRecord.from_payload(
            candidates[0],
            conversation_id=conversation_id,
            state=state.get("values") or {},
        )


# --- Module Notes -----------------------------------------------------------
# When the live probe reports a pause the state query is skipped for that tick; the
# query is the only suspension point of a tick.
