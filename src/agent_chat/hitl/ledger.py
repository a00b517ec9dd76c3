"""
agent_chat.hitl.ledger

Conversation-scoped record of interrupts already resolved.

Responsibilities:
- Suppress re-display of an interrupt the backend still reports after resume.
- Support rollback so a failed resume can be retried.
"""

from __future__ import annotations


class HandledInterruptLedger:
    """
    Set of handled interrupt ids. Missing ids are ignored by every operation.

    `clear()` belongs to the conversation lifecycle; detector and coordinator only add,
    remove, and test membership.
    """

    def __init__(self) -> None:
        self._ids: set[str] = set()

    def add(self, interrupt_id: str | None) -> None:
        if interrupt_id:
            self._ids.add(interrupt_id)

    def remove(self, interrupt_id: str | None) -> None:
        if interrupt_id:
            self._ids.discard(interrupt_id)

    def contains(self, interrupt_id: str | None) -> bool:
        return bool(interrupt_id) and interrupt_id in self._ids

    __contains__ = contains

    def clear(self) -> None:
        self._ids.clear()

    def __len__(self) -> int:
        return len(self._ids)
