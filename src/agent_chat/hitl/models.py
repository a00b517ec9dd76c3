"""
agent_chat.hitl.models

Value types of the interrupt protocol.

Responsibilities:
- Normalize raw backend interrupt payloads into an immutable `InterruptRecord`.
- Model a human decision as a small tagged value.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

UNKNOWN_NODE = "unknown"

_IDENTITY_KEYS = frozenset({"id", "interrupt_id"})


class DecisionKind(str, Enum):
    approve = "approve"
    reject = "reject"
    edit = "edit"


@dataclass(frozen=True, slots=True)
class Decision:
    """
    A uniform human decision applied to every action request of one interrupt.
    """

    kind: DecisionKind
    edited_args: dict[str, Any] | None = None

    @classmethod
    def approve(cls) -> Decision:
        return cls(DecisionKind.approve)

    @classmethod
    def reject(cls) -> Decision:
        return cls(DecisionKind.reject)

    @classmethod
    def edit(cls, edited_args: Mapping[str, Any]) -> Decision:
        return cls(DecisionKind.edit, dict(edited_args))

    @classmethod
    def coerce(
        cls, decision: Decision | DecisionKind | str, edited_args: Mapping[str, Any] | None = None
    ) -> Decision:
        if isinstance(decision, Decision):
            return decision
        kind = DecisionKind(decision)
        return cls(kind, dict(edited_args) if edited_args is not None else None)


@dataclass(frozen=True, slots=True)
class LiveInterrupt:
    """
    What the live channel knows about a pause: the raw payload plus run context.
    """

    payload: Mapping[str, Any]
    run_id: str | None = None
    values: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class InterruptRecord:
    conversation_id: str
    node_name: str
    pending_action: Mapping[str, Any]
    interrupt_id: str | None = None
    run_id: str | None = None
    state_snapshot: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(
        cls,
        raw: Mapping[str, Any],
        *,
        conversation_id: str,
        run_id: str | None = None,
        state: Mapping[str, Any] | None = None,
    ) -> InterruptRecord:
        # Backends send either `{"id", "value": {...}}` or the value itself with an id beside it.
        value = raw.get("value") or raw
        if value is raw:
            value = {k: v for k, v in raw.items() if k not in _IDENTITY_KEYS}
        elif not isinstance(value, Mapping):
            value = {"value": value}
        interrupt_id = raw.get("id") or raw.get("interrupt_id")
        return cls(
            conversation_id=conversation_id,
            node_name=_node_name(value),
            pending_action=copy.deepcopy(dict(value)),
            interrupt_id=str(interrupt_id) if interrupt_id else None,
            run_id=run_id,
            state_snapshot=copy.deepcopy(dict(state or {})),
        )

    @property
    def action_requests(self) -> list[Mapping[str, Any]]:
        requests = self.pending_action.get("action_requests")
        if not isinstance(requests, list):
            return []
        return [r for r in requests if isinstance(r, Mapping)]

    def same_interrupt(self, other: InterruptRecord | None) -> bool:
        """
        Identity used for change suppression.

        Records with an id compare by id; records without one compare by pending action.
        """

        if other is None:
            return False
        if self.interrupt_id is not None or other.interrupt_id is not None:
            return self.interrupt_id == other.interrupt_id
        return self.pending_action == other.pending_action

    def to_dict(self) -> dict[str, Any]:
        return {
            "interrupt_id": self.interrupt_id,
            "run_id": self.run_id,
            "conversation_id": self.conversation_id,
            "node_name": self.node_name,
            "pending_action": copy.deepcopy(dict(self.pending_action)),
            "state_snapshot": copy.deepcopy(dict(self.state_snapshot)),
        }


def _node_name(value: Mapping[str, Any]) -> str:
    requests = value.get("action_requests")
    if isinstance(requests, list) and requests and isinstance(requests[0], Mapping):
        name = requests[0].get("name")
        if name:
            return str(name)
    name = value.get("name")
    return str(name) if name else UNKNOWN_NODE


# --- Module Notes -----------------------------------------------------------
# Records are snapshots: payload and state are deep-copied at construction so later
# mutations of the live stream's buffers cannot leak into a displayed record.
