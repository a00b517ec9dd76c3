"""
agent_chat.hitl.codec

Decision codec for the backend's resume command.

Responsibilities:
- Encode one uniform decision into one entry per action request, in request order.
- Read the review policy (permitted decision kinds) attached to an interrupt.
"""

from __future__ import annotations

from typing import Any, Mapping

from agent_chat.hitl.models import Decision, DecisionKind, InterruptRecord


class DecisionNotPermitted(ValueError):
    pass


def encode_entry(decision: Decision, action_request: Mapping[str, Any]) -> dict[str, Any]:
    if decision.kind is DecisionKind.edit:
        if decision.edited_args is None:
            raise DecisionNotPermitted("edit decision requires edited arguments")
        return {
            "type": DecisionKind.edit.value,
            "edited_action": {
                "name": action_request.get("name"),
                "args": dict(decision.edited_args),
            },
        }
    return {"type": decision.kind.value}


def encode_resume(record: InterruptRecord, decision: Decision) -> dict[str, Any]:
    """
    Returns the resume value: `{"decisions": [...]}`, one entry per action request.

    Raises `DecisionNotPermitted` when the review policy forbids the decision kind.
    """

    allowed = permitted_kinds(record)
    if decision.kind not in allowed:
        raise DecisionNotPermitted(f"{decision.kind.value} is not permitted for this interrupt")
    if decision.kind is DecisionKind.edit and decision.edited_args is None:
        raise DecisionNotPermitted("edit decision requires edited arguments")
    return {"decisions": [encode_entry(decision, r) for r in record.action_requests]}


def permitted_kinds(record: InterruptRecord) -> frozenset[DecisionKind]:
    # Without review configs every kind is allowed; with them, only kinds allowed for all actions.
    configs = record.pending_action.get("review_configs")
    if not isinstance(configs, list) or not configs:
        return frozenset(DecisionKind)

    allowed = set(DecisionKind)
    names = {r.get("name") for r in record.action_requests}
    for cfg in configs:
        if not isinstance(cfg, Mapping):
            continue
        action = cfg.get("action_name") or cfg.get("tool_name")
        if action is not None and names and action not in names:
            continue
        kinds = cfg.get("allowed_decisions")
        if not isinstance(kinds, list):
            continue
        allowed &= {k for k in DecisionKind if k.value in kinds}
    return frozenset(allowed)


# --- Module Notes -----------------------------------------------------------
# Mixed per-action decisions are representable on the wire but never produced here;
# every entry of one resume carries the same decision kind.
