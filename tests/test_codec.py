"""
tests.test_codec

Decision codec: one entry per action request, in request order, policy enforced.
"""

from __future__ import annotations

import pytest

from agent_chat.hitl.codec import DecisionNotPermitted, encode_resume, permitted_kinds
from agent_chat.hitl.models import Decision, DecisionKind, InterruptRecord


def _record(value: dict, interrupt_id: str | None = "i1") -> InterruptRecord:
    raw = {"id": interrupt_id, "value": value} if interrupt_id else value
    return InterruptRecord.from_payload(raw, conversation_id="t-1")


def test_uniform_approve_preserves_order_and_length() -> None:
    record = _record({"action_requests": [{"name": "a"}, {"name": "b"}, {"name": "c"}]})

    resume = encode_resume(record, Decision.approve())

    assert resume == {"decisions": [{"type": "approve"}] * 3}


def test_reject_encodes_one_entry_per_request() -> None:
    record = _record({"action_requests": [{"name": "a"}, {"name": "b"}]})

    assert encode_resume(record, Decision.reject())["decisions"] == [
        {"type": "reject"},
        {"type": "reject"},
    ]


def test_edit_carries_arguments_for_each_action_in_order() -> None:
    record = _record({"action_requests": [{"name": "first", "args": {}}, {"name": "second"}]})

    decisions = encode_resume(record, Decision.edit({"path": "/tmp/x"}))["decisions"]

    assert [d["edited_action"]["name"] for d in decisions] == ["first", "second"]
    assert all(d["type"] == "edit" for d in decisions)
    assert all(d["edited_action"]["args"] == {"path": "/tmp/x"} for d in decisions)


def test_edit_without_arguments_is_refused() -> None:
    record = _record({"action_requests": [{"name": "a"}]})

    with pytest.raises(DecisionNotPermitted):
        encode_resume(record, Decision(DecisionKind.edit))


def test_missing_action_requests_encode_to_empty_list() -> None:
    record = _record({"name": "send_email"})

    assert encode_resume(record, Decision.approve()) == {"decisions": []}


def test_review_configs_restrict_permitted_kinds() -> None:
    record = _record(
        {
            "action_requests": [{"name": "delete_file"}, {"name": "write_file"}],
            "review_configs": [
                {"action_name": "delete_file", "allowed_decisions": ["approve", "reject"]},
                {"action_name": "write_file", "allowed_decisions": ["approve", "edit"]},
            ],
        }
    )

    assert permitted_kinds(record) == frozenset({DecisionKind.approve})
    with pytest.raises(DecisionNotPermitted):
        encode_resume(record, Decision.reject())


def test_without_review_configs_every_kind_is_permitted() -> None:
    record = _record({"action_requests": [{"name": "a"}]})

    assert permitted_kinds(record) == frozenset(DecisionKind)


def test_decision_coerce_accepts_strings() -> None:
    assert Decision.coerce("approve") == Decision.approve()
    assert Decision.coerce("edit", {"k": 1}) == Decision.edit({"k": 1})
    with pytest.raises(ValueError):
        Decision.coerce("maybe")
