"""
tests.test_detector

Interrupt detector: channel precedence, normalization, dedup, change suppression,
failure degradation, and discarding of superseded ticks.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from agent_chat.hitl.detector import InterruptDetector, interrupts_from_state
from agent_chat.hitl.display import InterruptDisplay
from agent_chat.hitl.ledger import HandledInterruptLedger
from agent_chat.hitl.models import UNKNOWN_NODE, InterruptRecord, LiveInterrupt


class Channels:
    def __init__(self) -> None:
        self.live: LiveInterrupt | None = None
        self.state: dict[str, Any] = {"interrupts": [], "tasks": []}
        self.error: Exception | None = None
        self.queries: list[str] = []

    def probe(self, thread_id: str) -> LiveInterrupt | None:
        return self.live

    async def query(self, thread_id: str) -> dict[str, Any]:
        self.queries.append(thread_id)
        if self.error is not None:
            raise self.error
        return self.state


def _detector(channels: Channels, ledger: HandledInterruptLedger | None = None):
    display = InterruptDisplay()
    detector = InterruptDetector(
        ledger=ledger or HandledInterruptLedger(),
        display=display,
        probe=channels.probe,
        query=channels.query,
        interval_s=0.01,
    )
    detector.bind("t-1")
    return detector, display


@pytest.mark.asyncio
async def test_live_probe_wins_and_skips_state_query() -> None:
    channels = Channels()
    channels.live = LiveInterrupt(
        payload={"id": "i1", "action_requests": [{"name": "analyze_image", "args": {"x": 1}}]},
        run_id="r-7",
        values={"messages": []},
    )
    detector, display = _detector(channels)

    record = await detector.tick()

    assert record is not None
    assert record.node_name == "analyze_image"
    assert record.interrupt_id == "i1"
    assert record.run_id == "r-7"
    assert record.conversation_id == "t-1"
    assert display.current is record
    assert channels.queries == []


@pytest.mark.asyncio
async def test_fallback_state_query_is_used_when_probe_is_empty() -> None:
    channels = Channels()
    channels.state = {"interrupts": [{"id": "i2", "value": {"name": "send_email"}}], "tasks": []}
    detector, display = _detector(channels)

    record = await detector.tick()

    assert record is not None
    assert record.node_name == "send_email"
    assert record.interrupt_id == "i2"
    assert record.run_id is None
    assert channels.queries == ["t-1"]


@pytest.mark.asyncio
async def test_task_level_interrupts_are_candidates() -> None:
    channels = Channels()
    channels.state = {
        "values": {"todos": []},
        "tasks": [{"interrupts": []}, {"interrupts": [{"id": "i3", "value": {}}]}],
    }
    detector, _ = _detector(channels)

    record = await detector.tick()

    assert record.interrupt_id == "i3"
    assert record.node_name == UNKNOWN_NODE
    assert record.state_snapshot == {"todos": []}


def test_interrupts_from_state_concatenates_top_level_first() -> None:
    state = {"interrupts": [{"id": "a"}], "tasks": [{"interrupts": [{"id": "b"}]}, None]}

    assert [c["id"] for c in interrupts_from_state(state)] == ["a", "b"]


@pytest.mark.asyncio
async def test_handled_interrupt_is_not_displayed() -> None:
    channels = Channels()
    channels.live = LiveInterrupt(payload={"id": "i1", "action_requests": [{"name": "x"}]})
    ledger = HandledInterruptLedger()
    ledger.add("i1")
    detector, display = _detector(channels, ledger)

    assert await detector.tick() is None
    assert display.current is None


@pytest.mark.asyncio
async def test_consecutive_ticks_publish_once() -> None:
    channels = Channels()
    channels.live = LiveInterrupt(payload={"id": "i1", "action_requests": [{"name": "x"}]})
    detector, display = _detector(channels)
    published: list[InterruptRecord | None] = []
    display.subscribe(published.append)

    await detector.tick()
    await detector.tick()

    assert len(published) == 1


@pytest.mark.asyncio
async def test_no_pause_clears_displayed_record() -> None:
    channels = Channels()
    channels.live = LiveInterrupt(payload={"id": "i1"})
    detector, display = _detector(channels)
    await detector.tick()

    channels.live = None
    assert await detector.tick() is None
    assert display.current is None


@pytest.mark.asyncio
async def test_query_failure_degrades_to_no_interrupt() -> None:
    channels = Channels()
    channels.state = {"interrupts": [{"id": "i2", "value": {"name": "send_email"}}]}
    detector, display = _detector(channels)
    await detector.tick()

    channels.error = ConnectionError("backend unreachable")

    assert await detector.tick() is None
    assert display.current is None


@pytest.mark.asyncio
async def test_tick_superseded_mid_flight_is_discarded() -> None:
    started = asyncio.Event()
    release = asyncio.Event()

    async def slow_query(thread_id: str) -> dict[str, Any]:
        started.set()
        await release.wait()
        return {"interrupts": [{"id": "iA", "value": {"name": "from_a"}}]}

    display = InterruptDisplay()
    detector = InterruptDetector(
        ledger=HandledInterruptLedger(),
        display=display,
        probe=lambda _: None,
        query=slow_query,
    )
    detector.bind("A")

    pending = asyncio.create_task(detector.tick())
    await started.wait()
    detector.bind("B")
    release.set()

    assert await pending is None
    assert display.current is None


@pytest.mark.asyncio
async def test_activation_ticks_immediately_then_on_interval() -> None:
    channels = Channels()
    detector, display = _detector(channels)

    detector.activate("t-1")
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert channels.queries[:1] == ["t-1"]

    await asyncio.sleep(0.05)
    detector.deactivate()
    count = len(channels.queries)

    assert count >= 2
    assert not detector.active
    await asyncio.sleep(0.03)
    assert len(channels.queries) == count


@pytest.mark.asyncio
async def test_unbound_detector_is_inert() -> None:
    channels = Channels()
    channels.live = LiveInterrupt(payload={"id": "i1"})
    detector, display = _detector(channels)
    detector.bind(None)

    assert await detector.tick() is None
    assert display.current is None
