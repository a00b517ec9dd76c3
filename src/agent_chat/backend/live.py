"""
agent_chat.backend.live

In-memory view of the run being streamed for one thread.

Responsibilities:
- Fold stream events into run id, latest values, and the latest interrupt.
- Answer the detector's live probe synchronously.
- Forward per-node update events (todos, files) to an optional listener.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from typing import Any

from agent_chat.backend.client import StreamEvent
from agent_chat.hitl.models import LiveInterrupt
from agent_chat.observability.logging import get_logger

log = get_logger(__name__)

INTERRUPT_KEY = "__interrupt__"

UpdateListener = Callable[[str, Mapping[str, Any]], None]


class LiveRun:
    def __init__(self, *, on_update: UpdateListener | None = None) -> None:
        self._on_update = on_update
        self.thread_id: str | None = None
        self.run_id: str | None = None
        self.values: dict[str, Any] = {}
        self._interrupt: Mapping[str, Any] | None = None

    def reset(self, thread_id: str | None = None) -> None:
        self.thread_id = thread_id
        self.run_id = None
        self.values = {}
        self._interrupt = None

    def probe(self, thread_id: str) -> LiveInterrupt | None:
        if thread_id != self.thread_id or self._interrupt is None:
            return None
        return LiveInterrupt(payload=self._interrupt, run_id=self.run_id, values=self.values)

    def apply(self, event: StreamEvent) -> None:
        data = event.data
        if event.event == "metadata":
            if isinstance(data, Mapping) and data.get("run_id"):
                # A new run supersedes whatever pause the previous one reported.
                self.run_id = str(data["run_id"])
                self._interrupt = None
        elif event.event == "values":
            if isinstance(data, Mapping):
                self.values = {k: v for k, v in data.items() if k != INTERRUPT_KEY}
                self._interrupt = _first_interrupt(data.get(INTERRUPT_KEY))
        elif event.event == "updates":
            if isinstance(data, Mapping):
                self._apply_updates(data)
        elif event.event == "end":
            log.debug("run_stream_ended", run_id=self.run_id)
        else:
            log.debug("stream_event_ignored", stream_event=event.event)

    def _apply_updates(self, data: Mapping[str, Any]) -> None:
        for node, node_data in data.items():
            if node == INTERRUPT_KEY:
                self._interrupt = _first_interrupt(node_data)
                continue
            if not isinstance(node_data, Mapping) or self._on_update is None:
                continue
            try:
                self._on_update(node, copy.deepcopy(dict(node_data)))
            except Exception as e:
                log.warning("update_listener_failed", node=node, error=str(e))


def _first_interrupt(raw: Any) -> Mapping[str, Any] | None:
    if isinstance(raw, list):
        raw = raw[0] if raw else None
    return raw if isinstance(raw, Mapping) else None


# --- Module Notes -----------------------------------------------------------
# The probe never touches the network; a probe for any thread other than the tracked
# one answers "no pause" so a stream from a previous conversation cannot leak through.
