"""
agent_chat.backend.client

HTTP client boundary to the agent-orchestration backend.

Responsibilities:
- Attach the session credential and auth scheme headers to every call.
- Create threads, read persisted thread state, cancel runs.
- Open streamed runs and parse server-sent events into `StreamEvent`s.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from agent_chat.observability.logging import get_logger
from agent_chat.settings import Settings

log = get_logger(__name__)


class RunStreamError(RuntimeError):
    """
    The backend reported an `error` event on a run stream.
    """


@dataclass(frozen=True, slots=True)
class StreamEvent:
    event: str
    data: Any = field(default=None)

    @classmethod
    def from_sse(cls, event: str, raw: str) -> StreamEvent:
        try:
            data = json.loads(raw) if raw else None
        except json.JSONDecodeError:
            data = raw
        return cls(event=event, data=data)


class AgentBackendClient:
    """
    Thin wrapper over the backend's REST surface; one instance per session.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        http: httpx.AsyncClient,
        access_token: str | None = None,
    ) -> None:
        self._settings = settings
        self._http = http
        self._access_token = access_token

    @property
    def has_credentials(self) -> bool:
        return bool(self._access_token)

    def set_access_token(self, token: str | None) -> None:
        self._access_token = token or None

    def _headers(self) -> dict[str, str]:
        headers = {"x-auth-scheme": self._settings.auth_scheme}
        if self._access_token:
            headers["x-api-key"] = self._access_token
        return headers

    async def create_thread(self, *, metadata: Mapping[str, Any] | None = None) -> str:
        r = await self._http.post(
            "/threads",
            headers=self._headers(),
            json={"metadata": dict(metadata or {})},
        )
        r.raise_for_status()
        return str(r.json()["thread_id"])

    async def get_thread_state(self, thread_id: str) -> dict[str, Any]:
        r = await self._http.get(f"/threads/{thread_id}/state", headers=self._headers())
        r.raise_for_status()
        body = r.json()
        return body if isinstance(body, dict) else {}

    async def cancel_run(self, thread_id: str, run_id: str) -> None:
        r = await self._http.post(
            f"/threads/{thread_id}/runs/{run_id}/cancel",
            headers=self._headers(),
        )
        r.raise_for_status()

    def run_payload(
        self,
        *,
        input: Mapping[str, Any] | None = None,
        command: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "assistant_id": self._settings.assistant_id,
            "stream_mode": list(self._settings.stream_modes),
            "config": {"recursion_limit": self._settings.recursion_limit},
        }
        if input is not None:
            payload["input"] = dict(input)
        if command is not None:
            payload["command"] = dict(command)
        return payload

    async def stream_run(
        self,
        thread_id: str,
        *,
        input: Mapping[str, Any] | None = None,
        command: Mapping[str, Any] | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """
        Start a run on `thread_id` and yield its events until the stream ends.

        Raises `httpx.HTTPStatusError` if the run is refused and `RunStreamError` on an
        `error` event.
        """

        async with self._http.stream(
            "POST",
            f"/threads/{thread_id}/runs/stream",
            headers=self._headers(),
            json=self.run_payload(input=input, command=command),
        ) as response:
            if response.is_error:
                await response.aread()
                response.raise_for_status()

            async for event in _parse_sse(response.aiter_lines()):
                if event.event == "error":
                    raise RunStreamError(_error_message(event.data))
                yield event


async def _parse_sse(lines: AsyncIterator[str]) -> AsyncIterator[StreamEvent]:
    current_event: str | None = None
    current_data: list[str] = []

    async for line in lines:
        line = line.rstrip("\r")
        if not line:
            # Blank line terminates an event.
            if current_event and current_data:
                yield StreamEvent.from_sse(current_event, "\n".join(current_data))
            current_event = None
            current_data = []
            continue
        if line.startswith(":"):
            continue
        if line.startswith("event:"):
            current_event = line[6:].strip()
        elif line.startswith("data:"):
            current_data.append(line[5:].lstrip())

    if current_event and current_data:
        yield StreamEvent.from_sse(current_event, "\n".join(current_data))


def _error_message(data: Any) -> str:
    if isinstance(data, Mapping):
        return str(data.get("message") or data.get("error") or data)
    return str(data)


# --- Module Notes -----------------------------------------------------------
# Paths follow the LangGraph platform REST API. Only the calls the chat client needs are
# wrapped; anything else belongs to the backend and stays out of this boundary.
