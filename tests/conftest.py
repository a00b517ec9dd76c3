"""
tests.conftest

Shared fixtures: an in-memory stand-in for the orchestration backend.

Responsibilities:
- Serve thread creation, thread state, run streams (SSE), and run cancellation
  through `httpx.MockTransport`.
- Record every request so tests can assert on what the client sent.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from agent_chat.settings import Settings

PAUSE = {
    "id": "i1",
    "value": {
        "action_requests": [
            {"name": "send_email", "args": {"to": "ops@example.com"}},
            {"name": "archive_thread", "args": {}},
        ],
        "review_configs": [
            {"action_name": "send_email", "allowed_decisions": ["approve", "reject", "edit"]},
        ],
    },
}


TODO = {"content": "email ops", "status": "pending"}


def sse(*events: tuple[str, Any]) -> bytes:
    chunks = [f"event: {name}\ndata: {json.dumps(data)}\n\n" for name, data in events]
    return "".join(chunks).encode()


class StubBackend:
    """
    Pauses every run started with `input` and completes every run started with `command`.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.paused = False
        self.fail_resume = False
        self.run_count = 0

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport(), base_url="http://backend")

    def bodies(self, suffix: str) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.url.path.endswith(suffix)]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path == "/threads":
            return httpx.Response(200, json={"thread_id": "t-1"})

        if request.method == "GET" and path.endswith("/state"):
            return httpx.Response(
                200,
                json={
                    "values": {"messages": []},
                    "interrupts": [PAUSE] if self.paused else [],
                    "tasks": [],
                },
            )

        if request.method == "POST" and path.endswith("/runs/stream"):
            body = json.loads(request.content)
            self.run_count += 1
            run_id = f"r{self.run_count}"
            if "command" in body:
                if self.fail_resume:
                    return httpx.Response(500, json={"detail": "resume rejected"})
                self.paused = False
                return _stream(
                    ("metadata", {"run_id": run_id}),
                    ("values", {"messages": [{"id": "m2", "type": "ai", "content": "sent"}]}),
                    ("end", None),
                )
            self.paused = True
            return _stream(
                ("metadata", {"run_id": run_id}),
                ("updates", {"planner": {"todos": [TODO]}}),
                ("values", {"messages": body["input"]["messages"], "__interrupt__": [PAUSE]}),
                ("end", None),
            )

        if request.method == "POST" and path.endswith("/cancel"):
            return httpx.Response(204)

        return httpx.Response(404, json={"detail": "not found"})


def _stream(*events: tuple[str, Any]) -> httpx.Response:
    return httpx.Response(
        200,
        content=sse(*events),
        headers={"content-type": "text/event-stream"},
    )


@pytest.fixture
def stub_backend() -> StubBackend:
    return StubBackend()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        env="test",
        api_key="test-key",
        hitl_poll_interval_s=60.0,
        log_json=False,
    )
