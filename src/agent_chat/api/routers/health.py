"""
agent_chat.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`): the chat session exists.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from agent_chat.api.deps import chat_session
from agent_chat.services.chat_session import ChatSession

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(chat: ChatSession = Depends(chat_session)) -> dict[str, str]:
    return {"status": "ready", "hitl": "enabled" if chat.controller.enabled else "disabled"}
