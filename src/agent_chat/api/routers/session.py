"""
agent_chat.api.routers.session

Session endpoints for the presentation layer.

Responsibilities:
- Select the active thread, credential, and HITL toggle.
- Expose the displayed interrupt and the resolve entry point.
- Send messages, list messages, stop the running stream.
"""

from __future__ import annotations

from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.status import HTTP_409_CONFLICT, HTTP_502_BAD_GATEWAY

from agent_chat.api.deps import chat_session
from agent_chat.backend.client import RunStreamError
from agent_chat.hitl.models import DecisionKind
from agent_chat.services.chat_session import ChatSession
from agent_chat.services.messages import plain_message

router = APIRouter(prefix="/v1/session", tags=["session"])


class ThreadRequest(BaseModel):
    thread_id: str | None = None


class HitlToggleRequest(BaseModel):
    enabled: bool


class CredentialsRequest(BaseModel):
    access_token: str | None = Field(default=None, repr=False)


class ResolveRequest(BaseModel):
    decision: DecisionKind
    edited_args: dict[str, Any] | None = None


class MessageRequest(BaseModel):
    text: str = ""
    image_urls: list[str] = Field(default_factory=list)


def _interrupt(chat: ChatSession) -> dict[str, Any] | None:
    record = chat.interrupt
    return record.to_dict() if record else None


def _summary(chat: ChatSession) -> dict[str, Any]:
    return {
        "thread_id": chat.thread_id,
        "hitl_enabled": chat.controller.enabled,
        "has_credentials": chat.controller.has_credentials,
        "streaming": chat.is_streaming,
        "interrupt": _interrupt(chat),
    }


@router.get("")
async def get_session(chat: ChatSession = Depends(chat_session)) -> dict[str, Any]:
    return _summary(chat)


@router.put("/thread")
async def put_thread(
    body: ThreadRequest, chat: ChatSession = Depends(chat_session)
) -> dict[str, Any]:
    chat.switch_thread(body.thread_id)
    return _summary(chat)


@router.put("/hitl")
async def put_hitl(
    body: HitlToggleRequest, chat: ChatSession = Depends(chat_session)
) -> dict[str, Any]:
    chat.set_hitl_enabled(body.enabled)
    return _summary(chat)


@router.put("/credentials")
async def put_credentials(
    body: CredentialsRequest, chat: ChatSession = Depends(chat_session)
) -> dict[str, Any]:
    chat.set_access_token(body.access_token)
    return _summary(chat)


@router.get("/interrupt")
async def get_interrupt(chat: ChatSession = Depends(chat_session)) -> dict[str, Any] | None:
    return _interrupt(chat)


@router.post("/interrupt/resolve")
async def resolve_interrupt(
    body: ResolveRequest, chat: ChatSession = Depends(chat_session)
) -> dict[str, Any]:
    # Failures are reported as `resolved: false`; the interrupt stays displayed for retry.
    resolved = await chat.resolve(body.decision, body.edited_args)
    return {"resolved": resolved, "interrupt": _interrupt(chat)}


@router.get("/messages")
async def list_messages(
    plain: bool = False, chat: ChatSession = Depends(chat_session)
) -> list[dict[str, Any]]:
    if not plain:
        return chat.messages
    return [plain_message(m) for m in chat.messages]


@router.post("/messages")
async def send_message(
    body: MessageRequest, chat: ChatSession = Depends(chat_session)
) -> dict[str, Any]:
    if not chat.backend.has_credentials:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="No credentials configured")
    try:
        message = await chat.send_message(body.text, body.image_urls)
    except (httpx.HTTPError, RunStreamError) as e:
        raise HTTPException(status_code=HTTP_502_BAD_GATEWAY, detail=f"Backend error: {e}") from e
    return {"thread_id": chat.thread_id, "message": message}


@router.post("/stop")
async def stop(chat: ChatSession = Depends(chat_session)) -> dict[str, Any]:
    if chat.thread_id is None:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="No active thread")
    await chat.stop()
    return _summary(chat)
