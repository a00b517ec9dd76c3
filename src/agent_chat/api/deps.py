"""
agent_chat.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and the chat session.
"""

from __future__ import annotations

from fastapi import HTTPException, Request
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from agent_chat.services.chat_session import ChatSession
from agent_chat.settings import Settings, get_settings


def settings_dep() -> Settings:
    return get_settings()


def chat_session(request: Request) -> ChatSession:
    # Created on app startup in `agent_chat.api.app.create_app`.
    chat = getattr(request.app.state, "chat", None)
    if chat is None:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Session not ready")
    return chat
