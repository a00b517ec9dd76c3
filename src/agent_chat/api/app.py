"""
agent_chat.api.app

FastAPI app factory for the agent chat client.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Create and dispose the backend HTTP client and the chat session.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from agent_chat import __version__
from agent_chat.api.routers.health import router as health_router
from agent_chat.api.routers.session import router as session_router
from agent_chat.backend.live import UpdateListener
from agent_chat.observability.logging import configure_logging, get_logger
from agent_chat.observability.middleware import RequestContextMiddleware
from agent_chat.services.chat_session import ChatSession
from agent_chat.settings import Settings

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    http: httpx.AsyncClient | None = None,
    on_update: UpdateListener | None = None,
) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.log_json,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, deployment_url=settings.deployment_url)
        # An injected client is owned by the caller; only a client we create is closed here.
        client = http or httpx.AsyncClient(
            base_url=settings.deployment_url,
            timeout=settings.request_timeout_s,
        )
        app.state.chat = ChatSession(settings=settings, http=client, on_update=on_update)
        try:
            yield
        finally:
            await app.state.chat.aclose()
            app.state.chat = None
            if http is None:
                await client.aclose()
            log.info("shutdown")

    app = FastAPI(
        title="Agent Chat Client",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(session_router)
    return app


# --- Module Notes -----------------------------------------------------------
# One process serves one local user, so a single ChatSession lives on app.state.
