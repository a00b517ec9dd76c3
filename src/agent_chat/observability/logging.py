"""
agent_chat.observability.logging

Structured logging configuration for the chat client.

Responsibilities:
- Configure `structlog` (JSON for ingestion, console renderer for local runs).
- Provide a small wrapper for obtaining bound loggers.
- Bind the active conversation so every log line of a session carries it.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(*, service_name: str, level: str, json_logs: bool = True) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    renderer: Any = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_service_name(service_name),
            structlog.processors.dict_tracebacks,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _add_service_name(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


REQUEST_CONTEXT_KEYS = ("request_id", "path", "method")


def clear_request_context() -> None:
    # Tasks spawned from a request inherit a copy of its context; detach them from it.
    structlog.contextvars.unbind_contextvars(*REQUEST_CONTEXT_KEYS)


def bind_conversation(thread_id: str | None) -> None:
    # `None` unbinds; a stale thread id must not decorate logs of the next conversation.
    if thread_id is None:
        structlog.contextvars.unbind_contextvars("thread_id")
    else:
        structlog.contextvars.bind_contextvars(thread_id=thread_id)


# --- Module Notes -----------------------------------------------------------
# HTTP request metadata is bound separately in `observability.middleware`.
