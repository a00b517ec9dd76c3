"""
agent_chat.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide env-driven settings for the backend client, HITL polling, and the local API.
- Hide the backend credential from repr/logging.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    One settings object shared by the chat session, the HITL core, and the API layer.
    """

    model_config = SettingsConfigDict(env_prefix="AGENT_CHAT_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "agent-chat-client"
    log_level: str = "INFO"
    log_json: bool = True

    api_host: str = "127.0.0.1"
    api_port: int = 8090

    # Orchestration backend (deployment URL + assistant graph to run)
    deployment_url: str = "http://localhost:2024"
    assistant_id: str = "agent"
    api_key: str | None = Field(default=None, repr=False)
    auth_scheme: str = "langsmith"
    request_timeout_s: float = 30.0

    # HITL
    hitl_enabled: bool = True
    hitl_poll_interval_s: float = Field(default=2.0, gt=0)

    # Run submission
    recursion_limit: int = 100
    stream_modes: list[str] = Field(default_factory=lambda: ["values", "updates"])


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# `api_key` is only a default credential; the presentation layer may replace it per
# session through `ChatSession.set_access_token`.
