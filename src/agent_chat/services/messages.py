"""
agent_chat.services.messages

Chat message helpers.

Responsibilities:
- Build human messages (inline image URL suffix included).
- Extract display text and image URLs back out of message content (plain view).
- Drop message types the chat view cannot render.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from agent_chat.observability.logging import get_logger

log = get_logger(__name__)

SUPPORTED_TYPES = frozenset({"human", "ai", "system", "developer", "tool"})

_IMAGE_SUFFIX = re.compile(r"\n\nHere are \d+ imageurls?:\s*(.+?)(?:\n|$)", re.IGNORECASE)
_QUOTED = re.compile(r'"([^"]+)"')


def build_human_message(text: str, image_urls: Sequence[str] = ()) -> dict[str, Any]:
    full = text.strip()
    if image_urls:
        listed = ", ".join(f'"{u}"' for u in image_urls)
        plural = "s" if len(image_urls) > 1 else ""
        full += f"\n\nHere are {len(image_urls)} imageurl{plural}: {listed}"

    content: Any = [{"type": "text", "text": full}] if full else text
    return {"id": str(uuid.uuid4()), "type": "human", "content": content}


def extract_text(message: Mapping[str, Any]) -> str:
    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, Mapping) and part.get("type") == "text":
                parts.append(str(part.get("text") or ""))
        return "".join(parts)
    return ""


def parse_image_urls(content: str) -> tuple[str, list[str]]:
    """
    Split text produced by `build_human_message` into (clean text, image urls).
    """

    match = _IMAGE_SUFFIX.search(content)
    if match is None:
        return content, []
    urls = _QUOTED.findall(match.group(1))
    return content.replace(match.group(0), "").strip(), urls


def plain_message(message: Mapping[str, Any]) -> dict[str, Any]:
    """
    Flatten a message for simple views: text with the image suffix split off.
    """

    text, image_urls = parse_image_urls(extract_text(message))
    return {
        "id": message.get("id"),
        "type": message.get("type"),
        "text": text,
        "image_urls": image_urls,
    }


def filter_supported(messages: Iterable[Any]) -> list[dict[str, Any]]:
    kept: list[dict[str, Any]] = []
    dropped: list[str] = []
    for m in messages:
        if isinstance(m, Mapping) and m.get("type") in SUPPORTED_TYPES:
            kept.append(dict(m))
        else:
            dropped.append(str(m.get("type")) if isinstance(m, Mapping) else type(m).__name__)
    if dropped:
        log.warning("unsupported_messages_dropped", count=len(dropped), types=sorted(set(dropped)))
    return kept
