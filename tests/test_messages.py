"""
tests.test_messages

Message helpers: inline image URLs, text extraction, type filtering.
"""

from __future__ import annotations

from agent_chat.services.messages import (
    build_human_message,
    extract_text,
    filter_supported,
    parse_image_urls,
)


def test_build_human_message_appends_image_urls() -> None:
    message = build_human_message("  look at these ", ["https://a/1.png", "https://a/2.png"])

    assert message["type"] == "human"
    text = message["content"][0]["text"]
    assert text == 'look at these\n\nHere are 2 imageurls: "https://a/1.png", "https://a/2.png"'


def test_parse_image_urls_inverts_build() -> None:
    text = extract_text(build_human_message("caption", ["https://a/1.png"]))

    assert parse_image_urls(text) == ("caption", ["https://a/1.png"])


def test_parse_image_urls_without_suffix() -> None:
    assert parse_image_urls("plain text") == ("plain text", [])


def test_extract_text_handles_part_lists() -> None:
    message = {"content": ["a", {"type": "text", "text": "b"}, {"type": "image_url"}]}

    assert extract_text(message) == "ab"
    assert extract_text({"content": None}) == ""


def test_filter_supported_drops_unknown_types() -> None:
    kept = filter_supported([{"type": "tool"}, {"type": "remove"}, "junk", {"type": "ai"}])

    assert [m["type"] for m in kept] == ["tool", "ai"]
