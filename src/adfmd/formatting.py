"""Emoji decorations for URLs, ticket keys and display labels."""
from __future__ import annotations

import re

EMOJI_BY_TYPE = {
    "ticket": "🎫",
    "url": "🔗",
    "fetch": "🌐",
    "cache": "🔄",
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "file": "📋",
    "commits": "*",
    "branches": "⤴️",
    "user": "👥",
    "activity": "👥",
    "ai": "🤖",
}

TICKET_KEY_RE = re.compile(r"^[A-Z]+-\d+")


def format_with_emoji(text: str, content_type: str) -> str:
    """Prefix ``text`` with the emoji registered for ``content_type``."""

    emoji = EMOJI_BY_TYPE.get(content_type)
    if emoji:
        return f"{emoji} {text}"
    return text


def auto_format_emoji(text: str) -> str:
    """Decorate URLs and ticket keys; anything else is returned unchanged."""

    if text.startswith(("http://", "https://")):
        return format_with_emoji(text, "url")
    if TICKET_KEY_RE.match(text):
        return format_with_emoji(text, "ticket")
    return text


def format_boxed(title: str) -> str:
    """Draw a rounded box around a single-line ``title``."""

    inner = len(title) + 2
    return "\n".join(
        [
            "╭" + "─" * inner + "╮",
            "│" + " " * inner + "│",
            f"│ {title} │",
            "│" + " " * inner + "│",
            "╰" + "─" * inner + "╯",
        ]
    )


__all__ = ["EMOJI_BY_TYPE", "auto_format_emoji", "format_boxed", "format_with_emoji"]
