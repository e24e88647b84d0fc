"""Shared summary formatting helpers.

Keeping formatting here prevents drift between sinks and keeps summaries
consistent regardless of delivery channel.
"""

from __future__ import annotations

import html
from datetime import datetime
from typing import Optional

DIVIDER = "──────────────"


def _timestamp(now: Optional[datetime]) -> str:
    now = now or datetime.now().astimezone()
    return now.strftime("%H:%M:%S %d-%m-%Y").strip()


def _format_markdown(text: str, username: str, now: Optional[datetime]) -> str:
    """Create the Markdown body used by Saved Messages."""

    # Telegram Markdown is supported by passing parse_mode="Markdown".
    def escape_md(value: str) -> str:
        for ch in r"*_[`":
            value = value.replace(ch, f"\\{ch}")
        return value

    lines = [
        f"[{_timestamp(now)}]",
        f"**{escape_md(username)}**",
        DIVIDER,
        "",
        escape_md(text),
        "",
        DIVIDER,
    ]
    return "\n".join(lines)


def _format_html(text: str, username: str, now: Optional[datetime]) -> str:
    """Create the HTML body used by the Bot API adapter."""

    parts = [
        f"[{html.escape(_timestamp(now))}]",
        f"<b>{html.escape(username)}</b>",
        DIVIDER,
        "",
        html.escape(text),
        "",
        DIVIDER,
    ]
    return "\n".join(parts)


def format_summary_message(
    text: str,
    username: str,
    mode: str,
    now: Optional[datetime] = None,
) -> str:
    """Return the summary formatted for the requested mode."""

    if mode == "markdown":
        return _format_markdown(text, username, now)
    if mode == "html":
        return _format_html(text, username, now)
    if mode == "plain":
        return f"{username}: {text}"
    raise ValueError(f"Unsupported notification format: {mode}")
