"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the summary engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from telethon.tl.custom import Message

PLATFORM = "telegram"


@dataclass(frozen=True)
class InboundChat:
    """Engine-ready view of one Telegram message."""

    source_key: str
    username: str
    display_name: str
    text: str
    platform: str
    user_id: str


def source_key_from_message(message: Message) -> str:
    """Normalize a source key using a single rule enforced across the app."""

    chat = getattr(message, "chat", None)
    username = getattr(chat, "username", None)

    if isinstance(username, str) and username:
        return f"@{username.lower()}"

    # Fallback: always stable and universal
    return f"chat_id:{message.chat_id}"


def _display_name(sender: Any) -> Optional[str]:
    title = getattr(sender, "title", None)
    if title:
        return str(title)
    first = getattr(sender, "first_name", None)
    last = getattr(sender, "last_name", None)
    if first or last:
        return " ".join(part for part in [first, last] if part)
    return None


def _username(sender: Any, sender_id: Optional[int]) -> Optional[str]:
    username = getattr(sender, "username", None)
    if isinstance(username, str) and username:
        return username
    # First names are not unique; the numeric id keeps two "John"s apart.
    if sender_id is not None:
        return str(sender_id)
    return None


async def build_inbound_chat(message: Message) -> Optional[InboundChat]:
    """Build an InboundChat from a Telethon Message.

    Returns None for service or media-only messages with nothing to summarize.
    """

    text = (message.raw_text or "").strip()
    if not text:
        return None

    sender = await message.get_sender()
    sender_id = getattr(message, "sender_id", None)
    username = _username(sender, sender_id)
    if not username:
        return None

    return InboundChat(
        source_key=source_key_from_message(message),
        username=username,
        display_name=_display_name(sender) or username,
        text=text,
        platform=PLATFORM,
        user_id=str(sender_id) if sender_id is not None else "",
    )
