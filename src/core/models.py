"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class ChatMessage:
    """One buffered chat line; immutable once ingested."""

    username: str
    display_name: str
    text: str
    platform: str
    user_id: str
    timestamp_ms: int


@dataclass
class UserAggregate:
    """Per-cycle activity of a single user."""

    display_name: str
    message_count: int = 0
    texts: List[str] = field(default_factory=list)

    @property
    def concatenated_text(self) -> str:
        return " ".join(self.texts)


@dataclass(frozen=True)
class SummaryResult:
    """Rendered output of one cycle, published once and then discarded."""

    rendered_text: str
    interval_minutes: int
    total_messages: int
    unique_users: int
    top_chatters: str
    category_lines: List[str]
    buckets: Dict[str, List[ChatMessage]]
    other_bucket: List[ChatMessage]
