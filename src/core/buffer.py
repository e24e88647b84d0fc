"""Capacity-bounded ingestion buffer (core domain)."""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable, Deque, List, Optional

from core.models import ChatMessage


def _now_ms() -> int:
    return int(time.time() * 1000)


class MessageBuffer:
    """Ordered message buffer with oldest-first eviction.

    A capacity of 0 means unbounded. Every mutation holds the lock, so a drain
    never observes half of an append.
    """

    def __init__(self, capacity: int = 0, clock: Callable[[], int] = _now_ms) -> None:
        self._capacity = max(0, int(capacity))
        self._clock = clock
        self._lock = threading.Lock()
        self._messages: Deque[ChatMessage] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def append(
        self,
        username: object,
        text: object,
        platform: object = "",
        user_id: object = "",
        display_name: Optional[str] = None,
    ) -> Optional[ChatMessage]:
        """Append one message; return it, or None when it was rejected."""

        raw_name = str(username if username is not None else "").strip()
        body = str(text if text is not None else "").strip()
        if not raw_name or not body:
            return None

        message = ChatMessage(
            username=raw_name.lower(),
            display_name=(display_name or "").strip() or raw_name,
            text=body,
            platform=str(platform) if platform else "",
            user_id=str(user_id) if user_id else "",
            timestamp_ms=self._clock(),
        )
        with self._lock:
            self._messages.append(message)
            self._evict()
        return message

    def drain_all(self) -> List[ChatMessage]:
        """Return all messages in arrival order and leave the buffer empty."""

        with self._lock:
            snapshot = list(self._messages)
            self._messages.clear()
        return snapshot

    def clear(self) -> int:
        """Drop everything; return how many messages were discarded."""

        with self._lock:
            dropped = len(self._messages)
            self._messages.clear()
        return dropped

    def resize(self, capacity: int) -> None:
        """Apply a new capacity, keeping the newest messages."""

        with self._lock:
            self._capacity = max(0, int(capacity))
            self._evict()

    def _evict(self) -> None:
        if self._capacity <= 0:
            return
        while len(self._messages) > self._capacity:
            self._messages.popleft()
