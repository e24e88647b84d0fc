"""Telegram Bot API summary sink.

Uses the Bot API for delivery so summaries can be routed via a bot chat.
"""

from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.request

from adapters.notification_formatting import format_summary_message
from core.ports import SUMMARY_BUCKETS_VARIABLE, VariableStorePort


class TelegramBotSink:
    """Sink adapter that sends summaries via the Telegram Bot API."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        variables: VariableStorePort,
        summary_username: str,
    ) -> None:
        self._bot_token = bot_token
        self._chat_id = chat_id
        self._variables = variables
        self._summary_username = summary_username

    def _endpoint(self) -> str:
        return f"https://api.telegram.org/bot{self._bot_token}/sendMessage"

    def _post(self, payload: dict) -> None:
        data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(self._endpoint(), data=data, method="POST")
        request.add_header("Content-Type", "application/json")
        try:
            with urllib.request.urlopen(request, timeout=10):
                pass
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"Bot API error {e.code}: {body}") from e

    async def publish_summary_text(self, text: str) -> None:
        message = format_summary_message(text, self._summary_username, mode="html")
        payload = {
            "chat_id": self._chat_id,
            "text": message,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        # urllib blocks; keep the event loop (and ingestion) responsive.
        await asyncio.to_thread(self._post, payload)

    async def publish_structured_buckets(self, serialized: str) -> None:
        self._variables.set_variable(SUMMARY_BUCKETS_VARIABLE, serialized)
