"""Telegram summary sink for Saved Messages.

Formats the rendered summary as Markdown and sends it to Saved Messages (or
any chat the client can reach). The structured buckets go to the variable
store.
"""

from __future__ import annotations

from adapters.notification_formatting import format_summary_message
from core.ports import SUMMARY_BUCKETS_VARIABLE, VariableStorePort


class TelegramSavedMessagesSink:
    """Sink adapter that posts summaries through the user's own session."""

    def __init__(
        self,
        client,
        variables: VariableStorePort,
        summary_username: str,
        target: str = "me",
    ) -> None:
        self._client = client
        self._variables = variables
        self._summary_username = summary_username
        self._target = target

    async def publish_summary_text(self, text: str) -> None:
        message = format_summary_message(text, self._summary_username, mode="markdown")
        await self._client.send_message(self._target, message, parse_mode="Markdown")

    async def publish_structured_buckets(self, serialized: str) -> None:
        self._variables.set_variable(SUMMARY_BUCKETS_VARIABLE, serialized)
