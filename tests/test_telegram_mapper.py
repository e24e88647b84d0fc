from __future__ import annotations

import asyncio
from typing import Optional

from adapters.telegram_mapper import build_inbound_chat
from core.config import SummarizerConfig
from core.engine import SummaryEngine


class DummyChat:
    def __init__(self, username: "str | None" = None) -> None:
        self.username = username


class DummySender:
    def __init__(
        self,
        username: "str | None" = None,
        first_name: "str | None" = None,
        last_name: "str | None" = None,
    ) -> None:
        self.username = username
        self.first_name = first_name
        self.last_name = last_name


class DummyMessage:
    def __init__(
        self,
        *,
        chat_id: int,
        text: "str | None",
        sender: Optional[DummySender],
        sender_id: "int | None" = 99,
        chat: "DummyChat | None" = None,
    ) -> None:
        self.chat_id = chat_id
        self.raw_text = text
        self.chat = chat
        self.sender_id = sender_id
        self._sender = sender

    async def get_sender(self):
        return self._sender


def test_build_inbound_chat_from_public_group() -> None:
    message = DummyMessage(
        chat_id=-100123,
        text="  gg everyone ",
        sender=DummySender(username="Streamer", first_name="Sam", last_name="Lee"),
        chat=DummyChat(username="MyGroup"),
    )
    inbound = asyncio.run(build_inbound_chat(message))
    assert inbound is not None
    assert inbound.source_key == "@mygroup"
    assert inbound.username == "Streamer"
    assert inbound.display_name == "Sam Lee"
    assert inbound.text == "gg everyone"
    assert inbound.platform == "telegram"
    assert inbound.user_id == "99"


def test_build_inbound_chat_falls_back_to_chat_id_and_sender_id() -> None:
    message = DummyMessage(chat_id=-42, text="hello", sender=DummySender(first_name="Kim"))
    inbound = asyncio.run(build_inbound_chat(message))
    assert inbound is not None
    assert inbound.source_key == "chat_id:-42"
    assert inbound.username == "99"
    assert inbound.display_name == "Kim"


def test_build_inbound_chat_uses_sender_id_when_anonymous() -> None:
    message = DummyMessage(chat_id=1, text="hi", sender=None, sender_id=555)
    inbound = asyncio.run(build_inbound_chat(message))
    assert inbound is not None
    assert inbound.username == "555"


def test_build_inbound_chat_skips_media_only_messages() -> None:
    message = DummyMessage(chat_id=1, text=None, sender=DummySender(username="x"))
    assert asyncio.run(build_inbound_chat(message)) is None


def test_senders_sharing_a_first_name_stay_separate_users() -> None:
    class NullSink:
        async def publish_summary_text(self, text: str) -> None:
            pass

        async def publish_structured_buckets(self, serialized: str) -> None:
            pass

    async def scenario():
        engine = SummaryEngine(SummarizerConfig(), NullSink(), clock=lambda: 0)
        for sender_id in (101, 202):
            message = DummyMessage(
                chat_id=1,
                text="hello",
                sender=DummySender(first_name="John"),
                sender_id=sender_id,
            )
            inbound = await build_inbound_chat(message)
            engine.ingest(
                inbound.username,
                inbound.text,
                platform=inbound.platform,
                user_id=inbound.user_id,
                display_name=inbound.display_name,
            )
        return await engine.force_summarize()

    result = asyncio.run(scenario())
    assert result is not None
    assert result.unique_users == 2
    assert result.top_chatters == "John(1), John(1)"
