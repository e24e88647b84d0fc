from __future__ import annotations

import asyncio

from adapters.chat_commands import CLEAR_BUFFER, RELOAD, SUMMARIZE_NOW, ChatCommands
from adapters.console_sink import ConsoleSink
from adapters.sqlite_variables import SQLiteVariableStore
from core.config import SummarizerConfig
from core.engine import SummaryEngine
from core.ports import SUMMARY_BUCKETS_VARIABLE


def _commands(tmp_path, reloaded: SummarizerConfig) -> tuple[ChatCommands, SummaryEngine, SQLiteVariableStore]:
    store = SQLiteVariableStore(str(tmp_path / "vars.db"))
    store.init_db()
    sink = ConsoleSink("Chat Summary", variables=store)
    engine = SummaryEngine(SummarizerConfig(), sink, clock=lambda: 0)
    return ChatCommands(engine, reload_config=lambda: reloaded), engine, store


def test_resolve_is_case_and_whitespace_insensitive(tmp_path) -> None:
    commands, _, _ = _commands(tmp_path, SummarizerConfig())
    assert commands.resolve("  /SUMMARY ") == SUMMARIZE_NOW
    assert commands.resolve("/clearsummary") == CLEAR_BUFFER
    assert commands.resolve("/reloadsummary") == RELOAD
    assert commands.resolve("/summary please") is None
    assert commands.resolve("") is None


def test_summarize_now_publishes_buckets_to_store(tmp_path) -> None:
    commands, engine, store = _commands(tmp_path, SummarizerConfig())
    engine.ingest("viewer", "pog")

    assert asyncio.run(commands.dispatch("/summary")) == SUMMARIZE_NOW
    assert store.get_variable(SUMMARY_BUCKETS_VARIABLE) == (
        '5min ago, totalMessages: 1, topChatters: viewer(1), Hype: (viewer:"pog")'
    )


def test_clear_and_reload(tmp_path) -> None:
    commands, engine, _ = _commands(tmp_path, SummarizerConfig(categories=("questions",)))
    engine.ingest("viewer", "hello")

    assert asyncio.run(commands.dispatch("/clearsummary")) == CLEAR_BUFFER
    assert engine.pending == 0

    assert asyncio.run(commands.dispatch("/reloadsummary")) == RELOAD
    assert list(engine.rules) == ["questions"]

    assert asyncio.run(commands.dispatch("just chatting")) is None
