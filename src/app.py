"""Application entry point for the chatdigest summarizer."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from telethon import events

import settings
from adapters.chat_commands import ChatCommands
from adapters.console_sink import ConsoleSink
from adapters.sqlite_variables import SQLiteVariableStore
from adapters.telegram_bot_notifier import TelegramBotSink
from adapters.telegram_mapper import build_inbound_chat
from adapters.telegram_notifier import TelegramSavedMessagesSink
from adapters.telegram_session import authorize, build_client
from adapters.transcript import iter_transcript
from core.engine import SummaryEngine

NAME = "CHATDIGEST"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = _RedactingFormatter(_collect_redaction_values(config), fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/chatdigest.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _build_sink(client, variables: SQLiteVariableStore):
    """Select the summary sink from config, keeping the engine delivery-agnostic."""

    username = settings.SUMMARIZER.summary_username
    if settings.NOTIFICATION_METHOD == "bot":
        bot_token = os.getenv("BOT_API")
        if not bot_token:
            raise RuntimeError("BOT_API is required when notification_method=bot")
        if not settings.BOT_CHAT_ID:
            raise RuntimeError("notifications.bot_chat_id is required for bot notifications")
        return TelegramBotSink(
            bot_token=bot_token,
            chat_id=str(settings.BOT_CHAT_ID),
            variables=variables,
            summary_username=username,
        )
    if settings.NOTIFICATION_METHOD == "saved_messages":
        return TelegramSavedMessagesSink(client, variables, username)
    if settings.NOTIFICATION_METHOD == "console":
        return ConsoleSink(username, variables=variables)
    raise RuntimeError("notification_method must be 'saved_messages', 'bot' or 'console'")


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting chatdigest")

    variables = SQLiteVariableStore(settings.DB_PATH)
    variables.init_db()

    client = build_client()
    client.loop.run_until_complete(client.connect())
    client.loop.run_until_complete(authorize(client))

    sink = _build_sink(client, variables)
    logger.info("Selected notification method - %s", settings.NOTIFICATION_METHOD)

    engine = SummaryEngine(settings.SUMMARIZER, sink)
    commands = ChatCommands(
        engine,
        reload_config=settings.load_summarizer_config,
        summarize_now=settings.COMMAND_SUMMARIZE_NOW,
        clear_buffer=settings.COMMAND_CLEAR_BUFFER,
        reload=settings.COMMAND_RELOAD,
    )
    logger.info("%s categories are active", len(engine.rules))

    @client.on(events.NewMessage())
    async def handler(event) -> None:
        try:
            if event.out and commands.resolve(event.raw_text):
                action = await commands.dispatch(event.raw_text)
                logger.info("Command handled - %s", action)
                return
            inbound = await build_inbound_chat(event.message)
            if inbound is None or inbound.source_key not in settings.SOURCES:
                return
            engine.ingest(
                inbound.username,
                inbound.text,
                platform=inbound.platform,
                user_id=inbound.user_id,
                display_name=inbound.display_name,
            )
        except Exception:
            logger.exception("Error while processing message")

    async def _prime() -> None:
        engine.start()

    client.loop.run_until_complete(_prime())
    logger.info("Client connected. Buffering %s sources...", len(settings.SOURCES))
    try:
        client.run_until_disconnected()
    finally:
        client.loop.run_until_complete(engine.stop())


async def _replay_transcript(engine: SummaryEngine, path: str, window: int) -> int:
    ingested = 0
    for entry in iter_transcript(path):
        engine.ingest(
            entry.get("username"),
            entry.get("message"),
            platform=entry.get("platform", ""),
            user_id=entry.get("userId", ""),
            display_name=entry.get("displayName"),
        )
        ingested += 1
        if window and ingested % window == 0:
            await engine.tick()
    await engine.force_summarize()
    return ingested


def _replay(path: str, window: int, show_buckets: bool) -> None:
    _configure_logging()
    variables = SQLiteVariableStore(settings.DB_PATH)
    variables.init_db()
    sink = ConsoleSink(
        settings.SUMMARIZER.summary_username,
        variables=variables,
        show_buckets=show_buckets,
    )
    engine = SummaryEngine(settings.SUMMARIZER, sink)
    ingested = asyncio.run(_replay_transcript(engine, path, window))
    logging.getLogger(__name__).info("Replayed %s transcript lines", ingested)


def _login() -> None:
    _print_banner()
    client = build_client()

    async def _run_login() -> None:
        await client.connect()
        await authorize(client)
        await client.disconnect()

    client.loop.run_until_complete(_run_login())


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="chatdigest")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the chat summarizer")
    subparsers.add_parser("login", help="Authorize the Telegram session")
    replay = subparsers.add_parser("replay", help="Summarize a JSON-lines chat transcript")
    replay.add_argument("path", help="Transcript file, one JSON object per line")
    replay.add_argument(
        "--window",
        type=int,
        default=0,
        help="Run a timer cycle every N messages (0 = one forced summary at the end)",
    )
    replay.add_argument("--buckets", action="store_true", help="Also print the structured buckets")

    args = parser.parse_args(argv)
    if args.command == "login":
        _login()
        return
    if args.command == "replay":
        _replay(args.path, args.window, args.buckets)
        return
    _run()


if __name__ == "__main__":
    main()
