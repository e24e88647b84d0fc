"""Static configuration for chatdigest.

All user-editable settings (summarizer, sources, notifications, commands,
logging) live in a single JSON file for quick edits without touching Python.
Secrets stay in the environment (.env).
"""

import json
import os

from core.config import SummarizerConfig

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# config.json sits at the project root unless CHATDIGEST_CONFIG points elsewhere.
CONFIG_PATH = os.getenv("CHATDIGEST_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _normalize_sources(raw_sources: list) -> set[str]:
    """Return enabled source keys (``@username`` or ``chat_id:<id>``)."""

    sources: set[str] = set()
    for entry in raw_sources:
        source_key = entry.get("source_key")
        if not source_key:
            continue
        if not entry.get("enabled", True):
            continue
        if source_key.startswith("@"):
            source_key = source_key.lower()
        sources.add(source_key)
    return sources


def load_summarizer_config() -> SummarizerConfig:
    """Re-read config.json and return a fresh, clamped summarizer snapshot."""

    return SummarizerConfig.from_mapping(_load_json_config().get("summarizer", {}))


_CONFIG = _load_json_config()

# Summarizer settings are clamped once here; the engine trusts them as-is.
SUMMARIZER = SummarizerConfig.from_mapping(_CONFIG.get("summarizer", {}))

# Only chats listed here feed the buffer.
SOURCES = _normalize_sources(_CONFIG.get("sources", []))

# Where to store the SQLite variable slots.
_storage = _CONFIG.get("storage", {})
DB_PATH = _storage.get("db_path") or os.path.join(PROJECT_ROOT, "chatdigest.db")
if not os.path.isabs(DB_PATH):
    DB_PATH = os.path.join(PROJECT_ROOT, DB_PATH)

# Notification method switches sinks without changing core logic.
_notifications = _CONFIG.get("notifications", {})
NOTIFICATION_METHOD = _notifications.get("notification_method", "saved_messages")
# Bot chat id is only required when notification_method=bot.
BOT_CHAT_ID = _notifications.get("bot_chat_id")

# Outgoing chat commands that drive the engine's manual actions.
_commands = _CONFIG.get("commands", {})
COMMAND_SUMMARIZE_NOW = _commands.get("summarize_now", "/summary")
COMMAND_CLEAR_BUFFER = _commands.get("clear_buffer", "/clearsummary")
COMMAND_RELOAD = _commands.get("reload", "/reloadsummary")

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
