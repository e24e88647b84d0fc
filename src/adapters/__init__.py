"""Adapters connecting the summary engine to Telegram, SQLite, and the console."""
