"""SQLite variable store adapter.

Implements the core VariableStorePort: named state slots (for example the
structured ``summary_buckets`` string) that other tools can read back.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Optional


class SQLiteVariableStore:
    """Thin SQLite wrapper that satisfies the VariableStorePort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the variables table if it does not exist.

        Fields:
        - name: slot name (PRIMARY KEY)
        - value: latest published value
        - updated_at: UTC timestamp of the last write
        """

        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS variables (
                    name TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
                """
            )

    def set_variable(self, name: str, value: str) -> None:
        """Upsert a slot; only the latest value is kept."""

        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO variables (name, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(name) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (name, value, now.isoformat()),
            )

    def get_variable(self, name: str) -> Optional[str]:
        """Return the current value of a slot, if any."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM variables WHERE name = ?",
                (name,),
            ).fetchone()
        return str(row["value"]) if row else None

    def list_variables(self) -> dict[str, str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT name, value FROM variables ORDER BY name").fetchall()
        return {row["name"]: row["value"] for row in rows}
