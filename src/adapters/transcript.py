"""JSON-lines transcript reader used by the ``replay`` command.

Each line is an object shaped like the host ingest payload:
``{"username": "...", "message": "...", "platform": "...", "userId": "..."}``.
Blank lines are skipped; undecodable lines are logged and skipped.
"""

from __future__ import annotations

import json
import logging
from typing import Iterator

LOGGER = logging.getLogger(__name__)


def iter_transcript(path: str) -> Iterator[dict]:
    with open(path, "r", encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                LOGGER.warning("Skipping malformed transcript line %s", line_number)
                continue
            if isinstance(entry, dict):
                yield entry
