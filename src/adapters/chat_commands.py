"""Chat command dispatch for the manual engine actions.

The account owner drives the engine by sending short commands from any chat
(Saved Messages works well): summarize now, clear the buffer, reload config.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from core.config import SummarizerConfig
from core.engine import SummaryEngine

LOGGER = logging.getLogger(__name__)

SUMMARIZE_NOW = "summarize_now"
CLEAR_BUFFER = "clear_buffer"
RELOAD = "reload"


class ChatCommands:
    """Map command words to engine actions."""

    def __init__(
        self,
        engine: SummaryEngine,
        reload_config: Callable[[], SummarizerConfig],
        summarize_now: str = "/summary",
        clear_buffer: str = "/clearsummary",
        reload: str = "/reloadsummary",
    ) -> None:
        self._engine = engine
        self._reload_config = reload_config
        self._words = {
            summarize_now.strip().lower(): SUMMARIZE_NOW,
            clear_buffer.strip().lower(): CLEAR_BUFFER,
            reload.strip().lower(): RELOAD,
        }

    def resolve(self, text: str) -> Optional[str]:
        """Return the action name for a command message, or None."""

        return self._words.get((text or "").strip().lower())

    async def dispatch(self, text: str) -> Optional[str]:
        """Run the command in ``text``; return the action name that ran."""

        action = self.resolve(text)
        if action == SUMMARIZE_NOW:
            await self._engine.force_summarize()
        elif action == CLEAR_BUFFER:
            self._engine.clear_buffer()
        elif action == RELOAD:
            self._engine.configuration_changed(self._reload_config())
            LOGGER.info("Configuration reloaded")
        return action
