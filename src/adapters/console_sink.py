"""Console summary sink.

Prints summaries with rich; used by the ``replay`` command and handy when
tuning categories without a Telegram session.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from core.ports import SUMMARY_BUCKETS_VARIABLE, VariableStorePort


class ConsoleSink:
    """Sink adapter that renders summaries to the terminal."""

    def __init__(
        self,
        summary_username: str,
        variables: Optional[VariableStorePort] = None,
        console: Optional[Console] = None,
        show_buckets: bool = False,
    ) -> None:
        self._summary_username = summary_username
        self._variables = variables
        self._console = console or Console()
        self._show_buckets = show_buckets

    async def publish_summary_text(self, text: str) -> None:
        self._console.print(
            Panel(Text(text), title=self._summary_username, border_style="cyan", expand=False)
        )

    async def publish_structured_buckets(self, serialized: str) -> None:
        if self._variables is not None:
            self._variables.set_variable(SUMMARY_BUCKETS_VARIABLE, serialized)
        if not self._show_buckets:
            return
        if self._variables is None:
            self._console.print(Text.assemble((f"{SUMMARY_BUCKETS_VARIABLE} = ", "bold"), serialized))
            return
        # Echo what downstream readers will actually see in the store.
        for name, value in self._variables.list_variables().items():
            self._console.print(Text.assemble((f"{name} = ", "bold"), value))
