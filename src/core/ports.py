"""Ports (interfaces) used by the summary engine.

Ports define the minimal contracts for publishing and state adapters so that
the core can be reused with different hosts.
"""

from __future__ import annotations

from typing import Optional, Protocol

SUMMARY_BUCKETS_VARIABLE = "summary_buckets"


class SummarySinkPort(Protocol):
    """Outbound operations the engine performs once per cycle."""

    async def publish_summary_text(self, text: str) -> None:
        ...

    async def publish_structured_buckets(self, serialized: str) -> None:
        ...


class VariableStorePort(Protocol):
    """Named state slots readable by downstream consumers."""

    def set_variable(self, name: str, value: str) -> None:
        ...

    def get_variable(self, name: str) -> Optional[str]:
        ...

    def list_variables(self) -> dict[str, str]:
        ...
