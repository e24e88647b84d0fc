"""Core configuration dataclasses.

Raw settings come from config.json (or any host mapping); they are clamped
here once so the rest of the core can trust every field.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

DEFAULT_CATEGORIES = ("feedback", "questions", "hype")
DEFAULT_SUMMARY_USERNAME = "Chat Summary"

# snake_case field -> accepted host aliases (camelCase plugin settings).
_ALIASES = {
    "interval_minutes": ("intervalMinutes",),
    "min_messages": ("minMessages",),
    "max_buffered_messages": ("maxBufferedMessages",),
    "categories": (),
    "category_overrides": ("categoryOverrides", "categoryRules"),
    "max_users_per_category": ("maxUsersPerCategory",),
    "max_summary_length": ("maxSummaryLength",),
    "summary_template": ("summaryTemplate",),
    "summary_username": ("summaryUsername",),
}


def _lookup(raw: Mapping[str, Any], name: str) -> Any:
    if name in raw:
        return raw[name]
    for alias in _ALIASES.get(name, ()):
        if alias in raw:
            return raw[alias]
    return None


def clamp_number(raw: Any, fallback: int, minimum: int, maximum: int) -> int:
    """Coerce ``raw`` to an int inside [minimum, maximum].

    Missing or non-numeric values fall back to the default instead of failing.
    """

    if raw is None or isinstance(raw, bool):
        return fallback
    try:
        number = float(raw)
    except (TypeError, ValueError):
        return fallback
    if number != number or number in (float("inf"), float("-inf")):
        return fallback
    return int(min(max(number, minimum), maximum))


def _text(raw: Any, fallback: str = "") -> str:
    if raw is None:
        return fallback
    return str(raw)


def _categories(raw: Any) -> Tuple[str, ...]:
    if raw is None:
        return DEFAULT_CATEGORIES
    if isinstance(raw, str):
        raw = raw.split(",")
    if not isinstance(raw, (list, tuple)):
        return DEFAULT_CATEGORIES
    return tuple(str(item) for item in raw if item is not None)


@dataclass(frozen=True)
class SummarizerConfig:
    """Settings snapshot consumed by the summary engine."""

    interval_minutes: int = 5
    min_messages: int = 5
    max_buffered_messages: int = 1000
    categories: Tuple[str, ...] = field(default=DEFAULT_CATEGORIES)
    category_overrides: str = ""
    max_users_per_category: int = 10
    max_summary_length: int = 350
    summary_template: str = ""
    summary_username: str = DEFAULT_SUMMARY_USERNAME

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> "SummarizerConfig":
        """Build a clamped config from a loosely-typed settings mapping."""

        raw = raw or {}
        username = _text(_lookup(raw, "summary_username")).strip()
        return cls(
            interval_minutes=clamp_number(_lookup(raw, "interval_minutes"), 5, 1, 60),
            min_messages=clamp_number(_lookup(raw, "min_messages"), 5, 1, 1000),
            max_buffered_messages=clamp_number(
                _lookup(raw, "max_buffered_messages"), 1000, 0, 10000
            ),
            categories=_categories(_lookup(raw, "categories")),
            category_overrides=_text(_lookup(raw, "category_overrides")),
            max_users_per_category=clamp_number(
                _lookup(raw, "max_users_per_category"), 10, 1, 50
            ),
            max_summary_length=clamp_number(_lookup(raw, "max_summary_length"), 350, 100, 2000),
            summary_template=_text(_lookup(raw, "summary_template")),
            summary_username=username or DEFAULT_SUMMARY_USERNAME,
        )

    @property
    def interval_seconds(self) -> float:
        return self.interval_minutes * 60.0
