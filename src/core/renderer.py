"""Summary rendering (core domain).

Turns a classified window into the human-readable summary line and the
single-line structured bucket string published for downstream consumers.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from core.classifier import Classification, classify
from core.config import SummarizerConfig
from core.models import ChatMessage, SummaryResult, UserAggregate
from core.rules_engine import RuleSet
from core.template import render_template

TOP_CHATTERS_LIMIT = 5
ELLIPSIS = "…"
NONE_LABEL = "None"
OTHER_LABEL = "Other"


def category_label(category: str) -> str:
    return category[:1].upper() + category[1:]


def format_top_chatters(users: Dict[str, UserAggregate], limit: int = TOP_CHATTERS_LIMIT) -> str:
    """Return ``Name(count)`` for the most active users.

    ``sorted`` is stable, so ties keep first-seen order.
    """

    ranked = sorted(users.values(), key=lambda entry: entry.message_count, reverse=True)
    return ", ".join(f"{entry.display_name}({entry.message_count})" for entry in ranked[:limit])


def limit_names(names: List[str], max_count: int) -> str:
    if not names:
        return ""
    if len(names) <= max_count:
        return ", ".join(names)
    return f"{', '.join(names[:max_count])} (+{len(names) - max_count})"


def build_category_lines(classification: Classification, max_users: int) -> List[str]:
    lines: List[str] = []
    for category, names in classification.category_users.items():
        display = limit_names(names, max_users)
        if display:
            lines.append(f"{category_label(category)}: {display}")
    other = limit_names(classification.other_users, max_users)
    if other:
        lines.append(f"{OTHER_LABEL}: {other}")
    return lines


def truncate_text(text: str, max_length: int) -> str:
    """Clip to ``max_length`` characters, ending with an ellipsis when clipped."""

    if not max_length or len(text) <= max_length:
        return text
    if max_length <= 3:
        return text[:max_length]
    return f"{text[: max_length - 1]}{ELLIPSIS}"


def _fallback_lines(interval: int, total: int, unique: int, top_chatters: str, categories: str) -> List[str]:
    return [
        f"Chat Summary (last {interval} min): {total} messages from {unique} users.",
        f"Top chatters: {top_chatters}.",
        f"Categories: {categories}.",
    ]


def render_text(
    config: SummarizerConfig,
    total_messages: int,
    unique_users: int,
    top_chatters: str,
    category_lines: List[str],
) -> str:
    """Render the display text from the template, or the default layout."""

    top = top_chatters or NONE_LABEL
    categories = " | ".join(category_lines) if category_lines else NONE_LABEL

    rendered = ""
    template = config.summary_template.strip()
    if template:
        rendered = render_template(
            template,
            {
                "interval": config.interval_minutes,
                "totalMessages": total_messages,
                "uniqueUsers": unique_users,
                "topChatters": top,
                "categories": categories,
            },
        )
    if not rendered:
        rendered = " ".join(
            _fallback_lines(config.interval_minutes, total_messages, unique_users, top, categories)
        )
    return truncate_text(rendered, config.max_summary_length)


def build_summary(messages: List[ChatMessage], rules: RuleSet, config: SummarizerConfig) -> SummaryResult:
    """Classify and render one drained window."""

    classification = classify(messages, rules)
    top_chatters = format_top_chatters(classification.users)
    category_lines = build_category_lines(classification, config.max_users_per_category)
    text = render_text(
        config,
        total_messages=len(messages),
        unique_users=len(classification.users),
        top_chatters=top_chatters,
        category_lines=category_lines,
    )
    return SummaryResult(
        rendered_text=text,
        interval_minutes=config.interval_minutes,
        total_messages=len(messages),
        unique_users=len(classification.users),
        top_chatters=top_chatters,
        category_lines=category_lines,
        buckets=classification.buckets,
        other_bucket=classification.other_bucket,
    )


def _format_bucket_messages(items: Iterable[ChatMessage]) -> str:
    """Join messages as ``(user:"msg")`` entries.

    The outer double quotes are part of the grammar downstream parsers rely on;
    only quotes inside the message text are swapped for single quotes.
    """

    formatted = []
    for item in items:
        user = item.display_name or item.username or "?"
        # Double quotes would break the (user:"msg") grammar.
        text = item.text.replace('"', "'")
        formatted.append(f'({user}:"{text}")')
    return ", ".join(formatted)


def format_buckets(result: SummaryResult) -> str:
    """Serialize the buckets into the single-line structured string."""

    parts = [
        f"{result.interval_minutes}min ago",
        f"totalMessages: {result.total_messages}",
        f"topChatters: {result.top_chatters or NONE_LABEL}",
    ]
    for category, items in result.buckets.items():
        if not items:
            continue
        parts.append(f"{category_label(category)}: {_format_bucket_messages(items)}")
    if result.other_bucket:
        parts.append(f"{OTHER_LABEL}: {_format_bucket_messages(result.other_bucket)}")
    return ", ".join(parts)
