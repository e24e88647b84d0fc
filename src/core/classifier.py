"""Keyword classification of a drained message window (core domain).

Two passes run over the same window:
- user level: each user lands in at most one category (first rule wins), so a
  person is listed once in the summary lines.
- message level: each message lands in every category it matches, so
  cross-cutting messages stay visible to structured consumers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from core.models import ChatMessage, UserAggregate
from core.rules_engine import RuleSet, first_matching_rule, match_rules


@dataclass
class Classification:
    """Cycle-scoped classifier output."""

    users: Dict[str, UserAggregate]
    category_users: Dict[str, List[str]]
    other_users: List[str] = field(default_factory=list)
    buckets: Dict[str, List[ChatMessage]] = field(default_factory=dict)
    other_bucket: List[ChatMessage] = field(default_factory=list)


def aggregate_users(messages: Iterable[ChatMessage]) -> Dict[str, UserAggregate]:
    """Group messages by username, preserving first-seen order."""

    users: Dict[str, UserAggregate] = {}
    for message in messages:
        entry = users.get(message.username)
        if entry is None:
            entry = UserAggregate(display_name=message.display_name or message.username)
            users[message.username] = entry
        entry.message_count += 1
        entry.texts.append(message.text)
    return users


def _add_name(names: List[str], name: str) -> None:
    if name not in names:
        names.append(name)


def classify_users(users: Dict[str, UserAggregate], rules: RuleSet) -> tuple[Dict[str, List[str]], List[str]]:
    category_users: Dict[str, List[str]] = {name: [] for name in rules}
    other_users: List[str] = []
    for entry in users.values():
        category = first_matching_rule(entry.concatenated_text, rules)
        if category is None:
            _add_name(other_users, entry.display_name)
        else:
            _add_name(category_users[category], entry.display_name)
    return category_users, other_users


def classify_messages(
    messages: Iterable[ChatMessage], rules: RuleSet
) -> tuple[Dict[str, List[ChatMessage]], List[ChatMessage]]:
    buckets: Dict[str, List[ChatMessage]] = {name: [] for name in rules}
    other_bucket: List[ChatMessage] = []
    for message in messages:
        matched = match_rules(message.text, rules)
        if not matched:
            other_bucket.append(message)
            continue
        for category in matched:
            buckets[category].append(message)
    return buckets, other_bucket


def classify(messages: List[ChatMessage], rules: RuleSet) -> Classification:
    """Run both classification passes over one drained window."""

    users = aggregate_users(messages)
    category_users, other_users = classify_users(users, rules)
    buckets, other_bucket = classify_messages(messages, rules)
    return Classification(
        users=users,
        category_users=category_users,
        other_users=other_users,
        buckets=buckets,
        other_bucket=other_bucket,
    )
