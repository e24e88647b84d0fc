"""Rule compilation and matching logic (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

QUESTION_MARK = "?"

DEFAULT_RULES: Dict[str, List[str]] = {
    "feedback": [
        "feedback",
        "suggest",
        "idea",
        "maybe",
        "should",
        "could",
        "recommend",
        "wish",
        "feature",
    ],
    "questions": ["?", "how", "why", "what", "when", "where", "help", "anyone", "can i", "could i"],
    "hype": ["hype", "pog", "poggers", "gg", "lets go", "let's go", "lfg", "fire", "🔥", "wow"],
}


@dataclass(frozen=True)
class Rule:
    """Compiled category rule used by the classifier."""

    name: str
    keywords: List[str]

    def matches(self, normalized_text: str) -> bool:
        return first_keyword_hit(normalized_text, self.keywords) is not None


# Ordered mapping category name -> compiled rule.
RuleSet = Dict[str, Rule]


def normalize_text(value: object) -> str:
    return str(value if value is not None else "").strip().lower()


def _unique(keywords: Iterable[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for keyword in keywords:
        if keyword and keyword not in seen:
            seen[keyword] = None
    return list(seen)


def parse_category_overrides(text: Optional[str]) -> Dict[str, List[str]]:
    """Parse ``category: kw1, kw2`` lines into keyword overrides.

    Lines without a separator, a category, or at least one keyword are skipped.
    """

    overrides: Dict[str, List[str]] = {}
    if not text or not isinstance(text, str):
        return overrides

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        category, sep, rest = line.partition(":")
        if not sep:
            continue
        key = normalize_text(category)
        keywords = _unique(normalize_text(entry) for entry in rest.split(","))
        if key and keywords:
            overrides[key] = keywords
    return overrides


def build_rules(categories: Iterable[str], overrides: Optional[str] = None) -> RuleSet:
    """Resolve the selected categories into an ordered rule set.

    Overrides win over built-in defaults; categories with neither are dropped.
    """

    custom = parse_category_overrides(overrides)
    compiled: RuleSet = {}
    for raw in categories:
        key = normalize_text(raw)
        if not key or key in compiled:
            continue
        if key in custom:
            compiled[key] = Rule(name=key, keywords=custom[key])
        elif key in DEFAULT_RULES:
            compiled[key] = Rule(name=key, keywords=_unique(DEFAULT_RULES[key]))
    return compiled


def first_keyword_hit(normalized_text: str, keywords: Iterable[str]) -> Optional[str]:
    """Return the first keyword found in the text, if any.

    The lone ``?`` keyword means "the text asks something" and matches on any
    question mark.
    """

    for keyword in keywords:
        if not keyword:
            continue
        if keyword == QUESTION_MARK:
            if QUESTION_MARK in normalized_text:
                return keyword
        elif keyword in normalized_text:
            return keyword
    return None


def match_rules(text: str, rules: RuleSet) -> List[str]:
    """Return every category whose keywords match the given text, in rule order."""

    lowered = normalize_text(text)
    return [name for name, rule in rules.items() if rule.matches(lowered)]


def first_matching_rule(text: str, rules: RuleSet) -> Optional[str]:
    """Return the first category (in rule order) matching the text."""

    lowered = normalize_text(text)
    for name, rule in rules.items():
        if rule.matches(lowered):
            return name
    return None
