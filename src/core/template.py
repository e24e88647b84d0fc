"""Placeholder templates for the rendered summary."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Mapping

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


@dataclass(frozen=True)
class Segment:
    """A literal run of text, or a ``{name}`` placeholder."""

    text: str
    placeholder: bool = False


def tokenize(template: str) -> List[Segment]:
    """Split a template into literal and placeholder segments."""

    segments: List[Segment] = []
    position = 0
    for match in _PLACEHOLDER.finditer(template):
        if match.start() > position:
            segments.append(Segment(template[position : match.start()]))
        segments.append(Segment(match.group(1), placeholder=True))
        position = match.end()
    if position < len(template):
        segments.append(Segment(template[position:]))
    return segments


def render_template(template: str, values: Mapping[str, Any]) -> str:
    """Substitute known placeholders; unknown ones are kept as written."""

    if not template or not isinstance(template, str):
        return ""

    parts: List[str] = []
    for segment in tokenize(template):
        if not segment.placeholder:
            parts.append(segment.text)
            continue
        value = values.get(segment.text)
        if value is None:
            parts.append(f"{{{segment.text}}}")
        else:
            parts.append(str(value))
    return "".join(parts)
