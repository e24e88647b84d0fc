from __future__ import annotations

from core.template import Segment, render_template, tokenize


def test_tokenize_splits_literals_and_placeholders() -> None:
    assert tokenize("Hi {name}!") == [
        Segment("Hi "),
        Segment("name", placeholder=True),
        Segment("!"),
    ]


def test_unknown_placeholders_are_left_verbatim() -> None:
    rendered = render_template("{interval}m {unknown} {{totalMessages}} { bad }", {"interval": 5, "totalMessages": 8})
    assert rendered == "5m {unknown} {8} { bad }"


def test_none_values_are_left_verbatim() -> None:
    assert render_template("{topChatters}", {"topChatters": None}) == "{topChatters}"


def test_empty_template_renders_empty() -> None:
    assert render_template("", {"interval": 5}) == ""
