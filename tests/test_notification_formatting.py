from __future__ import annotations

from datetime import datetime, timezone

import pytest

from adapters.notification_formatting import format_summary_message

NOW = datetime(2024, 1, 1, 12, 30, 0, tzinfo=timezone.utc)


def test_markdown_escapes_special_characters() -> None:
    message = format_summary_message("Top *chatters*: a_b", "Chat Summary", mode="markdown", now=NOW)
    assert "[12:30:00 01-01-2024]" in message
    assert "**Chat Summary**" in message
    assert "Top \\*chatters\\*: a\\_b" in message


def test_html_escapes_text_and_username() -> None:
    message = format_summary_message("<b>hype</b> & more", "Bot <1>", mode="html", now=NOW)
    assert "<b>Bot &lt;1&gt;</b>" in message
    assert "&lt;b&gt;hype&lt;/b&gt; &amp; more" in message


def test_plain_mode_prefixes_username() -> None:
    assert format_summary_message("hi", "Digest", mode="plain") == "Digest: hi"


def test_unknown_mode_is_rejected() -> None:
    with pytest.raises(ValueError):
        format_summary_message("hi", "Digest", mode="rtf")
