"""Strip superficial markdown artifacts from model output."""

from __future__ import annotations

import re


_BOLD = re.compile(r"\*\*")
_ITALIC = re.compile(r"\*(?!\s)")
_HEADING = re.compile(r"##+\s*")
_CODE_SPAN = re.compile(r"`+")
_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")


def strip_markup(text: str) -> str:
    """Remove bold/italic markers, headings, code spans and link syntax.

    Bullet asterisks followed by whitespace are kept so list items survive.
    """
    text = _BOLD.sub("", text)
    text = _ITALIC.sub("", text)
    text = _HEADING.sub("", text)
    text = _CODE_SPAN.sub("", text)
    text = _LINK.sub(r"\1", text)
    return text.strip()
