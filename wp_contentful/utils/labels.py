from __future__ import annotations

from html import unescape
import re


def normalize_label(value: str) -> str:
    """Unescape HTML entities and collapse inner whitespace.

    The WordPress REST API returns rendered titles and term names with HTML
    entities (``Tips &amp; Tricks``, ``It&#8217;s``).  Original casing is
    preserved, leading/trailing spaces are trimmed and sequences of
    whitespace become a single space.
    """
    if not value:
        return ""
    text = unescape(value).strip()
    text = re.sub(r"\s+", " ", text)
    return text
