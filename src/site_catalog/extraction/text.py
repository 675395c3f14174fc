"""Text cleanup shared by the extractors."""

import html
from typing import Any


def sanitize_text(value: Any) -> str | None:
    """Decode HTML entities and collapse whitespace. Empty results become None."""
    if not isinstance(value, str):
        return None
    cleaned = " ".join(html.unescape(value).split())
    return cleaned or None


def clean_text(value: Any) -> str | None:
    """Collapse whitespace without decoding entities."""
    if not isinstance(value, str):
        return None
    cleaned = " ".join(value.split())
    return cleaned or None
