"""Category and tag name normalization."""

from typing import Iterable

from ..extraction.text import clean_text

MAX_LABEL_LENGTH = 64


def normalize_label(value: str | None) -> str | None:
    """Trimmed, whitespace-collapsed label; None if empty or too long."""
    label = clean_text(value)
    if not label or len(label) > MAX_LABEL_LENGTH:
        return None
    return label


def label_key(label: str) -> str:
    """Identity of a label: names differing only in case are the same label."""
    return label.casefold()


def unique_normalized_labels(values: Iterable[str | None] | None) -> list[str]:
    """Normalize *values*, drop rejects and case-insensitive duplicates.

    The first spelling of each label wins and input order is preserved.
    """
    if not isinstance(values, (list, tuple)):
        return []

    deduped: dict[str, str] = {}
    for value in values:
        label = normalize_label(value)
        if label:
            deduped.setdefault(label_key(label), label)
    return list(deduped.values())
