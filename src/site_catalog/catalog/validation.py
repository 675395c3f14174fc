"""Request payload validation.

Each field validator returns either a normalized value or a FieldIssue.
Request-level validators run every field validator and raise a single
ValidationError listing all issues.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from ..errors import FieldIssue, ValidationError
from ..extraction.text import clean_text
from ..fetching.urls import normalize_url
from .labels import MAX_LABEL_LENGTH, normalize_label, unique_normalized_labels

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000
MAX_LABELS_PER_SITE = 20

LABEL_LENGTH_MESSAGE = f"Name must be between 1 and {MAX_LABEL_LENGTH} characters"


@dataclass
class CreateSiteInput:
    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


def validate_url(value: Any, name: str = "url") -> str | FieldIssue:
    if value is None or (isinstance(value, str) and not value.strip()):
        return FieldIssue(name, "required", "URL is required")
    if not isinstance(value, str):
        return FieldIssue(name, "invalid_type", "URL must be a string")
    normalized = normalize_url(value)
    if not normalized:
        return FieldIssue(name, "invalid_url", "Invalid URL")
    return normalized


def validate_optional_text(value: Any, name: str, max_length: int) -> str | None | FieldIssue:
    if value is None:
        return None
    if not isinstance(value, str):
        return FieldIssue(name, "invalid_type", f"{name.capitalize()} must be a string")
    cleaned = clean_text(value)
    if cleaned and len(cleaned) > max_length:
        return FieldIssue(
            name, "too_long", f"{name.capitalize()} must be at most {max_length} characters"
        )
    return cleaned


def validate_label(value: Any, name: str = "name") -> str | FieldIssue:
    if not isinstance(value, str):
        return FieldIssue(name, "invalid_type", "Name must be a string")
    label = normalize_label(value)
    if not label:
        return FieldIssue(name, "invalid_label", LABEL_LENGTH_MESSAGE)
    return label


def validate_label_list(value: Any, name: str) -> list[str] | list[FieldIssue]:
    """A list of label names; each bad entry produces its own issue."""
    if value is None:
        return []
    if not isinstance(value, list):
        return [FieldIssue(name, "invalid_type", f"{name.capitalize()} must be a list of strings")]
    if len(value) > MAX_LABELS_PER_SITE:
        return [
            FieldIssue(name, "too_many", f"At most {MAX_LABELS_PER_SITE} {name} are allowed")
        ]

    issues = []
    for index, entry in enumerate(value):
        result = validate_label(entry, f"{name}[{index}]")
        if isinstance(result, FieldIssue):
            issues.append(result)
    if issues:
        return issues
    return unique_normalized_labels(value)


def validate_create_site(payload: Any) -> CreateSiteInput:
    """Validate a create-site request body. Raises ValidationError with every issue."""
    if not isinstance(payload, dict):
        raise ValidationError([FieldIssue("body", "invalid_type", "Expected a JSON object")])

    issues: list[FieldIssue] = []

    def take(result):
        if isinstance(result, FieldIssue):
            issues.append(result)
            return None
        if isinstance(result, list) and any(isinstance(r, FieldIssue) for r in result):
            issues.extend(result)
            return []
        return result

    url = take(validate_url(payload.get("url")))
    title = take(validate_optional_text(payload.get("title"), "title", MAX_TITLE_LENGTH))
    description = take(
        validate_optional_text(payload.get("description"), "description", MAX_DESCRIPTION_LENGTH)
    )
    categories = take(validate_label_list(payload.get("categories"), "categories"))
    tags = take(validate_label_list(payload.get("tags"), "tags"))

    if issues:
        raise ValidationError(issues)

    return CreateSiteInput(
        url=url,
        title=title,
        description=description,
        categories=categories,
        tags=tags,
    )


def validate_label_payload(payload: Any) -> str:
    """Validate a create-category/create-tag body and return the normalized name."""
    if not isinstance(payload, dict):
        raise ValidationError([FieldIssue("body", "invalid_type", "Expected a JSON object")])
    result = validate_label(payload.get("name"))
    if isinstance(result, FieldIssue):
        raise ValidationError([result])
    return result
