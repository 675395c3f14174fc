"""Exceptions raised by the catalog."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class FieldIssue:
    """A single problem with one request field."""

    field: str
    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


class CatalogError(Exception):
    """Base class for catalog errors."""


class ValidationError(CatalogError):
    """Request data failed validation. Carries every issue found."""

    def __init__(self, issues: list[FieldIssue]):
        self.issues = issues
        summary = "; ".join(f"{i.field}: {i.message}" for i in issues)
        super().__init__(f"Validation failed: {summary}")


class InvalidUrlError(ValidationError):
    """A URL could not be normalized to an http(s) URL."""

    def __init__(self, value: Any, field: str = "url"):
        self.value = value
        super().__init__([FieldIssue(field, "invalid_url", "Invalid URL")])


class SiteAlreadyExistsError(CatalogError):
    def __init__(self, url: str, site: Any = None):
        self.url = url
        self.site = site
        super().__init__(f"Site with URL {url} already exists")


class LabelAlreadyExistsError(CatalogError):
    def __init__(self, kind: Any, name: str, label: Any = None):
        self.kind = kind
        self.name = name
        self.label = label
        super().__init__(f"{kind.value.capitalize()} '{name}' already exists")
