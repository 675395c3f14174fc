"""Search parameter normalization and pagination arithmetic."""

import math
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from ..extraction.text import clean_text

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 48

T = TypeVar("T")


@dataclass
class SiteQuery:
    """Raw listing parameters as received from a caller."""

    q: Optional[str] = None
    category: Optional[str] = None
    tag: Optional[str] = None
    page: Optional[int] = None
    page_size: Optional[int] = None


@dataclass(frozen=True)
class SiteFilter:
    """Normalized filters. None means "no constraint"."""

    q: Optional[str] = None
    category: Optional[str] = None
    tag: Optional[str] = None


@dataclass
class PagedResult(Generic[T]):
    items: list[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total_pages: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() if hasattr(item, "to_dict") else item for item in self.items],
            "total": self.total,
            "page": self.page,
            "pageSize": self.page_size,
            "totalPages": self.total_pages,
        }


def parse_int(value: Any) -> int | None:
    """Parse a query-string number. Fractions round half up; junk gives None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return math.floor(number + 0.5)


def build_filter(query: SiteQuery) -> SiteFilter:
    return SiteFilter(
        q=clean_text(query.q),
        category=clean_text(query.category),
        tag=clean_text(query.tag),
    )


def resolve_page_size(value: Any, default: int = DEFAULT_PAGE_SIZE) -> int:
    page_size = parse_int(value)
    if page_size is None:
        page_size = default
    return max(1, min(MAX_PAGE_SIZE, page_size))


def count_pages(total: int, page_size: int) -> int:
    return max(1, math.ceil(total / page_size))


def resolve_page(value: Any, total_pages: int) -> int:
    page = parse_int(value)
    if page is None:
        page = 1
    return min(max(1, page), total_pages)


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size
