"""Data models for the site catalog."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class LabelKind(Enum):
    CATEGORY = "category"
    TAG = "tag"


@dataclass
class NewSite:
    """A fully prepared site ready to be persisted."""

    url: str
    title: str
    description: Optional[str] = None
    favicon_url: Optional[str] = None
    image_url: Optional[str] = None
    last_fetched_at: Optional[datetime] = None
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


@dataclass
class SiteRecord:
    """Stored site with its label names."""

    id: int
    url: str
    title: str
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    favicon_url: Optional[str] = None
    image_url: Optional[str] = None
    last_fetched_at: Optional[datetime] = None
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "description": self.description or "",
            "faviconUrl": self.favicon_url,
            "imageUrl": self.image_url,
            "lastFetchedAt": self.last_fetched_at.isoformat() if self.last_fetched_at else None,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "categories": self.categories,
            "tags": self.tags,
        }


@dataclass
class LabelRecord:
    """A category or tag with the number of sites using it."""

    id: int
    kind: LabelKind
    name: str
    site_count: int = 0

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "siteCount": self.site_count}
