"""Data models for page metadata extraction."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MetadataSource(Enum):
    OPEN_GRAPH = "og"
    HTML = "html"
    FALLBACK = "fallback"


@dataclass
class MetadataCandidate:
    """Metadata produced by one extraction strategy."""

    url: str
    source: MetadataSource
    title: Optional[str] = None
    description: Optional[str] = None
    favicon_url: Optional[str] = None
    image_url: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.title or self.description or self.favicon_url or self.image_url)
