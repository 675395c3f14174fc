"""Async metadata fetcher with layered extraction fallbacks."""

import asyncio
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Optional

import aiohttp
from bs4 import ParserRejectedMarkup

from ..errors import InvalidUrlError
from ..extraction.html import extract_from_html
from ..extraction.models import MetadataCandidate, MetadataSource
from ..extraction.opengraph import extract_from_open_graph, parse_open_graph
from .urls import hostname, normalize_url, to_absolute_url

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


@dataclass
class SiteMetadata:
    """Final enrichment result for a URL."""

    url: str
    source: MetadataSource
    fetched_at: datetime
    title: Optional[str] = None
    description: Optional[str] = None
    favicon_url: Optional[str] = None
    image_url: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "faviconUrl": self.favicon_url,
            "imageUrl": self.image_url,
            "source": self.source.value,
            "fetchedAt": self.fetched_at.isoformat(),
        }


@dataclass
class PageResponse:
    """HTML body of a successful GET and the URL it ended up at."""

    url: str
    content: str


def fallback_metadata(url: str) -> MetadataCandidate:
    """Hostname title and /favicon.ico, derived from the URL alone."""
    return MetadataCandidate(
        url=url,
        source=MetadataSource.FALLBACK,
        title=hostname(url),
        favicon_url=to_absolute_url(url, "/favicon.ico"),
    )


class MetadataFetcher:
    """Fetch page metadata: Open Graph first, raw HTML second, hostname last."""

    def __init__(
        self,
        timeout_ms: int = 8000,
        user_agent: str = "SiteCatalogMetadataFetcher/1.0",
        max_redirects: int = 5,
        max_content_length: int = 1_000_000,
    ):
        self.timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000)
        self.user_agent = user_agent
        self.max_redirects = max_redirects
        self.max_content_length = max_content_length

    @property
    def headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": ACCEPT_HEADER}

    async def fetch(self, url: str) -> SiteMetadata:
        """Fetch metadata for *url*.

        Network failures never propagate; the worst case is the hostname
        fallback. Raises InvalidUrlError before any I/O if *url* cannot be
        normalized.
        """
        normalized = normalize_url(url)
        if not normalized:
            raise InvalidUrlError(url)

        fetched_at = datetime.now(timezone.utc)

        candidate = (
            await self.fetch_open_graph(normalized)
            or await self.fetch_html(normalized)
            or fallback_metadata(normalized)
        )
        logger.debug(f"Metadata for {normalized} from {candidate.source.value}")
        return SiteMetadata(fetched_at=fetched_at, **asdict(candidate))

    async def fetch_open_graph(self, url: str) -> MetadataCandidate | None:
        """Structured extraction over the parsed Open Graph fields."""
        page = await self._get(url)
        if page is None:
            return None
        try:
            result = parse_open_graph(page.content, page.url)
        except ParserRejectedMarkup as e:
            logger.debug(f"Unparseable markup at {page.url}: {e}")
            return None
        return extract_from_open_graph(result, page.url)

    async def fetch_html(self, url: str) -> MetadataCandidate | None:
        """Regex scraping of the raw HTML."""
        page = await self._get(url)
        if page is None:
            return None
        return extract_from_html(page.content, page.url)

    async def _get(self, url: str) -> PageResponse | None:
        """GET *url*, following redirects. None on any failure."""
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(
                    url,
                    headers=self.headers,
                    allow_redirects=True,
                    max_redirects=self.max_redirects,
                ) as response:
                    if not 200 <= response.status < 300:
                        logger.debug(f"HTTP {response.status} for {url}")
                        return None

                    content_type = response.headers.get("content-type", "")
                    if content_type and "html" not in content_type.lower():
                        logger.debug(f"Non-HTML content for {url}: {content_type}")
                        return None

                    content = await response.text(errors="replace")
                    if len(content) > self.max_content_length:
                        content = content[: self.max_content_length]

                    final_url = normalize_url(str(response.url)) or url
                    return PageResponse(url=final_url, content=content)

        except asyncio.TimeoutError:
            logger.debug(f"Timed out fetching {url}")
            return None
        except aiohttp.ClientError as e:
            logger.debug(f"Failed to fetch {url}: {e}")
            return None
