"""Catalog operations: search, site creation with enrichment, labels."""

import logging
from datetime import datetime, timezone

from ..errors import InvalidUrlError, LabelAlreadyExistsError, SiteAlreadyExistsError
from ..extraction.text import clean_text
from ..fetching.fetcher import MetadataFetcher, SiteMetadata
from ..fetching.urls import hostname, normalize_url
from ..storage.base import SiteStore
from ..storage.models import LabelKind, LabelRecord, NewSite, SiteRecord
from .labels import unique_normalized_labels
from .query import (
    DEFAULT_PAGE_SIZE,
    PagedResult,
    SiteQuery,
    build_filter,
    count_pages,
    page_offset,
    resolve_page,
    resolve_page_size,
)
from .validation import CreateSiteInput

logger = logging.getLogger(__name__)


class SiteCatalog:
    """Ties the store, the metadata fetcher and the normalizers together."""

    def __init__(
        self,
        store: SiteStore,
        fetcher: MetadataFetcher,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.store = store
        self.fetcher = fetcher
        self.default_page_size = default_page_size

    def search_sites(self, query: SiteQuery) -> PagedResult[SiteRecord]:
        """Filter and paginate sites, newest first.

        The requested page is clamped into [1, total_pages], so an
        out-of-range page returns the last page instead of nothing.
        """
        site_filter = build_filter(query)
        page_size = resolve_page_size(query.page_size, self.default_page_size)

        total = self.store.count_sites(site_filter)
        total_pages = count_pages(total, page_size)
        page = resolve_page(query.page, total_pages)

        items = self.store.list_sites(
            site_filter,
            offset=page_offset(page, page_size),
            limit=page_size,
            newest_first=True,
        )
        return PagedResult(
            items=items,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages,
        )

    async def create_site(self, data: CreateSiteInput) -> SiteRecord:
        """Create a site, enriching it with fetched metadata when possible."""
        url = normalize_url(data.url)
        if not url:
            raise InvalidUrlError(data.url)

        existing = self.store.find_site_by_url(url)
        if existing:
            raise SiteAlreadyExistsError(url, existing)

        metadata = await self._enrich(url)

        title = _first_text(data.title, metadata.title if metadata else None) or hostname(url)
        description = _first_text(data.description, metadata.description if metadata else None)

        site = self.store.create_site(
            NewSite(
                url=url,
                title=title,
                description=description,
                favicon_url=metadata.favicon_url if metadata else None,
                image_url=metadata.image_url if metadata else None,
                last_fetched_at=metadata.fetched_at if metadata else datetime.now(timezone.utc),
                # labels are resolved inside the insert transaction
                categories=unique_normalized_labels(data.categories),
                tags=unique_normalized_labels(data.tags),
            )
        )
        logger.info(f"Created site {site.url} ({metadata.source.value if metadata else 'none'})")
        return site

    async def fetch_metadata(self, url: str) -> SiteMetadata:
        return await self.fetcher.fetch(url)

    def ensure_label(self, kind: LabelKind, name: str) -> LabelRecord:
        """Find a label case-insensitively, creating it on first use."""
        existing = self.store.find_label_by_name(kind, name)
        if existing:
            return existing
        try:
            return self.store.create_label(kind, name)
        except LabelAlreadyExistsError as e:
            # Lost a race with a concurrent creation
            return e.label

    def create_label(self, kind: LabelKind, name: str) -> LabelRecord:
        """Create a label. Raises LabelAlreadyExistsError carrying the existing one."""
        existing = self.store.find_label_by_name(kind, name)
        if existing:
            raise LabelAlreadyExistsError(kind, name, existing)
        return self.store.create_label(kind, name)

    def list_labels(self, kind: LabelKind) -> list[LabelRecord]:
        return self.store.list_labels(kind)

    def label_names(self, kind: LabelKind) -> list[str]:
        return self.store.label_names(kind)

    def stats(self) -> dict:
        return self.store.get_stats()

    async def _enrich(self, url: str) -> SiteMetadata | None:
        try:
            return await self.fetcher.fetch(url)
        except Exception as e:
            logger.warning(f"Metadata enrichment failed for {url}: {e}")
            return None


def _first_text(*values: str | None) -> str | None:
    for value in values:
        cleaned = clean_text(value)
        if cleaned:
            return cleaned
    return None
