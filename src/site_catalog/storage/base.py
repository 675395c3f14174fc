"""Abstract base class for site stores."""

from abc import ABC, abstractmethod

from ..catalog.query import SiteFilter
from .models import LabelKind, LabelRecord, NewSite, SiteRecord


class SiteStore(ABC):
    """Persistence for sites, categories and tags."""

    @abstractmethod
    def count_sites(self, site_filter: SiteFilter) -> int:
        """Number of sites matching the filter."""

    @abstractmethod
    def list_sites(
        self,
        site_filter: SiteFilter,
        offset: int,
        limit: int,
        newest_first: bool = True,
    ) -> list[SiteRecord]:
        """One page of matching sites."""

    @abstractmethod
    def find_site_by_url(self, url: str) -> SiteRecord | None:
        """Exact, case-sensitive URL lookup."""

    @abstractmethod
    def create_site(self, site: NewSite) -> SiteRecord:
        """Insert a site, linking it to existing labels by name.

        Raises SiteAlreadyExistsError if the URL is taken.
        """

    @abstractmethod
    def find_label_by_name(self, kind: LabelKind, name: str) -> LabelRecord | None:
        """Case-insensitive label lookup."""

    @abstractmethod
    def create_label(self, kind: LabelKind, name: str) -> LabelRecord:
        """Insert a label. Raises LabelAlreadyExistsError on a case-insensitive clash."""

    @abstractmethod
    def list_labels(self, kind: LabelKind) -> list[LabelRecord]:
        """All labels of a kind with site counts, ascending by name."""

    def label_names(self, kind: LabelKind) -> list[str]:
        return [label.name for label in self.list_labels(kind)]

    @abstractmethod
    def get_stats(self) -> dict:
        """Counts of sites and labels."""

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
