"""Structured Open Graph / Twitter card extraction."""

from collections.abc import Mapping
from typing import Any

from bs4 import BeautifulSoup

from ..fetching.urls import to_absolute_url
from .models import MetadataCandidate, MetadataSource
from .text import sanitize_text

# meta name/property -> result key
META_FIELDS = {
    "og:title": "og_title",
    "og:description": "og_description",
    "og:site_name": "og_site_name",
    "og:url": "og_url",
    "twitter:title": "twitter_title",
    "twitter:description": "twitter_description",
    "dc.description": "dc_description",
    "dcterms.description": "dc_description",
    "description": "description",
}

IMAGE_FIELDS = {
    "og:image": "og_image",
    "og:image:url": "og_image",
    "og:image:secure_url": "og_image",
    "twitter:image": "twitter_image",
    "twitter:image:src": "twitter_image",
}

TITLE_KEYS = ("og_title", "twitter_title", "title", "og_site_name")
DESCRIPTION_KEYS = ("og_description", "twitter_description", "dc_description", "description")
IMAGE_KEYS = ("og_image", "twitter_image")


def parse_open_graph(html: str, request_url: str) -> dict[str, Any]:
    """Parse an HTML document into a mapping of Open Graph style fields.

    Text fields are plain strings (first occurrence wins). ``og_image`` and
    ``twitter_image`` are lists of ``{"url": ...}`` mappings, ``favicon`` is a
    list of icon hrefs in document order.
    """
    soup = BeautifulSoup(html, "html.parser")
    result: dict[str, Any] = {"request_url": request_url}

    for meta in soup.find_all("meta"):
        key = (meta.get("property") or meta.get("name") or "").strip().lower()
        content = meta.get("content")
        if not key or content is None:
            continue

        if key in IMAGE_FIELDS:
            result.setdefault(IMAGE_FIELDS[key], []).append({"url": content})
        elif key in META_FIELDS:
            result.setdefault(META_FIELDS[key], content)

    if soup.title and soup.title.string:
        result["title"] = soup.title.string

    icons = []
    for link in soup.find_all("link", href=True):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if any("icon" in value.lower() for value in rel):
            icons.append(link["href"])
    if icons:
        result["favicon"] = icons

    return result


def extract_from_open_graph(result: Mapping[str, Any], base_url: str) -> MetadataCandidate | None:
    """Select title/description/favicon/image from a structured scrape result.

    Returns None when every field comes up empty.
    """
    candidate = MetadataCandidate(
        url=base_url,
        source=MetadataSource.OPEN_GRAPH,
        title=pick_first_string(result.get(key) for key in TITLE_KEYS),
        description=pick_first_string(result.get(key) for key in DESCRIPTION_KEYS),
        favicon_url=_pick_url(_url_values(result.get("favicon")), base_url),
        image_url=_pick_url(
            [url for key in IMAGE_KEYS for url in _url_values(result.get(key))], base_url
        ),
    )
    if candidate.is_empty():
        return None
    return candidate


def pick_first_string(values) -> str | None:
    """First non-empty text among strings, ``{"url": ...}`` mappings and lists of them."""
    for value in values:
        if isinstance(value, str):
            text = sanitize_text(value)
        elif isinstance(value, (list, tuple)):
            text = pick_first_string(value)
        elif isinstance(value, Mapping):
            text = sanitize_text(value.get("url"))
        else:
            text = None
        if text:
            return text
    return None


def _url_values(value: Any) -> list[str]:
    """Flatten a string, ``{"url"}`` mapping, or list of either into strings."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, Mapping):
        url = value.get("url")
        return [url] if isinstance(url, str) else []
    if isinstance(value, (list, tuple)):
        return [url for entry in value for url in _url_values(entry)]
    return []


def _pick_url(values: list[str], base_url: str) -> str | None:
    for value in values:
        absolute = to_absolute_url(base_url, value)
        if absolute:
            return absolute
    return None
