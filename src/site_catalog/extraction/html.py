"""Raw HTML metadata scraping with regular expressions."""

import re

from ..fetching.urls import to_absolute_url
from .models import MetadataCandidate, MetadataSource
from .text import sanitize_text

TITLE_TAG = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
META_TAG = re.compile(r"<meta\b[^>]*>", re.IGNORECASE)
LINK_TAG = re.compile(r"<link\b[^>]*>", re.IGNORECASE)
ATTRIBUTE = re.compile(
    r"""([^\s"'=<>/]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+))""",
    re.DOTALL,
)

DESCRIPTION_KEYS = ("description", "og:description", "twitter:description")
IMAGE_KEYS = ("og:image", "twitter:image", "image")


def extract_from_html(html: str, base_url: str) -> MetadataCandidate | None:
    """Pull title, description, favicon and image out of raw HTML.

    Returns None when nothing usable was found.
    """
    metas = [parse_attributes(tag) for tag in META_TAG.findall(html)]

    title_match = TITLE_TAG.search(html)
    candidate = MetadataCandidate(
        url=base_url,
        source=MetadataSource.HTML,
        title=sanitize_text(title_match.group(1)) if title_match else None,
        description=meta_content(metas, DESCRIPTION_KEYS),
        favicon_url=icon_link(html, base_url),
        image_url=to_absolute_url(base_url, meta_content(metas, IMAGE_KEYS)),
    )
    if candidate.is_empty():
        return None
    return candidate


def parse_attributes(tag: str) -> dict[str, str]:
    """Attributes of a single start tag, names lowercased. First occurrence wins."""
    attributes: dict[str, str] = {}
    for match in ATTRIBUTE.finditer(tag):
        name = match.group(1).lower()
        value = next((g for g in match.groups()[1:] if g is not None), "")
        attributes.setdefault(name, value)
    return attributes


def meta_content(metas: list[dict[str, str]], keys: tuple[str, ...]) -> str | None:
    """Content of the first meta tag matching *keys*, checked in priority order."""
    for key in keys:
        for attributes in metas:
            names = (attributes.get("name", ""), attributes.get("property", ""))
            if key not in (n.strip().lower() for n in names):
                continue
            content = sanitize_text(attributes.get("content"))
            if content:
                return content
    return None


def icon_link(html: str, base_url: str) -> str | None:
    """First resolvable href of a <link> whose rel mentions "icon"."""
    for tag in LINK_TAG.findall(html):
        attributes = parse_attributes(tag)
        if "icon" not in attributes.get("rel", "").lower():
            continue
        absolute = to_absolute_url(base_url, sanitize_text(attributes.get("href")))
        if absolute:
            return absolute
    return None
