# File: tests/test_fetcher.py
# Orchestrator tests against local aiohttp servers
from __future__ import annotations

import asyncio
from dataclasses import asdict
from datetime import datetime, timezone

import pytest
from aiohttp import web

from site_catalog.errors import InvalidUrlError
from site_catalog.extraction.models import MetadataSource
from site_catalog.fetching.fetcher import MetadataFetcher, SiteMetadata, fallback_metadata

OG_PAGE = """<html><head>
<title>Plain title</title>
<meta property="og:title" content="Open Graph Title">
<meta property="og:description" content="Open Graph description">
<meta property="og:image" content="/cover.png">
<link rel="icon" href="/icon.png">
</head><body></body></html>"""

RAW_PAGE = """<html><head>
<title>Raw Title</title>
<meta name="description" content="Raw description">
</head></html>"""


def html_handler(body: str, status: int = 200, content_type: str = "text/html"):
    async def handler(request: web.Request) -> web.Response:
        return web.Response(text=body, status=status, content_type=content_type)

    return handler


@pytest.fixture()
def fetcher() -> MetadataFetcher:
    return MetadataFetcher(timeout_ms=2000, user_agent="TestAgent/1.0")


@pytest.mark.asyncio
async def test_open_graph_page(serve, fetcher):
    base = await serve({"/": html_handler(OG_PAGE)})

    result = await fetcher.fetch(base)

    assert result.source is MetadataSource.OPEN_GRAPH
    assert result.url == base
    assert result.title == "Open Graph Title"
    assert result.description == "Open Graph description"
    assert result.image_url == f"{base}cover.png"
    assert result.favicon_url == f"{base}icon.png"
    assert result.fetched_at.tzinfo is not None


@pytest.mark.asyncio
async def test_sends_user_agent(serve, fetcher):
    seen: list[str] = []

    async def handler(request: web.Request) -> web.Response:
        seen.append(request.headers.get("User-Agent", ""))
        return web.Response(text=OG_PAGE, content_type="text/html")

    base = await serve({"/": handler})
    await fetcher.fetch(base)

    assert seen == ["TestAgent/1.0"]


@pytest.mark.asyncio
async def test_redirect_target_is_used_as_base(serve, fetcher):
    async def redirect(request: web.Request) -> web.Response:
        raise web.HTTPFound("/landing/page")

    base = await serve({"/": redirect, "/landing/page": html_handler(OG_PAGE)})

    result = await fetcher.fetch(base)

    assert result.url == f"{base}landing/page"
    assert result.favicon_url == f"{base}icon.png"


@pytest.mark.asyncio
async def test_falls_through_to_raw_html(serve, fetcher):
    calls = 0

    async def handler(request: web.Request) -> web.Response:
        # first (structured) request sees an empty page, the second one real HTML
        nonlocal calls
        calls += 1
        body = "<html><body></body></html>" if calls == 1 else RAW_PAGE
        return web.Response(text=body, content_type="text/html")

    base = await serve({"/": handler})

    result = await fetcher.fetch(base)

    assert calls == 2
    assert result.source is MetadataSource.HTML
    assert result.title == "Raw Title"
    assert result.description == "Raw description"


@pytest.mark.asyncio
async def test_markup_rejected_by_parser_falls_through_to_raw_html(serve, fetcher):
    page = "<html><head><title>Hello</title><![foo[ x ]]></head></html>"
    base = await serve({"/": html_handler(page)})

    result = await fetcher.fetch(base)

    assert result.source is MetadataSource.HTML
    assert result.title == "Hello"


@pytest.mark.asyncio
async def test_error_status_degrades_to_fallback(serve, fetcher):
    base = await serve({"/": html_handler(OG_PAGE, status=500)})

    result = await fetcher.fetch(base)

    assert result.source is MetadataSource.FALLBACK
    assert result.title == "127.0.0.1"
    assert result.favicon_url == f"{base}favicon.ico"
    assert result.description is None
    assert result.image_url is None


@pytest.mark.asyncio
async def test_empty_page_degrades_to_fallback(serve, fetcher):
    base = await serve({"/": html_handler("<html><body>nothing</body></html>")})

    result = await fetcher.fetch(base)

    assert result.source is MetadataSource.FALLBACK


@pytest.mark.asyncio
async def test_non_html_content_is_ignored(serve, fetcher):
    base = await serve({"/": html_handler("{}", content_type="application/json")})

    result = await fetcher.fetch(base)

    assert result.source is MetadataSource.FALLBACK


@pytest.mark.asyncio
async def test_timeout_degrades_to_fallback(serve):
    async def slow(request: web.Request) -> web.Response:
        await asyncio.sleep(1.0)
        return web.Response(text=OG_PAGE, content_type="text/html")

    base = await serve({"/": slow})
    fetcher = MetadataFetcher(timeout_ms=100)

    result = await fetcher.fetch(base)

    assert result.source is MetadataSource.FALLBACK


@pytest.mark.asyncio
async def test_unreachable_host_degrades_to_fallback(fetcher):
    result = await fetcher.fetch("http://127.0.0.1:1/some/page")

    assert result.source is MetadataSource.FALLBACK
    assert result.url == "http://127.0.0.1:1/some/page"
    assert result.title == "127.0.0.1"
    assert result.favicon_url == "http://127.0.0.1:1/favicon.ico"


@pytest.mark.asyncio
async def test_too_many_redirects_degrades_to_fallback(serve):
    async def loop(request: web.Request) -> web.Response:
        raise web.HTTPFound("/")

    base = await serve({"/": loop})
    fetcher = MetadataFetcher(timeout_ms=2000, max_redirects=2)

    result = await fetcher.fetch(base)

    assert result.source is MetadataSource.FALLBACK


@pytest.mark.asyncio
async def test_invalid_url_is_rejected_before_any_request(fetcher):
    with pytest.raises(InvalidUrlError):
        await fetcher.fetch("   ")


def test_fallback_metadata():
    candidate = fallback_metadata("https://docs.example.com/guide/intro")

    assert candidate.source is MetadataSource.FALLBACK
    assert candidate.title == "docs.example.com"
    assert candidate.favicon_url == "https://docs.example.com/favicon.ico"
    assert candidate.description is None
    assert candidate.image_url is None


def test_metadata_to_dict():
    candidate = fallback_metadata("https://example.com/")

    metadata = SiteMetadata(
        fetched_at=datetime(2024, 5, 1, tzinfo=timezone.utc), **asdict(candidate)
    )
    assert metadata.to_dict() == {
        "url": "https://example.com/",
        "title": "example.com",
        "description": None,
        "faviconUrl": "https://example.com/favicon.ico",
        "imageUrl": None,
        "source": "fallback",
        "fetchedAt": "2024-05-01T00:00:00+00:00",
    }
