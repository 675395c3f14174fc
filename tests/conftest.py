# File: tests/conftest.py
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from site_catalog.catalog.service import SiteCatalog
from site_catalog.extraction.models import MetadataSource
from site_catalog.fetching.fetcher import MetadataFetcher, SiteMetadata
from site_catalog.fetching.urls import normalize_url
from site_catalog.storage.database import Database
from site_catalog.web.app import create_app


class StubFetcher(MetadataFetcher):
    """Returns canned metadata instead of touching the network."""

    def __init__(self, metadata: dict | None = None, error: Exception | None = None):
        super().__init__()
        self.metadata = metadata or {}
        self.error = error
        self.calls: list[str] = []

    async def fetch(self, url: str) -> SiteMetadata:
        self.calls.append(url)
        if self.error:
            raise self.error
        normalized = normalize_url(url)
        if normalized is None:
            return await super().fetch(url)
        return SiteMetadata(
            url=normalized,
            source=MetadataSource(self.metadata.get("source", "og")),
            fetched_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            title=self.metadata.get("title"),
            description=self.metadata.get("description"),
            favicon_url=self.metadata.get("favicon_url"),
            image_url=self.metadata.get("image_url"),
        )


@pytest.fixture()
def db(tmp_path):
    """A fresh SQLite database in a temporary directory."""
    database = Database(tmp_path / "sites.db")
    yield database
    database.close()


@pytest.fixture()
def stub_fetcher() -> StubFetcher:
    return StubFetcher(
        {
            "title": "Fetched Title",
            "description": "Fetched description",
            "favicon_url": "https://example.com/favicon.png",
            "image_url": "https://example.com/og.png",
        }
    )


@pytest.fixture()
def catalog(db, stub_fetcher) -> SiteCatalog:
    return SiteCatalog(db, stub_fetcher)


@pytest.fixture()
def app(tmp_path, db, stub_fetcher):
    application = create_app(tmp_path / "missing.yaml", store=db, fetcher=stub_fetcher)
    application.config["TESTING"] = True
    return application


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest_asyncio.fixture()
async def serve():
    """Start aiohttp apps on local ports; yields a factory returning base URLs."""
    servers: list[TestServer] = []

    async def start(routes: dict) -> str:
        application = web.Application()
        for path, handler in routes.items():
            application.router.add_get(path, handler)
        server = TestServer(application)
        await server.start_server()
        servers.append(server)
        return str(server.make_url("/"))

    yield start

    for server in servers:
        await server.close()
