"""CLI entry point."""

import asyncio
import logging

import click

from .catalog.query import SiteQuery
from .catalog.service import SiteCatalog
from .catalog.validation import validate_create_site, validate_label_payload
from .config import Config
from .errors import InvalidUrlError, LabelAlreadyExistsError, SiteAlreadyExistsError, ValidationError
from .fetching.fetcher import MetadataFetcher
from .storage.database import Database
from .storage.models import LabelKind
from .storage.seed import seed_catalog

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def build_fetcher(cfg: Config) -> MetadataFetcher:
    return MetadataFetcher(
        timeout_ms=cfg.metadata_timeout_ms,
        user_agent=cfg.metadata_user_agent,
        max_redirects=cfg.max_redirects,
        max_content_length=cfg.max_content_length,
    )


def open_catalog(config: str) -> SiteCatalog:
    cfg = Config.from_yaml(config)
    return SiteCatalog(
        Database(cfg.database_path), build_fetcher(cfg), default_page_size=cfg.default_page_size
    )


def _fail(error: ValidationError) -> None:
    for issue in error.issues:
        click.echo(f"  {issue.field}: {issue.message}", err=True)
    raise click.ClickException("Validation failed")


@click.group()
def cli() -> None:
    """Site Catalog - browse, search and enrich a directory of sites."""
    pass


@cli.command()
@click.argument("url")
@click.option("--title", help="Override the fetched title")
@click.option("--description", help="Override the fetched description")
@click.option("--category", "categories", multiple=True, help="Category (repeatable)")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("--config", "-c", default="config.yaml", help="Config file path")
def add(
    url: str,
    title: str | None,
    description: str | None,
    categories: tuple[str, ...],
    tags: tuple[str, ...],
    config: str,
) -> None:
    """Add a site, fetching its metadata."""
    catalog = open_catalog(config)
    try:
        data = validate_create_site(
            {
                "url": url,
                "title": title,
                "description": description,
                "categories": list(categories),
                "tags": list(tags),
            }
        )
        site = asyncio.run(catalog.create_site(data))
    except ValidationError as e:
        _fail(e)
    except SiteAlreadyExistsError as e:
        raise click.ClickException(str(e))
    finally:
        catalog.store.close()

    click.echo(f"Added [{site.id}] {site.title}")
    click.echo(f"  {site.url}")
    if site.description:
        click.echo(f"  {site.description}")
    if site.categories:
        click.echo(f"  Categories: {', '.join(site.categories)}")
    if site.tags:
        click.echo(f"  Tags: {', '.join(site.tags)}")


@cli.command()
@click.argument("query", required=False)
@click.option("--category", help="Filter by category")
@click.option("--tag", help="Filter by tag")
@click.option("--page", "-p", default=None, type=int, help="Page number")
@click.option("--page-size", "-n", default=None, type=int, help="Results per page")
@click.option("--config", "-c", default="config.yaml", help="Config file path")
def search(
    query: str | None,
    category: str | None,
    tag: str | None,
    page: int | None,
    page_size: int | None,
    config: str,
) -> None:
    """Search and filter sites."""
    catalog = open_catalog(config)
    try:
        result = catalog.search_sites(
            SiteQuery(q=query, category=category, tag=tag, page=page, page_size=page_size)
        )
    finally:
        catalog.store.close()

    if not result.items:
        click.echo("No results found.")
        return

    click.echo(
        f"Found {result.total} sites (page {result.page}/{result.total_pages}):\n"
    )
    for site in result.items:
        click.echo(f"{site.title}")
        click.echo(f"  {site.url}")
        if site.description:
            click.echo(f"  {site.description[:100]}")
        labels = site.categories + [f"#{t}" for t in site.tags]
        if labels:
            click.echo(f"  {' '.join(labels)}")
        click.echo()


def _print_labels(kind: LabelKind, config: str) -> None:
    catalog = open_catalog(config)
    try:
        labels = catalog.list_labels(kind)
    finally:
        catalog.store.close()

    if not labels:
        click.echo(f"No {kind.value} labels found.")
        return
    for label in labels:
        click.echo(f"  {label.name}: {label.site_count} sites")


@cli.command()
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--create", "name", help="Create a category with this name")
def categories(config: str, name: str | None) -> None:
    """List categories with counts, or create one."""
    if name:
        _create_label(LabelKind.CATEGORY, name, config)
    else:
        _print_labels(LabelKind.CATEGORY, config)


@cli.command()
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--create", "name", help="Create a tag with this name")
def tags(config: str, name: str | None) -> None:
    """List tags with counts, or create one."""
    if name:
        _create_label(LabelKind.TAG, name, config)
    else:
        _print_labels(LabelKind.TAG, config)


def _create_label(kind: LabelKind, name: str, config: str) -> None:
    catalog = open_catalog(config)
    try:
        label = catalog.create_label(kind, validate_label_payload({"name": name}))
    except ValidationError as e:
        _fail(e)
    except LabelAlreadyExistsError as e:
        raise click.ClickException(f"{kind.value.capitalize()} already exists: {e.label.name}")
    finally:
        catalog.store.close()
    click.echo(f"Created {kind.value} {label.name}")


@cli.command()
@click.argument("url")
@click.option("--config", "-c", default="config.yaml", help="Config file path")
def metadata(url: str, config: str) -> None:
    """Fetch and show metadata for a URL without storing it."""
    fetcher = build_fetcher(Config.from_yaml(config))
    try:
        result = asyncio.run(fetcher.fetch(url))
    except InvalidUrlError:
        raise click.ClickException(f"Invalid URL: {url}")

    click.echo(f"URL:         {result.url}")
    click.echo(f"Source:      {result.source.value}")
    click.echo(f"Title:       {result.title or '-'}")
    click.echo(f"Description: {result.description or '-'}")
    click.echo(f"Favicon:     {result.favicon_url or '-'}")
    click.echo(f"Image:       {result.image_url or '-'}")


@cli.command()
@click.option("--config", "-c", default="config.yaml", help="Config file path")
def seed(config: str) -> None:
    """Load the sample sites into the database."""
    cfg = Config.from_yaml(config)
    with Database(cfg.database_path) as db:
        counts = seed_catalog(db)
    click.echo(
        f"Seeded {counts['sites']} sites, {counts['categories']} categories, "
        f"{counts['tags']} tags."
    )


@cli.command()
@click.option("--config", "-c", default="config.yaml", help="Config file path")
def stats(config: str) -> None:
    """Show database statistics."""
    cfg = Config.from_yaml(config)
    with Database(cfg.database_path) as db:
        s = db.get_stats()

    click.echo("Database Statistics:")
    click.echo(f"  Total sites:  {s['total_sites']}")
    click.echo(f"  Fetched:      {s['fetched']}")
    click.echo(f"  Categories:   {s['categories']}")
    click.echo(f"  Tags:         {s['tags']}")


@cli.command()
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--host", default="127.0.0.1", help="Host to bind")
@click.option("--port", "-p", default=5001, type=int, help="Port to bind")
@click.option("--debug/--no-debug", default=False, help="Enable debug mode")
def serve(config: str, host: str, port: int, debug: bool) -> None:
    """Start the JSON API."""
    from .web.app import create_app

    app = create_app(config)
    click.echo(f"Starting API at http://{host}:{port}")
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    cli()
