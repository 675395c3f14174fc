"""Sample catalog content for local development."""

import logging
from datetime import datetime, timezone

from .base import SiteStore
from .models import NewSite

logger = logging.getLogger(__name__)

SAMPLE_SITES = [
    {
        "title": "Next.js",
        "description": "The React framework for the web.",
        "url": "https://nextjs.org/",
        "favicon_url": "https://nextjs.org/favicon.ico",
        "categories": ["Development"],
        "tags": ["React", "Next.js", "TypeScript"],
    },
    {
        "title": "React",
        "description": "A JavaScript library for building user interfaces.",
        "url": "https://react.dev/",
        "favicon_url": "https://react.dev/favicon.ico",
        "categories": ["Development"],
        "tags": ["React", "UI"],
    },
    {
        "title": "Tailwind CSS",
        "description": "A utility-first CSS framework.",
        "url": "https://tailwindcss.com/",
        "favicon_url": "https://tailwindcss.com/favicons/favicon.ico",
        "categories": ["Design", "Development"],
        "tags": ["CSS", "Design"],
    },
    {
        "title": "MDN Web Docs",
        "description": "Resources for developers, by developers.",
        "url": "https://developer.mozilla.org/",
        "favicon_url": "https://developer.mozilla.org/favicon-48x48.cbbd161b.png",
        "categories": ["Development"],
        "tags": ["Docs", "JavaScript", "CSS", "HTML"],
    },
    {
        "title": "GitHub",
        "description": "Where the world builds software.",
        "url": "https://github.com/",
        "favicon_url": "https://github.githubassets.com/favicons/favicon.png",
        "categories": ["Open Source", "Development"],
        "tags": ["Git", "Open Source"],
    },
    {
        "title": "Vercel",
        "description": "Develop. Preview. Ship.",
        "url": "https://vercel.com/",
        "favicon_url": "https://vercel.com/favicon.ico",
        "categories": ["DevOps"],
        "tags": ["Hosting", "Next.js"],
    },
    {
        "title": "Supabase",
        "description": "The open source Firebase alternative.",
        "url": "https://supabase.com/",
        "favicon_url": "https://supabase.com/favicon.ico",
        "categories": ["Development", "Database"],
        "tags": ["Postgres", "Auth", "Storage"],
    },
    {
        "title": "Prisma",
        "description": "Next-generation Node.js and TypeScript ORM.",
        "url": "https://www.prisma.io/",
        "favicon_url": "https://www.prisma.io/favicon.ico",
        "categories": ["Development", "Database"],
        "tags": ["ORM", "TypeScript"],
    },
]


def seed_catalog(store: SiteStore, sites: list[dict] | None = None) -> dict[str, int]:
    """Insert sample sites that are not in the store yet. No network access."""
    sites = SAMPLE_SITES if sites is None else sites
    inserted = 0

    for sample in sites:
        if store.find_site_by_url(sample["url"]):
            continue
        store.create_site(
            NewSite(
                url=sample["url"],
                title=sample["title"],
                description=sample.get("description"),
                favicon_url=sample.get("favicon_url"),
                image_url=sample.get("image_url"),
                last_fetched_at=datetime.now(timezone.utc),
                categories=sample.get("categories", []),
                tags=sample.get("tags", []),
            )
        )
        inserted += 1

    category_names = {c for s in sites for c in s.get("categories", [])}
    tag_names = {t for s in sites for t in s.get("tags", [])}
    logger.info(
        f"Seeded {inserted} sites, {len(category_names)} categories, {len(tag_names)} tags"
    )
    return {"sites": inserted, "categories": len(category_names), "tags": len(tag_names)}
