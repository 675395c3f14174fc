"""Configuration management."""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Load .env file from current working directory
load_dotenv()

DEFAULT_USER_AGENT = "SiteCatalogMetadataFetcher/1.0"


@dataclass
class Config:
    """Application configuration."""

    database_path: Path = Path("./sites.db")
    metadata_timeout_ms: int = 8000
    metadata_user_agent: str = DEFAULT_USER_AGENT
    max_redirects: int = 5
    max_content_length: int = 1_000_000
    default_page_size: int = 12

    @classmethod
    def from_yaml(cls, path: str | Path | None = "config.yaml") -> "Config":
        """Load configuration from YAML file.

        A missing file is not an error; defaults apply. Environment variables
        take precedence over YAML values:
        - DATABASE_PATH or DATABASE_URL: SQLite database file
        - METADATA_TIMEOUT_MS: metadata fetch timeout in milliseconds
        - METADATA_USER_AGENT: User-Agent sent when fetching metadata
        """
        data: dict = {}
        if path and Path(path).exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

        database_path = (
            os.environ.get("DATABASE_PATH")
            or _sqlite_path(os.environ.get("DATABASE_URL"))
            or data.get("database_path", "./sites.db")
        )
        timeout_ms = os.environ.get("METADATA_TIMEOUT_MS") or data.get(
            "metadata_timeout_ms", 8000
        )
        user_agent = os.environ.get("METADATA_USER_AGENT") or data.get(
            "metadata_user_agent", DEFAULT_USER_AGENT
        )

        timeout_ms = int(timeout_ms)
        if timeout_ms <= 0:
            raise ValueError("metadata_timeout_ms must be a positive number of milliseconds")

        return cls(
            database_path=Path(database_path).expanduser(),
            metadata_timeout_ms=timeout_ms,
            metadata_user_agent=user_agent,
            max_redirects=int(data.get("max_redirects", 5)),
            max_content_length=int(data.get("max_content_length", 1_000_000)),
            default_page_size=int(data.get("default_page_size", 12)),
        )


def _sqlite_path(database_url: str | None) -> str | None:
    """Turn a sqlite:/// connection string into a file path."""
    if not database_url:
        return None
    if not database_url.startswith("sqlite:///"):
        raise ValueError(f"Unsupported DATABASE_URL (only sqlite:/// is supported): {database_url}")
    return database_url[len("sqlite:///"):]
