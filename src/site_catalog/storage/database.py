"""SQLite database operations for the site catalog."""

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

from ..catalog.labels import label_key
from ..catalog.query import SiteFilter
from ..errors import LabelAlreadyExistsError, SiteAlreadyExistsError
from .base import SiteStore
from .models import LabelKind, LabelRecord, NewSite, SiteRecord

SCHEMA_SQL = """
-- Main sites table
CREATE TABLE IF NOT EXISTS sites (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    url TEXT UNIQUE NOT NULL,
    title TEXT NOT NULL,
    description TEXT,
    favicon_url TEXT,
    image_url TEXT,
    last_fetched_at TIMESTAMP,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL
);

-- Categories and tags; name_key is the casefolded name
CREATE TABLE IF NOT EXISTS labels (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    kind TEXT NOT NULL,
    name TEXT NOT NULL,
    name_key TEXT NOT NULL,
    created_at TIMESTAMP NOT NULL,
    UNIQUE (kind, name_key)
);

-- Site-label association
CREATE TABLE IF NOT EXISTS site_labels (
    site_id INTEGER REFERENCES sites(id) ON DELETE CASCADE,
    label_id INTEGER REFERENCES labels(id) ON DELETE CASCADE,
    PRIMARY KEY (site_id, label_id)
);

-- Indexes
CREATE INDEX IF NOT EXISTS idx_sites_created_at ON sites(created_at);
CREATE INDEX IF NOT EXISTS idx_site_labels_label ON site_labels(label_id);
"""


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _parse_timestamp(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


class Database(SiteStore):
    """SQLite storage for sites and labels.

    One connection is opened per instance and shared between threads behind
    a lock; call close() on shutdown.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = db_path if str(db_path) == ":memory:" else Path(db_path)
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.create_function("casefold", 1, _casefold, deterministic=True)
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._init_schema()

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except BaseException:
                self._conn.rollback()
                raise

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self._connection() as conn:
            conn.executescript(SCHEMA_SQL)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # ---- Sites ----

    def count_sites(self, site_filter: SiteFilter) -> int:
        where_clause, params = self._build_where(site_filter)
        with self._connection() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) FROM sites WHERE {where_clause}", params
            ).fetchone()
            return row[0]

    def list_sites(
        self,
        site_filter: SiteFilter,
        offset: int,
        limit: int,
        newest_first: bool = True,
    ) -> list[SiteRecord]:
        where_clause, params = self._build_where(site_filter)
        order_by = "created_at DESC, id DESC" if newest_first else "created_at ASC, id ASC"
        with self._connection() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM sites
                WHERE {where_clause}
                ORDER BY {order_by}
                LIMIT ? OFFSET ?
                """,
                params + [limit, offset],
            ).fetchall()
            return [self._row_to_site(conn, row) for row in rows]

    def find_site_by_url(self, url: str) -> SiteRecord | None:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM sites WHERE url = ?", (url,)).fetchone()
            return self._row_to_site(conn, row) if row else None

    def create_site(self, site: NewSite) -> SiteRecord:
        """Insert a site and its label links in one transaction."""
        now = _timestamp()
        try:
            with self._connection() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO sites (url, title, description, favicon_url, image_url,
                                       last_fetched_at, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        site.url,
                        site.title,
                        site.description,
                        site.favicon_url,
                        site.image_url,
                        site.last_fetched_at.isoformat() if site.last_fetched_at else None,
                        now,
                        now,
                    ),
                )
                site_id = cursor.lastrowid

                for kind, names in (
                    (LabelKind.CATEGORY, site.categories),
                    (LabelKind.TAG, site.tags),
                ):
                    for name in names:
                        label_id = self._ensure_label_id(conn, kind, name)
                        conn.execute(
                            "INSERT OR IGNORE INTO site_labels (site_id, label_id) VALUES (?, ?)",
                            (site_id, label_id),
                        )

                row = conn.execute("SELECT * FROM sites WHERE id = ?", (site_id,)).fetchone()
                return self._row_to_site(conn, row)
        except sqlite3.IntegrityError as e:
            existing = self.find_site_by_url(site.url)
            if existing is None:
                raise
            raise SiteAlreadyExistsError(site.url, existing) from e

    # ---- Labels ----

    def find_label_by_name(self, kind: LabelKind, name: str) -> LabelRecord | None:
        with self._connection() as conn:
            row = conn.execute(
                f"{self._LABEL_SELECT} WHERE l.kind = ? AND l.name_key = ? GROUP BY l.id",
                (kind.value, label_key(name)),
            ).fetchone()
            return self._row_to_label(row) if row else None

    def create_label(self, kind: LabelKind, name: str) -> LabelRecord:
        try:
            with self._connection() as conn:
                cursor = conn.execute(
                    "INSERT INTO labels (kind, name, name_key, created_at) VALUES (?, ?, ?, ?)",
                    (kind.value, name, label_key(name), _timestamp()),
                )
                return LabelRecord(id=cursor.lastrowid, kind=kind, name=name)  # type: ignore
        except sqlite3.IntegrityError as e:
            existing = self.find_label_by_name(kind, name)
            if existing is None:
                raise
            raise LabelAlreadyExistsError(kind, name, existing) from e

    def list_labels(self, kind: LabelKind) -> list[LabelRecord]:
        with self._connection() as conn:
            rows = conn.execute(
                f"{self._LABEL_SELECT} WHERE l.kind = ? GROUP BY l.id ORDER BY l.name_key, l.name",
                (kind.value,),
            ).fetchall()
            return [self._row_to_label(row) for row in rows]

    def get_stats(self) -> dict:
        with self._connection() as conn:
            sites = conn.execute("SELECT COUNT(*) FROM sites").fetchone()[0]
            counts = dict(
                conn.execute("SELECT kind, COUNT(*) FROM labels GROUP BY kind").fetchall()
            )
            fetched = conn.execute(
                "SELECT COUNT(*) FROM sites WHERE last_fetched_at IS NOT NULL"
            ).fetchone()[0]

        return {
            "total_sites": sites,
            "fetched": fetched,
            "categories": counts.get(LabelKind.CATEGORY.value, 0),
            "tags": counts.get(LabelKind.TAG.value, 0),
        }

    # ---- Helpers ----

    _LABEL_SELECT = """
        SELECT l.id, l.kind, l.name, COUNT(sl.site_id) AS site_count
        FROM labels l
        LEFT JOIN site_labels sl ON sl.label_id = l.id
    """

    def _ensure_label_id(self, conn: sqlite3.Connection, kind: LabelKind, name: str) -> int:
        conn.execute(
            """
            INSERT OR IGNORE INTO labels (kind, name, name_key, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (kind.value, name, label_key(name), _timestamp()),
        )
        row = conn.execute(
            "SELECT id FROM labels WHERE kind = ? AND name_key = ?",
            (kind.value, label_key(name)),
        ).fetchone()
        return row[0]

    def _build_where(self, site_filter: SiteFilter) -> tuple[str, list]:
        """Translate a SiteFilter into a WHERE clause. Filters combine with AND."""
        conditions = []
        params: list = []

        if site_filter.q:
            conditions.append(
                """
                (instr(casefold(title), ?) > 0
                 OR instr(casefold(COALESCE(description, '')), ?) > 0
                 OR instr(casefold(url), ?) > 0)
                """
            )
            params.extend([site_filter.q.casefold()] * 3)

        for kind, name in (
            (LabelKind.CATEGORY, site_filter.category),
            (LabelKind.TAG, site_filter.tag),
        ):
            if not name:
                continue
            conditions.append(
                """
                id IN (
                    SELECT sl.site_id FROM site_labels sl
                    JOIN labels l ON sl.label_id = l.id
                    WHERE l.kind = ? AND l.name_key = ?
                )
                """
            )
            params.extend([kind.value, label_key(name)])

        where_clause = " AND ".join(conditions) if conditions else "1=1"
        return where_clause, params

    def _label_names(self, conn: sqlite3.Connection, site_id: int, kind: LabelKind) -> list[str]:
        rows = conn.execute(
            """
            SELECT l.name FROM labels l
            JOIN site_labels sl ON sl.label_id = l.id
            WHERE sl.site_id = ? AND l.kind = ?
            ORDER BY l.name_key, l.name
            """,
            (site_id, kind.value),
        ).fetchall()
        return [row["name"] for row in rows]

    def _row_to_site(self, conn: sqlite3.Connection, row: sqlite3.Row) -> SiteRecord:
        """Convert database row to SiteRecord."""
        return SiteRecord(
            id=row["id"],
            url=row["url"],
            title=row["title"],
            description=row["description"],
            favicon_url=row["favicon_url"],
            image_url=row["image_url"],
            last_fetched_at=_parse_timestamp(row["last_fetched_at"]),
            created_at=_parse_timestamp(row["created_at"]),  # type: ignore
            updated_at=_parse_timestamp(row["updated_at"]),  # type: ignore
            categories=self._label_names(conn, row["id"], LabelKind.CATEGORY),
            tags=self._label_names(conn, row["id"], LabelKind.TAG),
        )

    def _row_to_label(self, row: sqlite3.Row) -> LabelRecord:
        return LabelRecord(
            id=row["id"],
            kind=LabelKind(row["kind"]),
            name=row["name"],
            site_count=row["site_count"],
        )
