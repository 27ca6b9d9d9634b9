"""Database initialisation and migration helpers.

``init_db(conn)`` is idempotent - safe to call on an existing database.
``migrate(conn)`` runs incremental schema changes tracked in a version table.
"""

from __future__ import annotations

import logging
import sqlite3

from pricefeed.config import settings
from pricefeed.scraper.errors import StorageError

logger = logging.getLogger(__name__)

# (version, statements) pairs applied in order by ``migrate``.
MIGRATIONS: list[tuple[int, tuple[str, ...]]] = [
    # 1: the natural key includes the figure, so a price that changes while
    # the quote and description stay the same is stored as a new row.  NULL
    # (unparseable) figures compare equal through IFNULL.
    (
        1,
        (
            "DROP INDEX IF EXISTS price_natural_key",
            """
            CREATE UNIQUE INDEX IF NOT EXISTS price_fact_key
                ON price (order_id, description, quote, IFNULL(figure, 'nan'))
            """,
        ),
    ),
]


def _read_schema() -> str:
    return settings.schema_path.read_text(encoding="utf-8")


def init_db(conn: sqlite3.Connection) -> None:
    """Create the ``price`` table, its indexes, and the version table.

    Every DDL statement uses ``IF NOT EXISTS`` so calling this multiple
    times on the same database is safe.

    Raises:
        StorageError: If the schema cannot be created or migrated.
    """
    try:
        # executescript() issues an implicit COMMIT first; fine for DDL.
        conn.executescript(_read_schema())
        _ensure_version_table(conn)
        migrate(conn)
    except sqlite3.Error as exc:
        raise StorageError(f"Could not initialise database schema: {exc}") from exc


def _ensure_version_table(conn: sqlite3.Connection) -> None:
    """Create the internal schema-version tracking table if absent."""
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version    INTEGER PRIMARY KEY,
                applied_at TEXT DEFAULT (datetime('now'))
            )
            """
        )


def current_version(conn: sqlite3.Connection) -> int:
    """Return the highest applied migration version (0 if none applied)."""
    row = conn.execute(
        "SELECT COALESCE(MAX(version), 0) FROM schema_version"
    ).fetchone()
    return row[0] if row else 0


def migrate(conn: sqlite3.Connection) -> None:
    """Apply pending entries of ``MIGRATIONS`` and record them."""
    applied = current_version(conn)
    for version, statements in MIGRATIONS:
        if version > applied:
            with conn:
                for sql in statements:
                    conn.execute(sql)
                conn.execute(
                    "INSERT INTO schema_version(version) VALUES (?)", (version,)
                )
            logger.info("Applied schema migration %d", version)
