"""Insert and query operations for the ``price`` table.

The table is append-only: rows are never updated or deleted here.
"""

from __future__ import annotations

import logging
import math
import sqlite3
from datetime import datetime, timezone
from typing import Iterable, Optional

from pricefeed.db.models import PriceRecord
from pricefeed.scraper.errors import StorageError
from pricefeed.scraper.models import PriceFact

logger = logging.getLogger(__name__)

LATEST_LIMIT = 5


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_record(row: sqlite3.Row) -> PriceRecord:
    figure = row["figure"]
    return PriceRecord(
        id=row["id"],
        order_id=row["order_id"],
        figure=math.nan if figure is None else float(figure),
        description=row["description"],
        quote=row["quote"],
        created_at=row["created_at"],
    )


def _figure_value(figure: float) -> Optional[float]:
    # SQLite has no NaN; it is stored as NULL and read back as NaN.
    return None if math.isnan(figure) else figure


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def insert_prices(
    conn: sqlite3.Connection,
    facts: Iterable[PriceFact],
    now: Optional[datetime] = None,
) -> int:
    """Insert *facts* in one transaction and return how many rows were added.

    Rows that collide with the ``(order_id, description, quote)`` unique
    index are skipped, so persisting an unchanged batch twice adds nothing
    the second time.  Facts without ``captured_at`` are stamped with *now*
    (defaults to the current UTC time).

    Raises:
        StorageError: On a connection- or transaction-level failure.
    """
    stamp = now or datetime.now(timezone.utc)
    inserted = 0
    try:
        with conn:
            for fact in facts:
                captured = fact.captured_at or stamp
                cursor = conn.execute(
                    """
                    INSERT OR IGNORE INTO price (order_id, figure, description, quote, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        fact.sequence_number,
                        _figure_value(fact.figure),
                        fact.description,
                        fact.quote,
                        captured.isoformat(),
                    ),
                )
                inserted += cursor.rowcount
    except sqlite3.Error as exc:
        raise StorageError(f"Could not insert prices: {exc}") from exc

    logger.debug("Inserted %d price rows", inserted)
    return inserted


def latest_prices(conn: sqlite3.Connection, limit: int = LATEST_LIMIT) -> list[PriceRecord]:
    """Return the *limit* most recently inserted rows, newest ``id`` first."""
    rows = conn.execute(
        "SELECT * FROM price ORDER BY id DESC LIMIT ?", (limit,)
    ).fetchall()
    return [_row_to_record(r) for r in rows]


def count_prices(conn: sqlite3.Connection) -> int:
    """Return the total number of stored rows."""
    row = conn.execute("SELECT COUNT(*) FROM price").fetchone()
    return row[0] if row else 0
