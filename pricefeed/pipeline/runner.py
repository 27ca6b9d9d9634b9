"""Scrape-and-persist pipeline runner.

``PipelineRunner.run_once`` sequences the three stages:

    fetch -> extract -> stamp captured_at -> persist

Every failure is caught here, logged with the stage it came from, and
returned inside a :class:`RunResult`.  Nothing raised by a stage escapes
``run_once``, so a bad run can never take down the scheduler thread or an
API worker.  Rows committed before a failure stay committed.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional

from pricefeed.config import settings
from pricefeed.db.prices import insert_prices
from pricefeed.scraper.errors import ScrapeError
from pricefeed.scraper.extractor import Selectors, count_sentinels, extract_facts
from pricefeed.scraper.fetcher import fetch_page
from pricefeed.scraper.models import PriceFact, RawPage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineError:
    """Which stage failed and why."""

    stage: str
    cause: BaseException

    def __str__(self) -> str:
        return f"{self.stage}: {self.cause}"


@dataclass
class RunResult:
    """Outcome of a single ``run_once`` call."""

    ok: bool
    started_at: datetime
    finished_at: Optional[datetime] = None
    extracted: int = 0
    inserted: int = 0
    sentinels: int = 0
    skipped: bool = False
    error: Optional[PipelineError] = None


class PipelineRunner:
    """Runs the pipeline against a shared connection, one run at a time.

    Args:
        conn: Open, initialised DB connection.  Borrowed, never closed here.
        url: Page to scrape.  Defaults to ``settings.scrape_url``.
        selectors: Override the key-facts CSS selectors.
        fetcher: Callable used to retrieve the page (``fetch_page`` by default).
        clock: Returns the ``captured_at`` timestamp for a run.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        url: Optional[str] = None,
        selectors: Optional[Selectors] = None,
        fetcher: Callable[[str], RawPage] = fetch_page,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.conn = conn
        self.url = url if url is not None else settings.scrape_url
        self.selectors = selectors
        self._fetch = fetcher
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        """``True`` while a run holds the lock."""
        return self._lock.locked()

    def run_once(self) -> RunResult:
        """Run the pipeline once; see the module docstring.

        If another run is already in flight this call does nothing and
        returns a result with ``skipped=True``.
        """
        started = self._clock()
        if not self._lock.acquire(blocking=False):
            logger.warning("Scrape already in progress; skipping this trigger")
            return RunResult(ok=False, started_at=started, finished_at=started, skipped=True)

        result = RunResult(ok=False, started_at=started)
        stage = "fetch"
        try:
            logger.info("Scrape started for %s", self.url)
            raw = self._fetch(self.url)

            stage = "extract"
            facts = extract_facts(raw.html, self.selectors)
            result.extracted = len(facts)
            result.sentinels = count_sentinels(facts)
            if result.sentinels:
                logger.warning(
                    "%d of %d figures were not numeric and were stored as NaN",
                    result.sentinels,
                    result.extracted,
                )

            stage = "persist"
            captured_at = self._clock()
            stamped: List[PriceFact] = [fact.captured(captured_at) for fact in facts]
            result.inserted = insert_prices(self.conn, stamped)
            result.ok = True
        except ScrapeError as exc:
            result.error = PipelineError(stage=exc.stage, cause=exc)
            logger.error("Scrape failed at %s stage: %s", exc.stage, exc)
        except Exception as exc:  # noqa: BLE001
            result.error = PipelineError(stage=stage, cause=exc)
            logger.exception("Unexpected error during %s stage", stage)
        finally:
            result.finished_at = self._clock()
            self._lock.release()

        if result.ok:
            logger.info(
                "Scrape finished: %d extracted, %d inserted, %d already stored",
                result.extracted,
                result.inserted,
                result.extracted - result.inserted,
            )
        return result
