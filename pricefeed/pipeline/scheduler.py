"""Daily trigger for the scrape pipeline.

:class:`Scheduler` registers :meth:`PipelineRunner.run_once` as an
APScheduler cron job (``"M H * * *"`` in a fixed timezone) on a
:class:`~apscheduler.schedulers.background.BackgroundScheduler`.  The same
runner is reachable on demand through :meth:`Scheduler.trigger`.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from pricefeed.pipeline.runner import PipelineRunner, RunResult

logger = logging.getLogger(__name__)

JOB_ID = "scrape-prices"

# A run missed by up to an hour (process suspended, clock jump) still fires.
_MISFIRE_GRACE_SECONDS = 3600


class Scheduler:
    """Runs ``runner.run_once`` on a cron schedule in a background thread.

    Args:
        runner: The pipeline to execute.
        cron: Crontab expression, e.g. ``"10 3 * * *"``.
        timezone: IANA zone the expression is evaluated in.

    Raises:
        ValueError: If *cron* is not a valid five-field crontab expression.
    """

    def __init__(
        self,
        runner: PipelineRunner,
        cron: str = "10 3 * * *",
        timezone: str = "UTC",
    ) -> None:
        self.runner = runner
        self.cron = cron
        self.timezone = timezone
        self.cron_trigger = CronTrigger.from_crontab(cron, timezone=timezone)
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    @property
    def next_run_at(self) -> Optional[datetime]:
        """Next scheduled fire time, or ``None`` when not started."""
        if not self.is_running:
            return None
        job = self._scheduler.get_job(JOB_ID)  # type: ignore[union-attr]
        return job.next_run_time if job else None

    def next_run(self, after: datetime) -> Optional[datetime]:
        """Return the first fire time at or after the aware *after*."""
        return self.cron_trigger.get_next_fire_time(None, after)

    def start(self) -> None:
        """Register the job and start the background scheduler (no-op if running)."""
        if self.is_running:
            return
        scheduler = BackgroundScheduler(timezone=self.timezone)
        scheduler.add_job(
            self._scheduled_run,
            self.cron_trigger,
            id=JOB_ID,
            name="Scrape key-facts prices",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=_MISFIRE_GRACE_SECONDS,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("Scheduler started: %r in %s, next run at %s", self.cron, self.timezone, self.next_run_at)

    def stop(self, wait: bool = False) -> None:
        """Shut the background scheduler down.

        With ``wait=False`` a run already in progress is not waited for; it
        finishes on its own worker thread.
        """
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
        self._scheduler = None
        logger.info("Scheduler stopped")

    def trigger(self) -> RunResult:
        """Run the pipeline now, on the caller's thread."""
        logger.info("Manual scrape triggered")
        return self.runner.run_once()

    def _scheduled_run(self) -> None:
        result = self.runner.run_once()
        if not result.ok and not result.skipped:
            logger.error("Scheduled scrape failed (%s); next attempt at %s", result.error, self.next_run_at)
