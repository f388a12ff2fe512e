"""Timer-driven refresh triggers."""

from __future__ import annotations

import logging

from .models import RefreshSource

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Fires timer refreshes on a SyncCoordinator.

    Uses APScheduler: a fixed-interval poll, plus a daily cron job so that
    statuses move forward at day rollover even with a long poll interval.
    """

    def __init__(self, config, coordinator) -> None:
        """Initialize scheduler with a PantryConfig and a SyncCoordinator.

        Raises:
            ImportError: If apscheduler is not installed.
        """
        try:
            from apscheduler.schedulers.asyncio import AsyncIOScheduler
            from apscheduler.triggers.cron import CronTrigger
            from apscheduler.triggers.interval import IntervalTrigger
        except ImportError:
            raise ImportError(
                "apscheduler is required: pip install 'pantry-watch[scheduler]'"
            )

        self._config = config
        self._coordinator = coordinator
        self._scheduler = AsyncIOScheduler()
        self._CronTrigger = CronTrigger
        self._IntervalTrigger = IntervalTrigger
        self._running = False

    def setup_jobs(self) -> None:
        """Register scheduled jobs based on config."""
        interval = self._config.engine.refresh_interval
        self._scheduler.add_job(
            self._job_refresh,
            trigger=self._IntervalTrigger(seconds=interval),
            id="poll_refresh",
            name="Inventory poll",
            replace_existing=True,
        )
        logger.info("Registered poll job: every %ds", interval)

        cron = self._config.engine.rollover_cron
        self._scheduler.add_job(
            self._job_refresh,
            trigger=self._parse_cron(cron),
            id="day_rollover",
            name="Day rollover refresh",
            replace_existing=True,
        )
        logger.info("Registered rollover job: %s", cron)

    def start(self) -> None:
        """Start the scheduler. Must be called with the event loop running."""
        self.setup_jobs()
        self._scheduler.start()
        self._running = True
        logger.info("Scheduler started")

    def stop(self) -> None:
        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    @property
    def running(self) -> bool:
        return self._running

    def get_jobs(self) -> list[dict]:
        """Return info about scheduled jobs."""
        jobs = []
        for job in self._scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": str(next_run) if next_run else None,
            })
        return jobs

    def _parse_cron(self, expr: str):
        """Parse a 5-field cron expression into a CronTrigger."""
        parts = expr.split()
        if len(parts) == 5:
            return self._CronTrigger(
                minute=parts[0],
                hour=parts[1],
                day=parts[2],
                month=parts[3],
                day_of_week=parts[4],
            )
        raise ValueError(f"Invalid cron expression: {expr}")

    async def _job_refresh(self) -> None:
        try:
            self._coordinator.trigger_refresh(RefreshSource.TIMER)
        except Exception:
            logger.exception("Failed to trigger timer refresh")
