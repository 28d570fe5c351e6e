"""APScheduler daemon that periodically rescores completed references."""

from __future__ import annotations

import logging

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from rcs.config import Settings

logger = logging.getLogger(__name__)


class RecalcScheduler:
    """Wraps APScheduler BlockingScheduler with one recalculation cron job."""

    JOB_ID = "rcs_recalculation"

    def __init__(self, config: Settings) -> None:
        self.config = config
        self._scheduler = BlockingScheduler(timezone="UTC")

    def register(self) -> None:
        cron_parts = self.config.recalc_cron.split()
        if len(cron_parts) != 5:
            raise ValueError(f"Invalid recalc_cron: {self.config.recalc_cron!r}")

        minute, hour, day, month, day_of_week = cron_parts
        self._scheduler.add_job(
            func=self.run_recalculation,
            trigger=CronTrigger(
                minute=minute,
                hour=hour,
                day=day,
                month=month,
                day_of_week=day_of_week,
                timezone="UTC",
            ),
            id=self.JOB_ID,
            name="RCS batch recalculation",
            replace_existing=True,
        )
        logger.info("job_registered", extra={"job": self.JOB_ID})

    def start(self) -> None:
        """Register the job and start the blocking scheduler."""
        self.register()
        logger.info("scheduler_starting", extra={"recalc_cron": self.config.recalc_cron})
        self._scheduler.start()

    def stop(self) -> None:
        """Shut down the scheduler gracefully."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    def get_job(self):
        return self._scheduler.get_job(self.JOB_ID)

    def run_recalculation(self) -> None:
        """Execute one batch run (imported lazily to avoid circular imports)."""
        try:
            from rcs.engine import RcsCalculator
            from rcs.storage.database import Database

            with Database(self.config.db_path) as db:
                calculator = RcsCalculator.from_settings(self.config, db)
                summary = calculator.recalculate_batch_sync()
            logger.info(
                "scheduled_recalculation_done",
                extra={"total": summary.total, "updated": summary.updated, "failed": summary.failed},
            )
        except Exception as exc:
            logger.error("scheduled_recalculation_failed", extra={"error": str(exc)}, exc_info=True)
