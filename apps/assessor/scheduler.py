"""
Assessment Scheduler - One-Shot and Cron Execution

Entry point of the assessor. By default the job runs once and the process
exits non-zero if it failed. With RUN_ONCE=false the job is registered with
APScheduler on ASSESS_SCHEDULE_CRON and the process stays up until SIGINT or
SIGTERM.

Usage:
    # Run once and exit (default)
    python -m apps.assessor

    # Scheduled mode
    RUN_ONCE=false ASSESS_SCHEDULE_CRON="0 6 * * *" python -m apps.assessor
"""

import asyncio
import logging
import signal
import sys
from typing import Any, Awaitable, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from apps.assessor.assessment_job import run_assessment
from utils.config import Settings, settings as default_settings
from utils.logging import setup_logging
from utils.schemas import SubmissionResult

logger = logging.getLogger(__name__)

JOB_ID = "assessment_job"
SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)

AssessmentJob = Callable[[Settings], Awaitable[SubmissionResult]]


class AssessmentScheduler:
    """
    Runs the assessment job once or on a cron schedule.

    Attributes:
        scheduler: APScheduler instance, only created in scheduled mode
        shutdown_event: Set when the process should stop waiting for runs
        last_result: Submission result of the most recent successful run
    """

    def __init__(self, settings: Optional[Settings] = None, job: AssessmentJob = run_assessment) -> None:
        self.settings = settings or default_settings
        self.run_once = self.settings.RUN_ONCE
        self.job = job
        self.scheduler: AsyncIOScheduler | None = None
        self.shutdown_event = asyncio.Event()
        self.last_result: SubmissionResult | None = None
        self._previous_handlers: dict[int, Any] = {}

        logger.info(
            "AssessmentScheduler initialized",
            extra={"run_once": self.run_once, "cron_schedule": self.settings.ASSESS_SCHEDULE_CRON},
        )

    async def execute_assessment(self) -> SubmissionResult:
        """Run the job once. Failures are logged and re-raised."""
        logger.info("Starting assessment execution")

        try:
            self.last_result = await self.job(self.settings)
        except Exception as e:
            logger.error("Assessment execution failed", extra={"error": str(e)}, exc_info=True)
            raise
        finally:
            if self.run_once:
                self.shutdown_event.set()

        logger.info("Assessment execution completed", extra={"success": self.last_result.success})
        return self.last_result

    def install_signal_handlers(self) -> None:
        """Route SIGINT/SIGTERM to shutdown_event, remembering the handlers they replace."""

        def request_shutdown(signum: int, frame: object) -> None:
            logger.info("Received signal %d, shutting down", signum)
            self.shutdown_event.set()

        for signum in SHUTDOWN_SIGNALS:
            self._previous_handlers[signum] = signal.signal(signum, request_shutdown)

    def restore_signal_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    async def start(self) -> None:
        """
        Execute the job according to RUN_ONCE.

        In RUN_ONCE mode this returns (or raises) as soon as the single run
        ends. In scheduled mode it blocks until shutdown_event is set; a failed
        scheduled run is logged by APScheduler and the next one still fires.
        """
        if self.run_once:
            logger.info("Running in RUN_ONCE mode")
            await self.execute_assessment()
            return

        await self._run_scheduled()

    async def _run_scheduled(self) -> None:
        cron = self.settings.ASSESS_SCHEDULE_CRON
        logger.info("Running in scheduled mode", extra={"schedule": cron})

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.execute_assessment,
            trigger=CronTrigger.from_crontab(cron),
            id=JOB_ID,
            name="Patient Risk Assessment",
            replace_existing=True,
            max_instances=1,
        )

        self.install_signal_handlers()
        try:
            # next_run_time is only computed once the scheduler is running
            self.scheduler.start()
            next_run = self.scheduler.get_job(JOB_ID).next_run_time
            logger.info("Next assessment at %s", next_run, extra={"next_run": str(next_run)})

            await self.shutdown_event.wait()
        finally:
            logger.info("Shutting down scheduler")
            if self.scheduler.running:
                self.scheduler.shutdown(wait=True)
            self.restore_signal_handlers()

        logger.info("Scheduler shutdown complete")


async def main(settings: Optional[Settings] = None) -> None:
    """Configure logging, run the scheduler and exit 1 on an unrecovered error."""
    settings = settings or default_settings
    setup_logging(level=settings.LOG_LEVEL, format_type=settings.LOG_FORMAT)

    scheduler = AssessmentScheduler(settings)

    try:
        await scheduler.start()
    except Exception as e:
        logger.error("An unrecoverable error occurred: %s", e, extra={"error": str(e)})
        sys.exit(1)


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
