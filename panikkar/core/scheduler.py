"""Scheduler for background jobs (badge sweeps, stale application cleanup)."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from panikkar.core.config import constants, settings
from panikkar.services import application_service, badge_service, worker_service


logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = AsyncIOScheduler()


async def run_badge_sweep() -> int:
    """Evaluate every badge for every worker.

    Runs daily at 2am. A failure for one worker is logged and the sweep moves on.

    Returns:
        Number of badges awarded
    """
    logger.info("Running badge eligibility sweep")

    awarded = 0
    checked = 0
    page = 1
    while True:
        worker_ids = await worker_service.list_worker_ids(page=page)
        if not worker_ids:
            break

        for worker_id in worker_ids:
            checked += 1
            try:
                badges = await badge_service.check_all_badges(worker_id=worker_id)
            except Exception:
                logger.exception("Badge check failed for worker %s", worker_id)
                continue
            awarded += len(badges)

        if len(worker_ids) < constants.DEFAULT_PER_PAGE_LIMIT:
            break
        page += 1

    logger.info("Completed badge sweep: %d badges awarded across %d workers", awarded, checked)
    return awarded


async def run_stale_application_cleanup() -> int:
    """Withdraw applications nobody responded to in time.

    Runs hourly at :15.
    """
    logger.info("Running stale application cleanup")
    try:
        withdrawn = await application_service.withdraw_stale_applications(
            hours_old=settings.stale_application_hours
        )
    except Exception:
        logger.exception("Error in stale application cleanup job")
        return 0

    logger.info("Completed stale application cleanup: %d withdrawn", withdrawn)
    return withdrawn


def start_scheduler() -> None:
    """Register all jobs and start the scheduler."""
    if not settings.enable_scheduler:
        logger.info("Scheduler disabled by configuration")
        return

    logger.info("Starting scheduler")

    scheduler.add_job(
        run_badge_sweep,
        trigger=CronTrigger(hour=constants.BADGE_SWEEP_HOUR, minute=0),
        id="badge_sweep",
        name="Check Badge Eligibility",
        replace_existing=True,
    )
    logger.info("Scheduled badge sweep job: daily at %d:00", constants.BADGE_SWEEP_HOUR)

    scheduler.add_job(
        run_stale_application_cleanup,
        trigger=CronTrigger(hour="*", minute=constants.STALE_APPLICATION_SWEEP_MINUTE),
        id="stale_application_cleanup",
        name="Withdraw Stale Applications",
        replace_existing=True,
    )
    logger.info("Scheduled stale application cleanup: hourly at :%02d", constants.STALE_APPLICATION_SWEEP_MINUTE)

    scheduler.start()
    logger.info("Scheduler started")


def stop_scheduler() -> None:
    """Stop the scheduler if it is running."""
    if not scheduler.running:
        return

    logger.info("Stopping scheduler")
    scheduler.shutdown(wait=True)
    logger.info("Scheduler stopped")
