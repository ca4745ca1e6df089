"""APScheduler lifecycle for SuiPort.

The scheduler is created by the application lifespan and stored on
``app.state``; there is no module-level instance.

Usage:
    scheduler = create_scheduler()
    register_price_jobs(scheduler, services)
    start_scheduler(scheduler)
    ...
    shutdown_scheduler(scheduler)
"""

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler

log = structlog.get_logger(__name__)


def create_scheduler() -> AsyncIOScheduler:
    """Create a scheduler running jobs in UTC.

    The scheduler is not started.
    """
    scheduler = AsyncIOScheduler(timezone="UTC")
    log.debug("scheduler_created")
    return scheduler


def start_scheduler(scheduler: AsyncIOScheduler) -> None:
    """Start the scheduler.

    Safe to call multiple times - will only start if not running.
    """
    if not scheduler.running:
        scheduler.start()
        log.info("scheduler_started", jobs=[job.id for job in scheduler.get_jobs()])


def shutdown_scheduler(scheduler: AsyncIOScheduler) -> None:
    """Shutdown the scheduler without waiting for running jobs.

    Safe to call when scheduler is not running.
    """
    if scheduler.running:
        scheduler.shutdown(wait=False)
        log.info("scheduler_shutdown")
