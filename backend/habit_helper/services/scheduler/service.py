"""
Scheduler Service - Background scheduler lifecycle management
Handles starting, stopping, and configuring the APScheduler instance
"""
import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.triggers.cron import CronTrigger

from habit_helper.core.config import settings
from habit_helper.core.constants import SESSION_CLEANUP_INTERVAL_MINUTES
from habit_helper.utils.timezone import get_local_tz
from .jobs import refresh_statuses, rollover_day, cleanup_sessions

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def start_scheduler():
    """
    Start the scheduler on the running event loop.
    Jobs run on the loop, so session state is only touched from one thread.
    """
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already running")
        return

    scheduler = AsyncIOScheduler(timezone=get_local_tz())

    scheduler.add_job(
        func=refresh_statuses,
        trigger=IntervalTrigger(seconds=settings.STATUS_REFRESH_INTERVAL_SECONDS),
        id='status_refresh',
        name='Re-evaluate habit display states',
        replace_existing=True
    )

    # New local day: today's records change
    scheduler.add_job(
        func=rollover_day,
        trigger=CronTrigger(hour=0, minute=0, timezone=get_local_tz()),
        id='day_rollover',
        name='Refresh sessions at local midnight',
        replace_existing=True
    )

    scheduler.add_job(
        func=cleanup_sessions,
        trigger=IntervalTrigger(minutes=SESSION_CLEANUP_INTERVAL_MINUTES),
        id='session_cleanup',
        name='Drop idle sessions',
        replace_existing=True
    )

    scheduler.start()
    logger.info(f"Scheduler started - evaluating every {settings.STATUS_REFRESH_INTERVAL_SECONDS} seconds, rollover at midnight")


def stop_scheduler():
    """Stop the scheduler"""
    global scheduler

    if scheduler is not None:
        scheduler.shutdown()
        scheduler = None
        logger.info("Scheduler stopped")
