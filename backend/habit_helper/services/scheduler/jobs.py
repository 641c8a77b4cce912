"""
Scheduler Job Definitions
Contains the periodic jobs that keep session state current
"""
import asyncio
import logging

from habit_helper.services.notifications.service import NotificationService
from habit_helper.utils import session_store
from habit_helper.utils.timezone import get_local_now

logger = logging.getLogger(__name__)

notification_service = NotificationService()


async def refresh_statuses() -> int:
    """
    Re-evaluate every session's habits so time-based transitions show up
    without a new event, and remind users about newly opened slots.
    Called every STATUS_REFRESH_INTERVAL_SECONDS by the scheduler.

    Returns:
        Number of reminders handed to the notification service
    """
    now = get_local_now()
    reminders = 0

    for session in session_store.all_sessions():
        for habit, status in session.tick(now):
            logger.info(f"[SCHEDULER] Habit {habit.id} open for {status.actionable_slot} ({session.user_id})")
            notification_service.send_reminder(session.user_id, habit.name, status.actionable_slot)
            reminders += 1

    return reminders


async def rollover_day() -> None:
    """
    Re-fetch every session at local midnight, since "today's records" now
    means a different day
    """
    sessions = session_store.all_sessions()
    logger.info(f"[SCHEDULER] Day rollover, refreshing {len(sessions)} session(s)")
    await asyncio.gather(*(session.refresh() for session in sessions))


async def cleanup_sessions() -> int:
    """Drop idle sessions"""
    removed = session_store.cleanup_expired_sessions()
    if removed:
        logger.info(f"[SCHEDULER] Removed {removed} idle session(s)")
    return removed
