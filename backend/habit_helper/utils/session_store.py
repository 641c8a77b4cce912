"""
Session Store - Manages per-user habit sessions
"""
from datetime import timedelta
from typing import Dict, List, Optional

from habit_helper.core.config import settings
from habit_helper.services.habits.reconciler import HabitSession
from habit_helper.utils.timezone import get_local_now

# In-memory session storage
# Format: {user_id: HabitSession}
sessions: Dict[str, HabitSession] = {}


def get_or_create_session(user_id: str) -> HabitSession:
    """
    Get the habit session for a user, or create a new one if it doesn't exist

    Args:
        user_id: Authenticated user id

    Returns:
        The user's HabitSession
    """
    session = sessions.get(user_id)
    if session is None:
        session = HabitSession(user_id)
        sessions[user_id] = session

    session.touch()
    return session


def get_session(user_id: str) -> Optional[HabitSession]:
    return sessions.get(user_id)


def all_sessions() -> List[HabitSession]:
    return list(sessions.values())


def cleanup_expired_sessions() -> int:
    """
    Remove sessions that have been inactive for longer than SESSION_TIMEOUT_MINUTES

    Returns:
        Number of sessions removed
    """
    cutoff_time = get_local_now() - timedelta(minutes=settings.SESSION_TIMEOUT_MINUTES)

    expired_users = [
        user_id
        for user_id, session in sessions.items()
        if session.last_active < cutoff_time
    ]

    for user_id in expired_users:
        del sessions[user_id]

    return len(expired_users)


def get_active_session_count() -> int:
    return len(sessions)
