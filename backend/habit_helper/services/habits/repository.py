"""
Habits Repository - Centralized store access layer
All Supabase queries for habits, habit records and push subscriptions
"""
from datetime import datetime
from typing import List, Dict, Any, Optional, Union
import logging

from habit_helper.core.constants import HABIT_TABLE, RECORD_TABLE, PUSH_TABLE
from habit_helper.core.dependencies import get_supabase_client
from habit_helper.core.exceptions import DatabaseError

logger = logging.getLogger(__name__)


def _table(name: str):
    return get_supabase_client().table(name)


# ============================================================================
# HABIT TABLE
# ============================================================================

def get_habits_for_user(user_id: str) -> List[Dict[str, Any]]:
    """
    Get all habits for a user in creation order

    Args:
        user_id: The owning user

    Returns:
        List of habit rows

    Raises:
        DatabaseError: If query fails
    """
    try:
        result = _table(HABIT_TABLE)\
            .select("*")\
            .eq("user_id", user_id)\
            .order("id")\
            .execute()
        return result.data
    except Exception as e:
        logger.error(f"Database error fetching habits for {user_id}: {e}")
        raise DatabaseError(f"Failed to fetch habits: {e}")


def create_habit(user_id: str, habit_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a new habit

    Args:
        user_id: The owning user
        habit_data: Row fields (name, description, day, time, activate)

    Returns:
        Created habit row

    Raises:
        DatabaseError: If insert fails
    """
    try:
        result = _table(HABIT_TABLE).insert({"user_id": user_id, **habit_data}).execute()
        return result.data[0] if result.data else {}
    except Exception as e:
        logger.error(f"Database error creating habit: {e}")
        raise DatabaseError(f"Failed to create habit: {e}")


def update_habit(habit_id: int, update_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Update a habit

    Raises:
        DatabaseError: If update fails
    """
    try:
        result = _table(HABIT_TABLE).update(update_data).eq("id", habit_id).execute()
        return result.data[0] if result.data else {}
    except Exception as e:
        logger.error(f"Database error updating habit {habit_id}: {e}")
        raise DatabaseError(f"Failed to update habit: {e}")


def delete_habit(habit_id: int) -> Dict[str, Any]:
    """
    Delete a habit

    Raises:
        DatabaseError: If delete fails
    """
    try:
        result = _table(HABIT_TABLE).delete().eq("id", habit_id).execute()
        return result.data[0] if result.data else {}
    except Exception as e:
        logger.error(f"Database error deleting habit {habit_id}: {e}")
        raise DatabaseError(f"Failed to delete habit: {e}")


# ============================================================================
# HABIT RECORDS TABLE
# ============================================================================

def get_records_since(user_id: str, since: datetime) -> List[Dict[str, Any]]:
    """
    Get a user's records created at or after `since` (local midnight for "today")

    Raises:
        DatabaseError: If query fails
    """
    try:
        result = _table(RECORD_TABLE)\
            .select("*")\
            .eq("user_id", user_id)\
            .gte("created_at", since.isoformat())\
            .execute()
        return result.data
    except Exception as e:
        logger.error(f"Database error fetching records for {user_id} since {since}: {e}")
        raise DatabaseError(f"Failed to fetch records: {e}")


def create_record(user_id: str, habit_id: int, outcome: bool, created_at: datetime,
                  target_slot: Optional[str] = None) -> Dict[str, Any]:
    """
    Insert a habit record

    Args:
        user_id: The owning user
        habit_id: The habit the record belongs to
        outcome: True for success, False for failure
        created_at: When the record was logged
        target_slot: Optional HH:MM slot label the record answers

    Returns:
        Created record row (with its store id)

    Raises:
        DatabaseError: If insert fails
    """
    try:
        result = _table(RECORD_TABLE).insert({
            "user_id": user_id,
            "habit_id": habit_id,
            "result": outcome,
            "created_at": created_at.isoformat(),
            "recordTime": target_slot
        }).execute()
        if not result.data:
            raise DatabaseError("Insert returned no row")
        return result.data[0]
    except DatabaseError:
        raise
    except Exception as e:
        logger.error(f"Database error creating record for habit {habit_id}: {e}")
        raise DatabaseError(f"Failed to create record: {e}")


def delete_record(record_id: Union[int, str]) -> None:
    """
    Delete a single record by id

    Raises:
        DatabaseError: If delete fails
    """
    try:
        _table(RECORD_TABLE).delete().eq("id", record_id).execute()
    except Exception as e:
        logger.error(f"Database error deleting record {record_id}: {e}")
        raise DatabaseError(f"Failed to delete record: {e}")


def delete_records_for_habit_since(habit_id: int, since: datetime) -> None:
    """
    Delete a habit's records created at or after `since`

    Raises:
        DatabaseError: If delete fails
    """
    try:
        _table(RECORD_TABLE)\
            .delete()\
            .eq("habit_id", habit_id)\
            .gte("created_at", since.isoformat())\
            .execute()
    except Exception as e:
        logger.error(f"Database error clearing records for habit {habit_id}: {e}")
        raise DatabaseError(f"Failed to clear records: {e}")


def get_recent_records(habit_id: int, limit: int) -> List[Dict[str, Any]]:
    """
    Get the most recent records for a habit, newest first

    Raises:
        DatabaseError: If query fails
    """
    try:
        result = _table(RECORD_TABLE)\
            .select("*")\
            .eq("habit_id", habit_id)\
            .order("created_at", desc=True)\
            .limit(limit)\
            .execute()
        return result.data
    except Exception as e:
        logger.error(f"Database error fetching history for habit {habit_id}: {e}")
        raise DatabaseError(f"Failed to fetch history: {e}")


# ============================================================================
# PUSH SUBSCRIPTION TABLE
# ============================================================================

def upsert_push_subscription(user_id: str, sub_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Store a device push subscription as active

    Raises:
        DatabaseError: If upsert fails
    """
    try:
        result = _table(PUSH_TABLE).upsert({
            "user_id": user_id,
            "sub_data": sub_data,
            "active": True
        }).execute()
        return result.data[0] if result.data else {}
    except Exception as e:
        logger.error(f"Database error saving push subscription for {user_id}: {e}")
        raise DatabaseError(f"Failed to save push subscription: {e}")


def deactivate_push_subscriptions(user_id: str) -> None:
    """
    Mark all of a user's push subscriptions inactive

    Raises:
        DatabaseError: If update fails
    """
    try:
        _table(PUSH_TABLE).update({"active": False}).eq("user_id", user_id).execute()
    except Exception as e:
        logger.error(f"Database error deactivating push subscriptions for {user_id}: {e}")
        raise DatabaseError(f"Failed to deactivate push subscription: {e}")


def get_active_push_subscription(user_id: str) -> Optional[Dict[str, Any]]:
    """
    Get the user's active push subscription, if any

    Raises:
        DatabaseError: If query fails
    """
    try:
        result = _table(PUSH_TABLE)\
            .select("*")\
            .eq("user_id", user_id)\
            .eq("active", True)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None
    except Exception as e:
        logger.error(f"Database error fetching push subscription for {user_id}: {e}")
        raise DatabaseError(f"Failed to fetch push subscription: {e}")
