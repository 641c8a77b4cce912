"""
Habit Routes - Endpoints for habits, records and the session view
"""
from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from habit_helper.core.constants import HISTORY_DEFAULT_LIMIT, HISTORY_MAX_LIMIT
from habit_helper.core.dependencies import get_current_user_id
from habit_helper.core.exceptions import (
    HabitNotFoundError,
    InvalidHabitDataError,
    RecordNotFoundError,
    RecordPendingError,
    DatabaseError
)
from habit_helper.models.habit import (
    Habit,
    HabitRecord,
    HabitCreateRequest,
    HabitUpdateRequest,
    RecordRequest,
    Weekday
)
from habit_helper.models.status import HabitStatus
from habit_helper.services.habits import HabitSession, evaluate
from habit_helper.utils import session_store
from habit_helper.utils.timezone import to_local

router = APIRouter(prefix="/habits", tags=["habits"])


def _habit_view(habit: Habit, status: HabitStatus) -> Dict[str, Any]:
    return {
        **habit.model_dump(mode="json"),
        "days_display": habit.days_display,
        "today_records": [r.model_dump(mode="json") for r in habit.today_records],
        "status": status.model_dump(mode="json")
    }


def _view_for(session: HabitSession, habit: Optional[Habit]) -> Optional[Dict[str, Any]]:
    if habit is None:
        return None
    return _habit_view(habit, evaluate(habit, session.clock()))


def _snapshot(session: HabitSession) -> Dict[str, Any]:
    state = session.state
    now = session.clock()
    return {
        "status": "success",
        "date": str(now.date()),
        "habits": [_habit_view(habit, status) for habit, status in session.statuses(now)],
        "selected_habit_id": state.selected_habit.id if state.selected_habit else None,
        "editing_habit_id": state.editing_habit.id if state.editing_habit else None,
        "notices": [{"id": n.id, "message": n.message} for n in state.notices]
    }


def format_record_date(record: HabitRecord) -> str:
    """e.g. '3/14 (Fri)'"""
    local = to_local(record.created_at)
    return f"{local.month}/{local.day} ({Weekday(local.weekday()).label})"


def format_record_time(record: HabitRecord) -> str:
    """The slot label if the record has one, else the local time it was logged"""
    if record.target_slot:
        return record.target_slot
    return to_local(record.created_at).strftime("%H:%M")


def _parse_record_id(record_id: str) -> Union[int, str]:
    return int(record_id) if record_id.isdigit() else record_id


async def get_loaded_session(user_id: str = Depends(get_current_user_id)) -> HabitSession:
    """Session for the caller, loaded from the store; blocks with 503 if loading failed"""
    session = session_store.get_or_create_session(user_id)
    await session.ensure_loaded()
    if session.state.load_error:
        raise HTTPException(status_code=503, detail=session.state.load_error)
    return session


@router.get("")
async def list_habits(session: HabitSession = Depends(get_loaded_session)):
    """Get all habits with today's records and display status"""
    return _snapshot(session)


@router.post("/refresh")
async def refresh_habits(user_id: str = Depends(get_current_user_id)):
    """Force a full re-fetch from the store"""
    session = session_store.get_or_create_session(user_id)
    await session.refresh()
    if session.state.load_error:
        raise HTTPException(status_code=503, detail=session.state.load_error)
    return _snapshot(session)


@router.post("")
async def add_habit(request: HabitCreateRequest, session: HabitSession = Depends(get_loaded_session)):
    """Add a new habit"""
    try:
        habit = await session.add_habit(request)
        return {"status": "success", "habit": _view_for(session, habit)}
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Unexpected error: {str(e)}")


@router.get("/selected")
async def get_selected_habit(session: HabitSession = Depends(get_loaded_session)):
    """Get the habit currently open in the detail view"""
    return {"status": "success", "habit": _view_for(session, session.state.selected_habit)}


@router.delete("/selected")
async def clear_selected_habit(session: HabitSession = Depends(get_loaded_session)):
    """Close the detail view"""
    session.clear_selection()
    return {"status": "success", "habit": None}


@router.delete("/notices")
async def dismiss_notices(
    notice_id: Optional[str] = Query(None, description="Dismiss a single notice; all when omitted"),
    session: HabitSession = Depends(get_loaded_session)
):
    """Dismiss failure notices"""
    session.dismiss_notices(notice_id)
    return _snapshot(session)


@router.delete("/records/{record_id}")
async def undo_record(record_id: str, background_tasks: BackgroundTasks,
                      session: HabitSession = Depends(get_loaded_session)):
    """Undo a record; the store delete runs after the response"""
    try:
        effects = session.undo(_parse_record_id(record_id))
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RecordPendingError as e:
        raise HTTPException(status_code=409, detail=str(e))

    background_tasks.add_task(session.run_effects, effects)
    return _snapshot(session)


@router.post("/{habit_id}/select")
async def select_habit(habit_id: int, session: HabitSession = Depends(get_loaded_session)):
    """Open a habit in the detail view"""
    try:
        habit = session.select(habit_id)
        return {"status": "success", "habit": _view_for(session, habit)}
    except HabitNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{habit_id}/edit")
async def edit_habit(habit_id: int, session: HabitSession = Depends(get_loaded_session)):
    """Open a habit in the edit form"""
    try:
        habit = session.start_editing(habit_id)
        return {"status": "success", "habit": _view_for(session, habit)}
    except HabitNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{habit_id}")
async def update_habit(habit_id: int, request: HabitUpdateRequest,
                       session: HabitSession = Depends(get_loaded_session)):
    """Update a habit; schedule changes clear today's records for it"""
    try:
        habit = await session.update_habit(habit_id, request)
        return {"status": "success", "habit": _view_for(session, habit)}
    except HabitNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Unexpected error: {str(e)}")


@router.delete("/{habit_id}")
async def delete_habit(habit_id: int, session: HabitSession = Depends(get_loaded_session)):
    """Delete a habit"""
    try:
        await session.delete_habit(habit_id)
        return {"status": "success", "habit_id": habit_id}
    except HabitNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Unexpected error: {str(e)}")


@router.post("/{habit_id}/records")
async def record_habit(habit_id: int, request: RecordRequest, background_tasks: BackgroundTasks,
                       session: HabitSession = Depends(get_loaded_session)):
    """
    Record success or failure for a habit, optionally for a specific slot.

    The record shows up in the returned status immediately; the store insert
    runs after the response and is rolled back on failure.
    """
    try:
        provisional_id, effects = session.record(habit_id, request.outcome, request.target_slot)
    except HabitNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidHabitDataError as e:
        raise HTTPException(status_code=400, detail=str(e))

    background_tasks.add_task(session.run_effects, effects)
    return {
        "status": "success",
        "record_id": provisional_id,
        "habit": _view_for(session, session.state.find_habit(habit_id))
    }


@router.get("/{habit_id}/history")
async def get_history(
    habit_id: int,
    limit: int = Query(HISTORY_DEFAULT_LIMIT, ge=1, le=HISTORY_MAX_LIMIT),
    session: HabitSession = Depends(get_loaded_session)
):
    """Most recent records for a habit, newest first"""
    try:
        records = await session.history(habit_id, limit)
    except HabitNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "status": "success",
        "habit_id": habit_id,
        "records": [
            {
                **record.model_dump(mode="json"),
                "date_label": format_record_date(record),
                "time_label": format_record_time(record)
            }
            for record in records
        ]
    }
