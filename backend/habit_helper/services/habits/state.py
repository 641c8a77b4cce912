"""
Application state for one user and the pure transitions over it.

Each user action maps to one transition that returns a new AppState snapshot
plus the side effects (store calls) the session must issue. Nothing in this
module touches the network or the clock.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple, Union
import uuid

from habit_helper.core.constants import PROVISIONAL_ID_PREFIX
from habit_helper.core.exceptions import (
    HabitNotFoundError,
    InvalidHabitDataError,
    RecordNotFoundError,
    RecordPendingError
)
from habit_helper.models.habit import Habit, HabitRecord, normalize_slot
from .schedule import is_scheduled_today


# ============================================================================
# EFFECTS
# ============================================================================

@dataclass(frozen=True)
class CreateRecord:
    """Insert an optimistically spliced record into the store"""
    provisional_id: str
    record: HabitRecord


@dataclass(frozen=True)
class DeleteRecord:
    """Delete a record from the store"""
    record_id: Union[int, str]
    habit_id: int


@dataclass(frozen=True)
class Refetch:
    """Reload habits and today's records from the store"""
    reason: str = ""


Effect = Union[CreateRecord, DeleteRecord, Refetch]


# ============================================================================
# STATE
# ============================================================================

@dataclass(frozen=True)
class Notice:
    """A dismissable user-visible failure alert"""
    id: str
    message: str


@dataclass(frozen=True)
class AppState:
    user_id: str
    habits: Tuple[Habit, ...] = ()
    selected_habit: Optional[Habit] = None
    editing_habit: Optional[Habit] = None
    pending: FrozenSet[str] = frozenset()
    # Records removed locally whose store delete has not finished
    pending_deletes: FrozenSet[Union[int, str]] = frozenset()
    notices: Tuple[Notice, ...] = ()
    loaded: bool = False
    load_error: Optional[str] = None

    def find_habit(self, habit_id: int) -> Optional[Habit]:
        for habit in self.habits:
            if habit.id == habit_id:
                return habit
        return None

    def find_record(self, record_id: Union[int, str]) -> Optional[Tuple[Habit, HabitRecord]]:
        for habit in self.habits:
            for record in habit.today_records:
                if record.id == record_id:
                    return habit, record
        return None


@dataclass(frozen=True)
class Transition:
    state: AppState
    effects: Tuple[Effect, ...] = field(default_factory=tuple)


def new_provisional_id() -> str:
    return f"{PROVISIONAL_ID_PREFIX}{uuid.uuid4().hex}"


def _require_habit(state: AppState, habit_id: int) -> Habit:
    habit = state.find_habit(habit_id)
    if habit is None:
        raise HabitNotFoundError(f"Habit {habit_id} not found")
    return habit


def _with_habit(state: AppState, updated: Habit) -> AppState:
    """Replace a habit in the list and in the selected/editing copies together"""
    habits = tuple(updated if h.id == updated.id else h for h in state.habits)
    selected = state.selected_habit
    if selected is not None and selected.id == updated.id:
        selected = updated
    editing = state.editing_habit
    if editing is not None and editing.id == updated.id:
        editing = updated
    return replace(state, habits=habits, selected_habit=selected, editing_habit=editing)


def _with_records(habit: Habit, records: Iterable[HabitRecord]) -> Habit:
    return habit.model_copy(update={"today_records": list(records)})


def _drop_record(state: AppState, record_id: Union[int, str]) -> AppState:
    found = state.find_record(record_id)
    if found is None:
        return state
    habit, _ = found
    return _with_habit(state, _with_records(habit, (r for r in habit.today_records if r.id != record_id)))


# ============================================================================
# RECORD TRANSITIONS
# ============================================================================

def begin_record(state: AppState, habit_id: int, outcome: bool, now: datetime,
                 target_slot: Optional[str] = None,
                 provisional_id: Optional[str] = None) -> Transition:
    """
    Splice a provisional record into the habit's today-records

    Raises:
        HabitNotFoundError: If the habit is not in state
        InvalidHabitDataError: If the habit is inactive, resting today, or
            does not have the given slot
    """
    habit = _require_habit(state, habit_id)
    if not habit.active:
        raise InvalidHabitDataError(f"Habit {habit_id} is inactive")
    if not is_scheduled_today(habit, now):
        raise InvalidHabitDataError(f"Habit {habit_id} is not scheduled today")
    if target_slot is not None:
        target_slot = normalize_slot(target_slot)
        if target_slot not in habit.slots:
            raise InvalidHabitDataError(f"Habit {habit_id} has no {target_slot} slot")

    provisional_id = provisional_id or new_provisional_id()

    record = HabitRecord(
        id=provisional_id,
        user_id=state.user_id,
        habit_id=habit_id,
        outcome=outcome,
        created_at=now,
        target_slot=target_slot,
    )
    updated = _with_records(habit, [*habit.today_records, record])
    new_state = replace(_with_habit(state, updated), pending=state.pending | {provisional_id})
    return Transition(new_state, (CreateRecord(provisional_id, record),))


def confirm_record(state: AppState, provisional_id: str, record: HabitRecord) -> Transition:
    """Swap the provisional record for the authoritative one from the store"""
    state = replace(state, pending=state.pending - {provisional_id})
    habit = state.find_habit(record.habit_id)
    if habit is None:
        # Habit went away while the insert was in flight
        return Transition(_drop_record(state, provisional_id))

    # A fetch may already have delivered the stored row
    kept = [r for r in habit.today_records if r.id != provisional_id and r.id != record.id]
    return Transition(_with_habit(state, _with_records(habit, [*kept, record])))


def fail_record(state: AppState, provisional_id: str, message: str) -> Transition:
    """Discard the optimistic splice, alert the user and reload"""
    state = _drop_record(state, provisional_id)
    state = replace(state, pending=state.pending - {provisional_id})
    state = add_notice(state, message)
    return Transition(state, (Refetch("record failed"),))


def begin_undo(state: AppState, record_id: Union[int, str]) -> Transition:
    """
    Remove a record from today's records ahead of the store delete

    Raises:
        RecordNotFoundError: If no habit holds the record
        RecordPendingError: If the record has not been confirmed yet
    """
    found = state.find_record(record_id)
    if found is None:
        raise RecordNotFoundError(f"Record {record_id} not found")
    habit, record = found
    if record.is_provisional:
        raise RecordPendingError(f"Record {record_id} is still being saved")

    state = replace(_drop_record(state, record_id), pending_deletes=state.pending_deletes | {record_id})
    return Transition(state, (DeleteRecord(record_id, habit.id),))


def confirm_undo(state: AppState, record_id: Union[int, str]) -> Transition:
    return Transition(replace(state, pending_deletes=state.pending_deletes - {record_id}))


def fail_undo(state: AppState, record_id: Union[int, str], message: str) -> Transition:
    """Stop hiding the record, alert the user and reload"""
    state = replace(state, pending_deletes=state.pending_deletes - {record_id})
    return Transition(add_notice(state, message), (Refetch("undo failed"),))


# ============================================================================
# FETCH TRANSITIONS
# ============================================================================

def apply_fetch(state: AppState, habits: List[Habit], records: List[HabitRecord]) -> Transition:
    """
    Replace local state with the store's view.

    Records still awaiting confirmation are carried over so an in-flight
    insert survives a fetch that started before the row existed. Records with
    a delete in flight stay hidden.
    """
    grouped: Dict[int, List[HabitRecord]] = {}
    for record in records:
        if record.id in state.pending_deletes:
            continue
        grouped.setdefault(record.habit_id, []).append(record)

    for habit in state.habits:
        for record in habit.today_records:
            if record.id in state.pending:
                grouped.setdefault(record.habit_id, []).append(record)

    fetched = tuple(_with_records(h, grouped.get(h.id, [])) for h in habits)
    by_id = {h.id: h for h in fetched}

    selected = by_id.get(state.selected_habit.id) if state.selected_habit else None
    editing = by_id.get(state.editing_habit.id) if state.editing_habit else None

    return Transition(replace(
        state,
        habits=fetched,
        selected_habit=selected,
        editing_habit=editing,
        loaded=True,
        load_error=None,
    ))


def fail_fetch(state: AppState, message: str) -> Transition:
    return Transition(replace(state, load_error=message))


# ============================================================================
# SELECTION AND NOTICES
# ============================================================================

def select_habit(state: AppState, habit_id: int) -> Transition:
    return Transition(replace(state, selected_habit=_require_habit(state, habit_id)))


def clear_selection(state: AppState) -> Transition:
    return Transition(replace(state, selected_habit=None))


def start_editing(state: AppState, habit_id: int) -> Transition:
    return Transition(replace(state, editing_habit=_require_habit(state, habit_id)))


def stop_editing(state: AppState) -> Transition:
    return Transition(replace(state, editing_habit=None))


def add_notice(state: AppState, message: str) -> AppState:
    notice = Notice(id=uuid.uuid4().hex, message=message)
    return replace(state, notices=(*state.notices, notice))


def dismiss_notices(state: AppState, notice_id: Optional[str] = None) -> Transition:
    """Dismiss one notice, or all of them when no id is given"""
    if notice_id is None:
        return Transition(replace(state, notices=()))
    return Transition(replace(state, notices=tuple(n for n in state.notices if n.id != notice_id)))
