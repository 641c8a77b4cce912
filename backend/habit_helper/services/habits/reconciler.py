"""
Habit session - owns one user's application state and reconciles
optimistic changes with the store
"""
import asyncio
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union
import logging

from habit_helper.core.config import settings
from habit_helper.core.constants import HISTORY_DEFAULT_LIMIT
from habit_helper.core.exceptions import DatabaseError, HabitNotFoundError, StoreTimeoutError
from habit_helper.models.habit import Habit, HabitCreateRequest, HabitRecord, HabitUpdateRequest
from habit_helper.models.status import DisplayState, HabitStatus
from habit_helper.utils.timezone import get_day_start, get_local_now
from . import repository
from . import state as transitions
from .schedule import evaluate, schedule_changed
from .state import AppState, CreateRecord, DeleteRecord, Effect, Refetch, Transition

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Could not load habits"
RECORD_FAILED_MESSAGE = "Could not save the record. Please try again."
UNDO_FAILED_MESSAGE = "Could not undo the record. Please try again."
ADD_FAILED_MESSAGE = "Could not add the habit."
UPDATE_FAILED_MESSAGE = "Could not update the habit."
DELETE_FAILED_MESSAGE = "Could not delete the habit."


class HabitSession:
    """
    In-memory state for one user.

    All mutation happens on the event loop; store calls run in worker threads
    and are bounded by the configured timeout.
    """

    def __init__(self, user_id: str, store: Any = None, timeout: Optional[float] = None,
                 clock: Callable[[], datetime] = get_local_now):
        """
        Args:
            user_id: The user this session belongs to
            store: Object exposing the repository functions (defaults to the Supabase repository)
            timeout: Seconds before a store call is treated as failed
            clock: Returns the current local datetime
        """
        self.state = AppState(user_id=user_id)
        self.store = store if store is not None else repository
        self.timeout = timeout if timeout is not None else settings.STORE_TIMEOUT_SECONDS
        self.clock = clock
        self.last_active = clock()
        self._fetch_generation = 0
        self._last_statuses: Dict[int, Tuple[DisplayState, Optional[str]]] = {}

    @property
    def user_id(self) -> str:
        return self.state.user_id

    def touch(self) -> None:
        self.last_active = self.clock()

    def dispatch(self, transition: Transition) -> Tuple[Effect, ...]:
        """Install the transition's state and hand back its effects"""
        self.state = transition.state
        return transition.effects

    async def _call(self, func: Callable, *args):
        name = getattr(func, "__name__", "store call")
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"[RECONCILE] {name} timed out after {self.timeout}s")
            raise StoreTimeoutError(f"{name} timed out after {self.timeout}s")

    def _supersede_fetches(self) -> None:
        """Discard fetches that started before a store write finished"""
        self._fetch_generation += 1

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def refresh(self) -> bool:
        """
        Reload habits and today's records from the store

        Returns:
            True if the fetch was applied, False if it failed or was superseded
        """
        self._fetch_generation += 1
        generation = self._fetch_generation
        since = get_day_start(self.clock())

        try:
            habit_rows = await self._call(self.store.get_habits_for_user, self.user_id)
            record_rows = await self._call(self.store.get_records_since, self.user_id, since)
            habits = [Habit.model_validate(row) for row in habit_rows]
            records = [HabitRecord.model_validate(row) for row in record_rows]
        except (DatabaseError, ValueError) as e:
            if generation != self._fetch_generation:
                return False
            logger.error(f"[RECONCILE] Could not load habits for {self.user_id}: {e}")
            self.dispatch(transitions.fail_fetch(self.state, LOAD_FAILED_MESSAGE))
            return False

        if generation != self._fetch_generation:
            logger.info(f"[RECONCILE] Discarding superseded fetch for {self.user_id}")
            return False

        self.dispatch(transitions.apply_fetch(self.state, habits, records))
        logger.info(f"[RECONCILE] Loaded {len(habits)} habits and {len(records)} records for {self.user_id}")
        return True

    async def ensure_loaded(self) -> None:
        """Load on first access, and retry while the last load failed"""
        if not self.state.loaded or self.state.load_error:
            await self.refresh()

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def record(self, habit_id: int, outcome: bool,
               target_slot: Optional[str] = None) -> Tuple[str, Tuple[Effect, ...]]:
        """
        Optimistically record an outcome

        Returns:
            Tuple of (provisional_id, effects to run)

        Raises:
            HabitNotFoundError: If the habit is not loaded
            InvalidHabitDataError: If the habit cannot take a record right now
        """
        self.touch()
        effects = self.dispatch(transitions.begin_record(
            self.state, habit_id, outcome, self.clock(), target_slot
        ))
        provisional_id = effects[0].provisional_id
        logger.info(f"[RECONCILE] Recorded {'success' if outcome else 'failure'} for habit {habit_id} "
                    f"(slot={target_slot}, provisional={provisional_id})")
        return provisional_id, effects

    def undo(self, record_id: Union[int, str]) -> Tuple[Effect, ...]:
        """
        Optimistically remove a record

        Raises:
            RecordNotFoundError: If the record is not in today's records
            RecordPendingError: If the record is still being saved
        """
        self.touch()
        effects = self.dispatch(transitions.begin_undo(self.state, record_id))
        logger.info(f"[RECONCILE] Undo record {record_id}")
        return effects

    async def run_effects(self, effects: Iterable[Effect]) -> None:
        """Issue store calls for effects and reconcile their results"""
        for effect in effects:
            if isinstance(effect, CreateRecord):
                await self._persist_record(effect)
            elif isinstance(effect, DeleteRecord):
                await self._persist_undo(effect)
            elif isinstance(effect, Refetch):
                logger.info(f"[RECONCILE] Refetching for {self.user_id}: {effect.reason}")
                await self.refresh()

    async def _persist_record(self, effect: CreateRecord) -> None:
        record = effect.record
        try:
            row = await self._call(
                self.store.create_record,
                self.user_id,
                record.habit_id,
                record.outcome,
                record.created_at,
                record.target_slot,
            )
            stored = HabitRecord.model_validate(row)
        except (DatabaseError, ValueError) as e:
            logger.error(f"[RECONCILE] Rolling back record {effect.provisional_id}: {e}")
            follow_up = self.dispatch(transitions.fail_record(self.state, effect.provisional_id, RECORD_FAILED_MESSAGE))
        else:
            follow_up = self.dispatch(transitions.confirm_record(self.state, effect.provisional_id, stored))
            self._supersede_fetches()
            logger.info(f"[RECONCILE] Confirmed {effect.provisional_id} as record {stored.id}")
        await self.run_effects(follow_up)

    async def _persist_undo(self, effect: DeleteRecord) -> None:
        try:
            await self._call(self.store.delete_record, effect.record_id)
        except DatabaseError as e:
            logger.error(f"[RECONCILE] Undo of record {effect.record_id} failed: {e}")
            await self.run_effects(self.dispatch(
                transitions.fail_undo(self.state, effect.record_id, UNDO_FAILED_MESSAGE)
            ))
        else:
            self.dispatch(transitions.confirm_undo(self.state, effect.record_id))
            self._supersede_fetches()

    async def record_and_persist(self, habit_id: int, outcome: bool, target_slot: Optional[str] = None) -> str:
        provisional_id, effects = self.record(habit_id, outcome, target_slot)
        await self.run_effects(effects)
        return provisional_id

    async def undo_and_persist(self, record_id: Union[int, str]) -> None:
        await self.run_effects(self.undo(record_id))

    # ------------------------------------------------------------------
    # Habits
    # ------------------------------------------------------------------

    def _require_habit(self, habit_id: int) -> Habit:
        habit = self.state.find_habit(habit_id)
        if habit is None:
            raise HabitNotFoundError(f"Habit {habit_id} not found")
        return habit

    async def _mutation_failed(self, message: str) -> None:
        self.state = transitions.add_notice(self.state, message)
        await self.refresh()

    async def add_habit(self, request: HabitCreateRequest) -> Optional[Habit]:
        """
        Create a habit and reload

        Raises:
            DatabaseError: If the insert fails
        """
        self.touch()
        try:
            row = await self._call(self.store.create_habit, self.user_id, request.to_row())
        except DatabaseError:
            await self._mutation_failed(ADD_FAILED_MESSAGE)
            raise

        logger.info(f"[RECONCILE] Added habit '{request.name}' for {self.user_id}")
        await self.refresh()
        return self.state.find_habit(row.get("id")) if row else None

    async def update_habit(self, habit_id: int, request: HabitUpdateRequest) -> Optional[Habit]:
        """
        Update a habit. If its weekdays or slots changed, today's records for
        it are deleted first since they answered the old schedule.

        Raises:
            HabitNotFoundError: If the habit is not loaded
            DatabaseError: If clearing records or the update fails
        """
        self.touch()
        habit = self._require_habit(habit_id)

        try:
            if schedule_changed(habit.days, habit.slots, request.days, request.slots):
                since = get_day_start(self.clock())
                logger.info(f"[RECONCILE] Schedule changed for habit {habit_id}, clearing today's records")
                await self._call(self.store.delete_records_for_habit_since, habit_id, since)
            await self._call(self.store.update_habit, habit_id, request.to_row())
        except DatabaseError:
            await self._mutation_failed(UPDATE_FAILED_MESSAGE)
            raise

        await self.refresh()
        if self.state.editing_habit is not None and self.state.editing_habit.id == habit_id:
            self.dispatch(transitions.stop_editing(self.state))
        return self.state.find_habit(habit_id)

    async def delete_habit(self, habit_id: int) -> None:
        """
        Delete a habit and reload

        Raises:
            HabitNotFoundError: If the habit is not loaded
            DatabaseError: If the delete fails
        """
        self.touch()
        self._require_habit(habit_id)
        try:
            await self._call(self.store.delete_habit, habit_id)
        except DatabaseError:
            await self._mutation_failed(DELETE_FAILED_MESSAGE)
            raise

        logger.info(f"[RECONCILE] Deleted habit {habit_id} for {self.user_id}")
        await self.refresh()

    async def history(self, habit_id: int, limit: int = HISTORY_DEFAULT_LIMIT) -> List[HabitRecord]:
        """
        Most recent records for one habit, newest first

        Raises:
            HabitNotFoundError: If the habit is not loaded
            DatabaseError: If the query fails
        """
        self.touch()
        self._require_habit(habit_id)
        rows = await self._call(self.store.get_recent_records, habit_id, limit)
        return [HabitRecord.model_validate(row) for row in rows]

    # ------------------------------------------------------------------
    # Selection, notices and evaluation
    # ------------------------------------------------------------------

    def select(self, habit_id: int) -> Habit:
        self.dispatch(transitions.select_habit(self.state, habit_id))
        return self.state.selected_habit

    def clear_selection(self) -> None:
        self.dispatch(transitions.clear_selection(self.state))

    def start_editing(self, habit_id: int) -> Habit:
        self.dispatch(transitions.start_editing(self.state, habit_id))
        return self.state.editing_habit

    def dismiss_notices(self, notice_id: Optional[str] = None) -> None:
        self.dispatch(transitions.dismiss_notices(self.state, notice_id))

    def statuses(self, now: Optional[datetime] = None) -> List[Tuple[Habit, HabitStatus]]:
        now = now or self.clock()
        return [(habit, evaluate(habit, now)) for habit in self.state.habits]

    def tick(self, now: Optional[datetime] = None) -> List[Tuple[Habit, HabitStatus]]:
        """
        Re-evaluate every habit

        Returns:
            Habits that just opened a new slot for input
        """
        became_actionable = []
        current: Dict[int, Tuple[DisplayState, Optional[str]]] = {}
        for habit, status in self.statuses(now):
            key = (status.state, status.actionable_slot)
            previous = self._last_statuses.get(habit.id)
            if status.state == DisplayState.AWAITING_INPUT and status.actionable_slot and previous != key:
                became_actionable.append((habit, status))
            current[habit.id] = key
        # Deleted habits drop out
        self._last_statuses = current
        return became_actionable
