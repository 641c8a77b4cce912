"""
Schedule evaluation - derives a habit's display state from its schedule
and the records logged today
"""
from datetime import datetime
from typing import Dict, Iterable, List, Sequence

from habit_helper.core.constants import ACTION_WINDOW_MINUTES, SLOT_MATCH_TOLERANCE_MINUTES
from habit_helper.models.habit import Habit, HabitRecord, Weekday, normalize_slot
from habit_helper.models.status import DisplayState, HabitStatus, SlotState, SlotStatus
from habit_helper.utils.timezone import to_local


def slot_to_minutes(slot: str) -> int:
    """Convert an HH:MM slot to minutes since local midnight"""
    hours, minutes = normalize_slot(slot).split(":")
    return int(hours) * 60 + int(minutes)


def minute_of_day(value: datetime) -> int:
    """Minutes since local midnight for a timestamp"""
    local = to_local(value)
    return local.hour * 60 + local.minute


def record_reference_minutes(record: HabitRecord) -> int:
    """
    The time a record answers: its explicit slot label if it has one,
    otherwise the local time it was logged
    """
    if record.target_slot:
        return slot_to_minutes(record.target_slot)
    return minute_of_day(record.created_at)


def sort_slots(slots: Iterable[str]) -> List[str]:
    return sorted(slots, key=slot_to_minutes)


def match_records_to_slots(slots: Sequence[str], records: Iterable[HabitRecord]) -> Dict[str, HabitRecord]:
    """
    Assign records to slots in one greedy pass.

    Records are taken in creation order. Each claims the nearest unclaimed slot
    within SLOT_MATCH_TOLERANCE_MINUTES of its reference time, ties going to the
    earlier slot. Records with nothing in range stay unmatched.

    Args:
        slots: Configured HH:MM slots
        records: Today's records for the habit

    Returns:
        Dict mapping slot -> matched record
    """
    ordered_slots = sort_slots(slots)
    ordered_records = sorted(records, key=lambda r: to_local(r.created_at))
    claimed: Dict[str, HabitRecord] = {}

    for record in ordered_records:
        reference = record_reference_minutes(record)
        best_slot = None
        best_distance = None
        for slot in ordered_slots:
            if slot in claimed:
                continue
            distance = abs(slot_to_minutes(slot) - reference)
            if distance > SLOT_MATCH_TOLERANCE_MINUTES:
                continue
            if best_distance is None or distance < best_distance:
                best_slot, best_distance = slot, distance
        if best_slot is not None:
            claimed[best_slot] = record

    return claimed


def format_remaining(minutes: int) -> str:
    """Format a duration as e.g. '3h', '1h 5m' or '45m'"""
    hours, mins = divmod(max(minutes, 0), 60)
    if hours and mins:
        return f"{hours}h {mins}m"
    if hours:
        return f"{hours}h"
    return f"{mins}m"


def is_scheduled_today(habit: Habit, now: datetime) -> bool:
    """Whether the local weekday of `now` is one of the habit's days"""
    return Weekday(to_local(now).weekday()) in habit.days


def schedule_changed(old_days: Iterable[int], old_slots: Iterable[str],
                     new_days: Iterable[int], new_slots: Iterable[str]) -> bool:
    """Compare two schedules by their normalized, sorted representations"""
    if sorted(int(d) for d in old_days) != sorted(int(d) for d in new_days):
        return True
    return sorted(normalize_slot(s) for s in old_slots) != sorted(normalize_slot(s) for s in new_slots)


def evaluate(habit: Habit, now: datetime) -> HabitStatus:
    """
    Compute the display state of a habit at `now`.

    Pure: the same habit and instant always give the same result.

    Args:
        habit: Habit with today_records attached
        now: Current instant (converted to local time)

    Returns:
        HabitStatus with state, actionable slot and per-slot detail
    """
    if not habit.active:
        return HabitStatus(state=DisplayState.DISABLED, message="Inactive")

    if not is_scheduled_today(habit, now):
        return HabitStatus(state=DisplayState.RESTING, message="Rest day")

    # Any time today
    if not habit.slots:
        if habit.today_records:
            return HabitStatus(state=DisplayState.COMPLETED, message="Done for today")
        return HabitStatus(state=DisplayState.AWAITING_INPUT, message="Any time today")

    ordered = sort_slots(habit.slots)
    matches = match_records_to_slots(ordered, habit.today_records)
    now_minutes = minute_of_day(now)

    slot_statuses: List[SlotStatus] = []
    actionable = None
    for slot in ordered:
        record = matches.get(slot)
        if record is not None:
            slot_statuses.append(SlotStatus(
                slot=slot, state=SlotState.MATCHED, record_id=record.id, outcome=record.outcome
            ))
            continue

        delta = slot_to_minutes(slot) - now_minutes
        if delta < -ACTION_WINDOW_MINUTES:
            slot_statuses.append(SlotStatus(slot=slot, state=SlotState.MISSED))
            continue

        slot_statuses.append(SlotStatus(slot=slot, state=SlotState.PENDING))
        if actionable is None:
            actionable = (slot, delta)

    if actionable is not None:
        slot, delta = actionable
        # A full window or more away counts down; inside it input is open
        if delta >= ACTION_WINDOW_MINUTES:
            return HabitStatus(
                state=DisplayState.COUNTDOWN,
                actionable_slot=slot,
                minutes_remaining=delta,
                message=f"{slot} in {format_remaining(delta)}",
                slots=slot_statuses,
            )
        return HabitStatus(
            state=DisplayState.AWAITING_INPUT,
            actionable_slot=slot,
            message=f"Time to log {slot}",
            slots=slot_statuses,
        )

    if len(matches) == len(ordered):
        return HabitStatus(state=DisplayState.COMPLETED, message="All done for today", slots=slot_statuses)

    missed = len(ordered) - len(matches)
    return HabitStatus(
        state=DisplayState.DAY_ENDED,
        message=f"{missed} of {len(ordered)} missed",
        slots=slot_statuses,
    )
