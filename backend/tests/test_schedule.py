"""
Tests for schedule evaluation and slot matching
"""
from datetime import datetime

import pytest
import pytz

from habit_helper.models.habit import Weekday
from habit_helper.models.status import DisplayState, SlotState
from habit_helper.services.habits.schedule import (
    evaluate,
    format_remaining,
    match_records_to_slots,
    schedule_changed,
)
from conftest import local_dt, make_habit, make_record


class TestGates:

    def test_inactive_habit_is_disabled(self):
        habit = make_habit(slots=["09:00"], active=False)
        assert evaluate(habit, local_dt(8, 30)).state == DisplayState.DISABLED

    def test_unscheduled_weekday_is_resting_regardless_of_records(self):
        habit = make_habit(slots=["09:00"], days=[Weekday.TUE], records=[make_record(1, 8, 50)])
        status = evaluate(habit, local_dt(8, 30))
        assert status.state == DisplayState.RESTING
        assert status.actionable_slot is None

    def test_weekday_uses_local_calendar(self):
        # Monday 20:00 UTC is already Tuesday 05:00 in Seoul
        now = pytz.utc.localize(datetime(2026, 10, 19, 20, 0))
        habit = make_habit(days=[Weekday.TUE])
        assert evaluate(habit, now).state != DisplayState.RESTING

    def test_no_slots_without_record_awaits_input(self):
        assert evaluate(make_habit(), local_dt(14, 0)).state == DisplayState.AWAITING_INPUT

    def test_no_slots_with_any_record_is_completed(self):
        habit = make_habit(records=[make_record(1, 7, 0, outcome=False)])
        assert evaluate(habit, local_dt(14, 0)).state == DisplayState.COMPLETED


class TestSlotWindows:

    def test_half_hour_before_slot_awaits_input(self):
        status = evaluate(make_habit(slots=["09:00", "21:00"]), local_dt(8, 30))
        assert status.state == DisplayState.AWAITING_INPUT
        assert status.actionable_slot == "09:00"

    def test_three_hours_before_slot_counts_down(self):
        status = evaluate(make_habit(slots=["09:00", "21:00"]), local_dt(6, 0))
        assert status.state == DisplayState.COUNTDOWN
        assert status.actionable_slot == "09:00"
        assert status.minutes_remaining == 180
        assert status.message == "09:00 in 3h"

    def test_evening_after_morning_record_counts_down_to_next_slot(self):
        habit = make_habit(slots=["09:00", "21:00"], records=[make_record(1, 9, 5)])
        status = evaluate(habit, local_dt(20, 0))
        assert status.state == DisplayState.COUNTDOWN
        assert status.actionable_slot == "21:00"

    def test_slot_still_open_just_after_its_time(self):
        status = evaluate(make_habit(slots=["09:00"]), local_dt(9, 45))
        assert status.state == DisplayState.AWAITING_INPUT
        assert status.actionable_slot == "09:00"

    def test_expired_slot_is_skipped_for_the_next_one(self):
        status = evaluate(make_habit(slots=["09:00", "12:00"]), local_dt(10, 30))
        assert status.state == DisplayState.COUNTDOWN
        assert status.actionable_slot == "12:00"
        assert [s.state for s in status.slots] == [SlotState.MISSED, SlotState.PENDING]

    def test_all_matched_is_completed(self):
        habit = make_habit(slots=["09:00", "21:00"], records=[make_record(1, 9, 0), make_record(2, 21, 10)])
        assert evaluate(habit, local_dt(21, 30)).state == DisplayState.COMPLETED

    def test_missed_slots_end_the_day(self):
        habit = make_habit(slots=["09:00", "12:00"], records=[make_record(1, 9, 0)])
        status = evaluate(habit, local_dt(14, 0))
        assert status.state == DisplayState.DAY_ENDED
        assert status.message == "1 of 2 missed"

    def test_failure_record_still_fills_its_slot(self):
        habit = make_habit(slots=["09:00"], records=[make_record(1, 9, 0, outcome=False)])
        status = evaluate(habit, local_dt(9, 10))
        assert status.state == DisplayState.COMPLETED
        assert status.slots[0].outcome is False

    def test_undoing_the_only_record_reopens_the_slot(self):
        record = make_record(1, 8, 50)
        habit = make_habit(slots=["09:00"], records=[record])
        assert evaluate(habit, local_dt(8, 55)).state == DisplayState.COMPLETED

        habit = habit.model_copy(update={"today_records": []})
        assert evaluate(habit, local_dt(8, 55)).state == DisplayState.AWAITING_INPUT

    def test_evaluation_is_idempotent(self):
        habit = make_habit(slots=["09:00", "21:00"], records=[make_record(1, 9, 5)])
        now = local_dt(20, 0)
        assert evaluate(habit, now) == evaluate(habit, now)


class TestMatching:

    def test_slot_label_beats_timestamp(self):
        # Logged at 11:30, closer to 12:00, but labelled for 09:00
        record = make_record(1, 11, 30, slot="09:00")
        matches = match_records_to_slots(["09:00", "12:00"], [record])
        assert matches == {"09:00": record}

    def test_nearest_slot_wins(self):
        record = make_record(1, 9, 5)
        assert match_records_to_slots(["08:00", "09:00"], [record]) == {"09:00": record}

    def test_tie_goes_to_earlier_slot(self):
        record = make_record(1, 9, 0)
        assert match_records_to_slots(["08:00", "10:00"], [record]) == {"08:00": record}

    def test_record_outside_tolerance_is_unmatched(self):
        assert match_records_to_slots(["09:00"], [make_record(1, 12, 0)]) == {}

    def test_earlier_record_claims_first(self):
        first = make_record(1, 8, 50, slot="09:00")
        second = make_record(2, 9, 10, slot="09:00")
        matches = match_records_to_slots(["09:00", "10:30"], [second, first])
        assert matches == {"09:00": first, "10:30": second}

    def test_second_record_for_same_slot_without_room_is_unmatched(self):
        first = make_record(1, 8, 50, slot="09:00")
        second = make_record(2, 9, 10, slot="09:00")
        assert match_records_to_slots(["09:00", "21:00"], [first, second]) == {"09:00": first}


class TestHelpers:

    @pytest.mark.parametrize("minutes, expected", [
        (180, "3h"),
        (65, "1h 5m"),
        (45, "45m"),
        (0, "0m"),
    ])
    def test_format_remaining(self, minutes, expected):
        assert format_remaining(minutes) == expected

    def test_schedule_changed_ignores_order_and_padding(self):
        assert not schedule_changed([0, 2], ["21:00", "9:00"], [2, 0], ["09:00", "21:00"])

    def test_schedule_changed_detects_new_slot(self):
        assert schedule_changed([0], ["09:00"], [0], ["09:00", "12:00"])

    def test_schedule_changed_detects_new_day(self):
        assert schedule_changed([0], ["09:00"], [0, 1], ["09:00"])
