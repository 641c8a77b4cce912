"""
Shared fixtures: an in-memory store with the repository's interface,
a controllable clock, and habit/record builders
"""
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Set

import pytest
import pytz

from habit_helper.core.config import settings
from habit_helper.core.exceptions import DatabaseError
from habit_helper.models.habit import Habit, HabitRecord, Weekday
from habit_helper.services.habits import HabitSession
from habit_helper.utils import session_store

USER_ID = "user-1"
SEOUL = pytz.timezone("Asia/Seoul")

# 2026-10-19 is a Monday
TODAY = (2026, 10, 19)


def local_dt(hour: int, minute: int = 0, day_offset: int = 0) -> datetime:
    return SEOUL.localize(datetime(*TODAY, hour, minute)) + timedelta(days=day_offset)


def make_record(record_id, hour: int, minute: int = 0, slot: Optional[str] = None,
                outcome: bool = True, habit_id: int = 1) -> HabitRecord:
    return HabitRecord(
        id=record_id,
        user_id=USER_ID,
        habit_id=habit_id,
        outcome=outcome,
        created_at=local_dt(hour, minute),
        target_slot=slot,
    )


def make_habit(slots: Iterable[str] = (), days: Iterable[Weekday] = tuple(Weekday),
               active: bool = True, records: Iterable[HabitRecord] = (), habit_id: int = 1,
               name: str = "Walk") -> Habit:
    return Habit(
        id=habit_id,
        user_id=USER_ID,
        name=name,
        days=list(days),
        slots=list(slots),
        active=active,
        today_records=list(records),
    )


class FakeClock:
    """Callable clock that tests can move"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeStore:
    """
    In-memory stand-in for the Supabase repository. Rows use the store's
    column names and are returned as plain dicts, like the real client.
    """

    def __init__(self):
        self.habits: List[Dict[str, Any]] = []
        self.records: List[Dict[str, Any]] = []
        self.push_subs: List[Dict[str, Any]] = []
        self.fail_on: Set[str] = set()
        self.calls: List[str] = []
        self._next_habit_id = 1
        self._next_record_id = 100

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise DatabaseError(f"{name} failed")

    # Seeding helpers

    def add_habit_row(self, name: str = "Walk", days: Iterable[int] = range(7), slots: Iterable[str] = (),
                      active: bool = True, user_id: str = USER_ID) -> Dict[str, Any]:
        row = {
            "id": self._next_habit_id,
            "user_id": user_id,
            "name": name,
            "description": None,
            "day": list(days),
            "time": list(slots),
            "activate": active,
            "created_at": local_dt(0).isoformat(),
        }
        self._next_habit_id += 1
        self.habits.append(row)
        return row

    def add_record_row(self, habit_id: int, outcome: bool, created_at: datetime,
                       target_slot: Optional[str] = None, user_id: str = USER_ID) -> Dict[str, Any]:
        row = {
            "id": self._next_record_id,
            "user_id": user_id,
            "habit_id": habit_id,
            "result": outcome,
            "created_at": created_at.isoformat(),
            "recordTime": target_slot,
        }
        self._next_record_id += 1
        self.records.append(row)
        return row

    # Repository interface

    def get_habits_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        self._check("get_habits_for_user")
        return [dict(h) for h in sorted(self.habits, key=lambda h: h["id"]) if h["user_id"] == user_id]

    def get_records_since(self, user_id: str, since: datetime) -> List[Dict[str, Any]]:
        self._check("get_records_since")
        return [
            dict(r) for r in self.records
            if r["user_id"] == user_id and datetime.fromisoformat(r["created_at"]) >= since
        ]

    def create_habit(self, user_id: str, habit_data: Dict[str, Any]) -> Dict[str, Any]:
        self._check("create_habit")
        row = self.add_habit_row(
            name=habit_data["name"],
            days=habit_data["day"],
            slots=habit_data["time"],
            active=habit_data["activate"],
            user_id=user_id,
        )
        row["description"] = habit_data.get("description")
        return dict(row)

    def update_habit(self, habit_id: int, habit_data: Dict[str, Any]) -> Dict[str, Any]:
        self._check("update_habit")
        for row in self.habits:
            if row["id"] == habit_id:
                row.update(habit_data)
                return dict(row)
        raise DatabaseError(f"Habit {habit_id} not found")

    def delete_habit(self, habit_id: int) -> bool:
        self._check("delete_habit")
        self.habits = [h for h in self.habits if h["id"] != habit_id]
        self.records = [r for r in self.records if r["habit_id"] != habit_id]
        return True

    def create_record(self, user_id: str, habit_id: int, outcome: bool, created_at: datetime,
                      target_slot: Optional[str] = None) -> Dict[str, Any]:
        self._check("create_record")
        return dict(self.add_record_row(habit_id, outcome, created_at, target_slot, user_id))

    def delete_record(self, record_id: int) -> bool:
        self._check("delete_record")
        self.records = [r for r in self.records if r["id"] != record_id]
        return True

    def delete_records_for_habit_since(self, habit_id: int, since: datetime) -> int:
        self._check("delete_records_for_habit_since")
        kept = [
            r for r in self.records
            if not (r["habit_id"] == habit_id and datetime.fromisoformat(r["created_at"]) >= since)
        ]
        removed = len(self.records) - len(kept)
        self.records = kept
        return removed

    def get_recent_records(self, habit_id: int, limit: int) -> List[Dict[str, Any]]:
        self._check("get_recent_records")
        rows = [dict(r) for r in self.records if r["habit_id"] == habit_id]
        rows.sort(key=lambda r: datetime.fromisoformat(r["created_at"]), reverse=True)
        return rows[:limit]

    def upsert_push_subscription(self, user_id: str, sub_data: Dict[str, Any]) -> Dict[str, Any]:
        self._check("upsert_push_subscription")
        self.push_subs = [s for s in self.push_subs if s["user_id"] != user_id]
        row = {"user_id": user_id, "sub_data": sub_data, "active": True}
        self.push_subs.append(row)
        return row

    def deactivate_push_subscriptions(self, user_id: str) -> bool:
        self._check("deactivate_push_subscriptions")
        for sub in self.push_subs:
            if sub["user_id"] == user_id:
                sub["active"] = False
        return True

    def get_active_push_subscription(self, user_id: str) -> Optional[Dict[str, Any]]:
        self._check("get_active_push_subscription")
        for sub in self.push_subs:
            if sub["user_id"] == user_id and sub["active"]:
                return sub
        return None


@pytest.fixture(autouse=True)
def seoul_timezone(monkeypatch):
    monkeypatch.setattr(settings, "APP_TIMEZONE", "Asia/Seoul")


@pytest.fixture(autouse=True)
def clean_sessions():
    session_store.sessions.clear()
    yield
    session_store.sessions.clear()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(local_dt(8, 30))


@pytest.fixture
def session(store, clock) -> HabitSession:
    return HabitSession(USER_ID, store=store, timeout=2, clock=clock)
