"""
Tests for the scheduler jobs
"""
import asyncio
from datetime import timedelta

from habit_helper.services.scheduler import jobs
from habit_helper.utils import session_store
from conftest import USER_ID, local_dt


def test_refresh_statuses_reminds_once_per_opened_slot(monkeypatch, session, store, clock):
    store.add_habit_row(name="Walk", slots=["09:00"])
    session_store.sessions[USER_ID] = session
    asyncio.run(session.refresh())

    sent = []
    monkeypatch.setattr(jobs.notification_service, "send_callback",
                        lambda user_id, payload: sent.append((user_id, payload["body"])) or True)

    monkeypatch.setattr(jobs, "get_local_now", lambda: local_dt(7, 0))
    assert asyncio.run(jobs.refresh_statuses()) == 0

    monkeypatch.setattr(jobs, "get_local_now", lambda: local_dt(8, 10))
    assert asyncio.run(jobs.refresh_statuses()) == 1
    assert asyncio.run(jobs.refresh_statuses()) == 0

    assert sent[0][0] == USER_ID
    assert "Walk" in sent[0][1]


def test_rollover_refetches_every_session(session, store, clock):
    store.add_habit_row()
    store.add_record_row(1, True, local_dt(23, 0, day_offset=-1))
    session_store.sessions[USER_ID] = session
    clock.now = local_dt(23, 30, day_offset=-1)
    asyncio.run(session.refresh())
    assert len(session.state.find_habit(1).today_records) == 1

    clock.now = local_dt(0, 0)
    asyncio.run(jobs.rollover_day())

    assert session.state.find_habit(1).today_records == []


def test_cleanup_drops_idle_sessions(monkeypatch, session):
    session_store.sessions[USER_ID] = session
    session.last_active = local_dt(8, 0)

    monkeypatch.setattr(session_store, "get_local_now", lambda: local_dt(8, 30))
    assert asyncio.run(jobs.cleanup_sessions()) == 0

    monkeypatch.setattr(session_store, "get_local_now", lambda: local_dt(8, 0) + timedelta(hours=2))
    assert asyncio.run(jobs.cleanup_sessions()) == 1
    assert session_store.get_session(USER_ID) is None
