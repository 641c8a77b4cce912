"""
Tests for the HTTP routes
"""
import pytest
from fastapi.testclient import TestClient

from main import app
from habit_helper.utils import session_store
from conftest import USER_ID, local_dt

HEADERS = {"X-User-Id": USER_ID}


@pytest.fixture
def client(session):
    session_store.sessions[USER_ID] = session
    return TestClient(app)


def habit_from(body, habit_id=1):
    return next(h for h in body["habits"] if h["id"] == habit_id)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_missing_user_header_is_rejected(client):
    assert client.get("/habits").status_code == 401


def test_list_habits_includes_status(client, store):
    store.add_habit_row(slots=["09:00"])

    response = client.get("/habits", headers=HEADERS)

    assert response.status_code == 200
    habit = habit_from(response.json())
    assert habit["status"]["state"] == "awaiting_input"
    assert habit["status"]["actionable_slot"] == "09:00"
    assert habit["days_display"][0] == "Mon"


def test_load_failure_blocks_with_503(client, store):
    store.fail_on.add("get_habits_for_user")
    response = client.get("/habits", headers=HEADERS)
    assert response.status_code == 503
    assert response.json()["detail"] == "Could not load habits"


def test_add_habit(client):
    response = client.post("/habits", headers=HEADERS, json={
        "name": "Read", "days": [0, 2, 4], "slots": ["21:00"]
    })
    assert response.status_code == 200
    assert response.json()["habit"]["slots"] == ["21:00"]


def test_add_habit_rejects_bad_slot(client):
    response = client.post("/habits", headers=HEADERS, json={"name": "Read", "slots": ["25:00"]})
    assert response.status_code == 422


def test_record_then_confirmed_by_store(client, store):
    store.add_habit_row(slots=["09:00"])

    response = client.post("/habits/1/records", headers=HEADERS, json={"outcome": True, "target_slot": "09:00"})

    assert response.status_code == 200
    body = response.json()
    assert body["record_id"].startswith("tmp-")
    assert body["habit"]["status"]["state"] == "completed"

    # The insert ran as a background task after the response
    habit = habit_from(client.get("/habits", headers=HEADERS).json())
    assert [r["id"] for r in habit["today_records"]] == [100]


def test_failed_record_surfaces_notice(client, store):
    store.add_habit_row(slots=["09:00"])
    client.get("/habits", headers=HEADERS)
    store.fail_on.add("create_record")

    client.post("/habits/1/records", headers=HEADERS, json={"outcome": True})

    body = client.get("/habits", headers=HEADERS).json()
    assert habit_from(body)["today_records"] == []
    assert len(body["notices"]) == 1

    notice_id = body["notices"][0]["id"]
    body = client.delete("/habits/notices", headers=HEADERS, params={"notice_id": notice_id}).json()
    assert body["notices"] == []


def test_record_for_unknown_habit(client):
    response = client.post("/habits/42/records", headers=HEADERS, json={"outcome": True})
    assert response.status_code == 404


def test_record_rejected_on_rest_day(client, store):
    store.add_habit_row(days=[1, 2], slots=["09:00"])

    response = client.post("/habits/1/records", headers=HEADERS, json={"outcome": True, "target_slot": "09:00"})

    assert response.status_code == 400
    assert store.records == []


def test_record_rejected_for_unknown_slot(client, store):
    store.add_habit_row(slots=["09:00"])
    response = client.post("/habits/1/records", headers=HEADERS, json={"outcome": True, "target_slot": "15:00"})
    assert response.status_code == 400


def test_undo_record(client, store):
    store.add_habit_row(slots=["09:00"])
    store.add_record_row(1, True, local_dt(8, 20), "09:00")

    response = client.delete("/habits/records/100", headers=HEADERS)

    assert response.status_code == 200
    assert habit_from(response.json())["status"]["state"] == "awaiting_input"
    assert store.records == []


def test_undo_unknown_record(client, store):
    store.add_habit_row()
    assert client.delete("/habits/records/555", headers=HEADERS).status_code == 404


def test_selected_copy_follows_records(client, store):
    store.add_habit_row(slots=["09:00"])
    client.post("/habits/1/select", headers=HEADERS)

    client.post("/habits/1/records", headers=HEADERS, json={"outcome": True})

    selected = client.get("/habits/selected", headers=HEADERS).json()["habit"]
    assert selected["status"]["state"] == "completed"

    client.delete("/habits/selected", headers=HEADERS)
    assert client.get("/habits/selected", headers=HEADERS).json()["habit"] is None


def test_schedule_change_clears_todays_records(client, store):
    store.add_habit_row(slots=["09:00"])
    store.add_record_row(1, True, local_dt(8, 20))

    response = client.put("/habits/1", headers=HEADERS, json={
        "name": "Walk", "days": list(range(7)), "slots": ["09:00", "21:00"]
    })

    assert response.status_code == 200
    assert response.json()["habit"]["today_records"] == []
    assert store.records == []


def test_delete_habit(client, store):
    store.add_habit_row()
    assert client.delete("/habits/1", headers=HEADERS).status_code == 200
    assert client.get("/habits", headers=HEADERS).json()["habits"] == []


def test_history_labels(client, store):
    store.add_habit_row()
    store.add_record_row(1, True, local_dt(21, 5, day_offset=-3), "21:00")
    store.add_record_row(1, False, local_dt(7, 45, day_offset=-1))

    response = client.get("/habits/1/history", headers=HEADERS, params={"limit": 5})

    records = response.json()["records"]
    assert [(r["date_label"], r["time_label"]) for r in records] == [
        ("10/18 (Sun)", "07:45"),
        ("10/16 (Fri)", "21:00"),
    ]


def test_history_limit_is_bounded(client, store):
    store.add_habit_row()
    assert client.get("/habits/1/history", headers=HEADERS, params={"limit": 0}).status_code == 422
