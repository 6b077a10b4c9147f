from datetime import datetime

import routers.jobs as jobs_router
from models.medication_reminder import MedicationReminder
from services.reminder_lifecycle import reminder_lifecycle

from conftest import OTHER_USER_ID, make_token


def test_health(client):
    assert client.get("/").json()["status"] == "ok"


def test_anonymous_requests_return_empty_results(client, make_schedule, make_reminder):
    make_schedule()
    make_reminder(datetime(2026, 3, 10, 8, 0))

    assert client.get("/reminders/today").json() == []
    generated = client.post("/reminders/generate").json()
    assert generated["created"] == 0 and generated["reminders"] == []
    assert client.get("/medication-schedules/").json() == []


def test_invalid_token_is_treated_as_anonymous(client, make_reminder):
    make_reminder(datetime(2026, 3, 10, 8, 0))
    resp = client.get("/reminders/today", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 200
    assert resp.json() == []


def test_save_generate_and_take(client, auth_headers, prescription):
    resp = client.post(
        "/medication-schedules/",
        json={
            "prescription_id": prescription.id,
            "medicine_name": "Paracetamol 500mg",
            "frequency": "three_times_daily",
            "start_time": "08:00",
        },
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["times_per_day"] == 3

    today = client.post("/reminders/generate", headers=auth_headers).json()["reminders"]
    assert [r["scheduled_time"] for r in today] == ["2026-03-10T08:00:00", "2026-03-10T16:00:00"]
    assert today[0]["prescription_name"] == "Winter Flu Rx"
    assert today[0]["status"] == "upcoming"
    assert today[0]["status_text"] == "Upcoming"
    assert today[0]["is_taken"] is False

    taken = client.post(f"/reminders/{today[0]['id']}/taken", headers=auth_headers)
    assert taken.status_code == 200
    body = taken.json()
    assert body["message"] == "Medication marked as taken!"
    assert [r["id"] for r in body["reminders"]] == [today[1]["id"]]

    assert [r["id"] for r in client.get("/reminders/today", headers=auth_headers).json()] == [today[1]["id"]]


def test_mark_missed(client, auth_headers, make_reminder):
    reminder = make_reminder(datetime(2026, 3, 10, 8, 0))
    resp = client.post(f"/reminders/{reminder.id}/missed", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Medication marked as missed", "reminders": []}


def test_action_errors(client, auth_headers, make_reminder):
    reminder = make_reminder(datetime(2026, 3, 10, 8, 0))
    foreign = make_reminder(datetime(2026, 3, 10, 8, 0), user_id=OTHER_USER_ID)

    assert client.post(f"/reminders/{reminder.id}/taken").status_code == 401
    assert client.post("/reminders/4242/taken", headers=auth_headers).status_code == 404
    assert client.post(f"/reminders/{foreign.id}/missed", headers=auth_headers).status_code == 404

    with reminder_lifecycle._guard(reminder.id):
        assert client.post(f"/reminders/{reminder.id}/taken", headers=auth_headers).status_code == 409
    assert client.post(f"/reminders/{reminder.id}/taken", headers=auth_headers).status_code == 200


def test_store_failure_maps_to_503(client, auth_headers, make_reminder, monkeypatch):
    from sqlalchemy.exc import OperationalError
    from sqlalchemy.orm import Session

    reminder = make_reminder(datetime(2026, 3, 10, 8, 0))

    def failing_commit(self):
        raise OperationalError("DELETE", {}, Exception("connection reset"))

    monkeypatch.setattr(Session, "commit", failing_commit)
    resp = client.post(f"/reminders/{reminder.id}/taken", headers=auth_headers)
    assert resp.status_code == 503
    assert resp.json()["detail"] == "Failed to mark medication as taken"


def test_lookup_failure_maps_to_503(client, auth_headers, make_reminder, monkeypatch):
    from sqlalchemy.exc import OperationalError
    from sqlalchemy.orm import Session

    reminder = make_reminder(datetime(2026, 3, 10, 8, 0))

    def failing_query(self, *entities, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection reset"))

    monkeypatch.setattr(Session, "query", failing_query)
    resp = client.post(f"/reminders/{reminder.id}/missed", headers=auth_headers)
    assert resp.status_code == 503
    assert resp.json()["detail"] == "Failed to update reminder"
    resp = client.post("/reminders/generate", headers=auth_headers)
    assert resp.status_code == 503
    assert resp.json()["detail"] == "Failed to load medication schedules"


def test_listing_does_not_recreate_taken_doses(client, auth_headers, make_schedule):
    make_schedule()
    today = client.post("/reminders/generate", headers=auth_headers).json()["reminders"]
    assert client.post(f"/reminders/{today[0]['id']}/taken", headers=auth_headers).status_code == 200

    listed = client.get("/reminders/today?generate=true", headers=auth_headers).json()
    assert [r["id"] for r in listed] == [today[1]["id"]]


def test_deactivate_requires_a_user(client, make_schedule):
    schedule = make_schedule()
    resp = client.post(f"/medication-schedules/{schedule.id}/deactivate")
    assert resp.status_code == 401


def test_intake_plan_and_deactivate(client, auth_headers, prescription, db):
    resp = client.put(
        f"/medication-schedules/prescriptions/{prescription.id}",
        json={
            "schedules": [
                {"medicine_name": "Ibuprofen 400mg", "frequency": "every_6_hours", "start_time": "06:00"},
                {"medicine_name": "Vitamin D3 1000 IU", "is_active": False},
            ]
        },
        headers=auth_headers,
    )
    assert resp.status_code == 200
    saved = resp.json()
    assert [(s["medicine_name"], s["times_per_day"], s["interval_hours"]) for s in saved] == [
        ("Ibuprofen 400mg", 4, 6)
    ]

    resp = client.post(f"/medication-schedules/{saved[0]['id']}/deactivate", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False
    assert client.post("/reminders/generate", headers=auth_headers).json()["schedules"] == 0
    assert db.query(MedicationReminder).count() == 0


def test_schedule_validation_errors(client, auth_headers, prescription):
    resp = client.post(
        "/medication-schedules/",
        json={"prescription_id": prescription.id, "medicine_name": "X", "frequency": "custom"},
        headers=auth_headers,
    )
    assert resp.status_code == 422
    resp = client.post(
        "/medication-schedules/",
        json={"prescription_id": 999, "medicine_name": "X"},
        headers=auth_headers,
    )
    assert resp.status_code == 404


def test_preview_and_frequencies(client):
    resp = client.post(
        "/medication-schedules/preview",
        json={"medicine_name": "X", "frequency": "three_times_daily", "start_time": "08:00"},
    )
    assert resp.json()["intake_times"] == [
        "2026-03-10T08:00:00",
        "2026-03-10T16:00:00",
        "2026-03-11T00:00:00",
    ]
    freqs = {f["value"]: f for f in client.get("/medication-schedules/frequencies").json()}
    assert len(freqs) == 7
    assert freqs["every_8_hours"]["times_per_day"] == 3
    assert freqs["custom"]["label"] == "Custom"
    assert freqs["custom"]["interval_hours"] is None


def test_generation_job(client, make_schedule, monkeypatch):
    make_schedule(user_id=OTHER_USER_ID)

    monkeypatch.setattr(jobs_router, "JOB_RUN_KEY", "")
    assert client.get("/jobs/run-reminder-generation").status_code == 503

    monkeypatch.setattr(jobs_router, "JOB_RUN_KEY", "cron-secret")
    assert client.get("/jobs/run-reminder-generation?key=nope").status_code == 401
    resp = client.get("/jobs/run-reminder-generation?key=cron-secret")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True
    assert resp.json()["schedules"] == 1


def test_token_for_other_user_sees_only_their_list(client, make_reminder):
    make_reminder(datetime(2026, 3, 10, 8, 0))
    mine = make_reminder(datetime(2026, 3, 10, 9, 0), user_id=OTHER_USER_ID)
    headers = {"Authorization": f"Bearer {make_token(OTHER_USER_ID)}"}
    assert [r["id"] for r in client.get("/reminders/today", headers=headers).json()] == [mine.id]
