import os
import tempfile
from datetime import datetime, time

_tmp_dir = tempfile.mkdtemp(prefix="rxremind-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'rxremind.db')}"
os.environ["LOG_DIR"] = os.path.join(_tmp_dir, "logs")
os.environ["SECRET_KEY"] = "rxremind-test-secret"
os.environ["REMINDER_TIMEZONE"] = "Asia/Kolkata"

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from jose import jwt

from config import ALGORITHM, SECRET_KEY
from database import Base, SessionLocal, engine
from dependencies import get_current_user_id, get_reminder_session
from models.medication_reminder import MedicationReminder
from models.medication_schedule import Frequency, MedicationSchedule
from models.prescription import Prescription
from services.session import ReminderSession

USER_ID = 1
OTHER_USER_ID = 2
NOW = datetime(2026, 3, 10, 7, 0)


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def session(now):
    return ReminderSession(user_id=USER_ID, now=now)


@pytest.fixture
def anonymous(now):
    return ReminderSession(user_id=None, now=now)


@pytest.fixture
def prescription(db):
    row = Prescription(user_id=USER_ID, prescription_name="Winter Flu Rx")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def make_schedule(db, prescription):
    def _make(
        medicine_name="Paracetamol 500mg",
        frequency=Frequency.three_times_daily,
        start_time=time(8, 0),
        times_per_day=3,
        interval_hours=8,
        is_active=True,
        user_id=USER_ID,
        prescription_id=None,
    ):
        row = MedicationSchedule(
            user_id=user_id,
            prescription_id=prescription_id or prescription.id,
            medicine_name=medicine_name,
            frequency=frequency,
            start_time=start_time,
            times_per_day=times_per_day,
            interval_hours=interval_hours,
            is_active=is_active,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make


@pytest.fixture
def make_reminder(db, prescription):
    def _make(
        scheduled_time,
        medicine_name="Paracetamol 500mg",
        user_id=USER_ID,
        prescription_id=None,
        frequency=Frequency.three_times_daily,
    ):
        row = MedicationReminder(
            user_id=user_id,
            prescription_id=prescription_id or prescription.id,
            medicine_name=medicine_name,
            scheduled_time=scheduled_time,
            is_taken=False,
            frequency=frequency,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make


def make_token(user_id: int) -> str:
    return jwt.encode({"sub": str(user_id)}, SECRET_KEY, algorithm=ALGORITHM)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token(USER_ID)}"}


@pytest.fixture
def client(db, now):
    from main import app

    def _fixed_session(user_id: int | None = Depends(get_current_user_id)):
        return ReminderSession(user_id=user_id, now=now)

    app.dependency_overrides[get_reminder_session] = _fixed_session
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
