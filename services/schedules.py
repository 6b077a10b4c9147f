import logging
from datetime import date, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from database import dialect_insert
from models.medication_schedule import MedicationSchedule
from models.prescription import Prescription
from schemas.schedule import IntakeScheduleIn, MedicationScheduleIn
from services.errors import NotAuthenticated, PersistenceFailure, PrescriptionNotFound, ScheduleNotFound
from services.recurrence import calculate_intake_times, resolve_plan
from services.session import ReminderSession

logger = logging.getLogger("rxremind.schedules")

SAVE_FAILED_MESSAGE = "Failed to save intake schedules"
SCHEDULE_KEY = ("user_id", "prescription_id", "medicine_name")


def _ensure_prescription(db: Session, session: ReminderSession, prescription_id: int) -> Prescription:
    prescription = (
        db.query(Prescription)
        .filter(Prescription.id == prescription_id, Prescription.user_id == session.user_id)
        .first()
    )
    if not prescription:
        raise PrescriptionNotFound(prescription_id)
    return prescription


def _upsert(db: Session, session: ReminderSession, data: MedicationScheduleIn) -> None:
    plan = resolve_plan(data.frequency, data.times_per_day, data.interval_hours)
    insert = dialect_insert(db)
    stmt = insert(MedicationSchedule).values(
        user_id=session.user_id,
        prescription_id=data.prescription_id,
        medicine_name=data.medicine_name,
        frequency=data.frequency,
        start_time=data.start_time,
        times_per_day=plan.times_per_day,
        interval_hours=plan.interval_hours,
        is_active=data.is_active,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=list(SCHEDULE_KEY),
        set_={
            "frequency": stmt.excluded.frequency,
            "start_time": stmt.excluded.start_time,
            "times_per_day": stmt.excluded.times_per_day,
            "interval_hours": stmt.excluded.interval_hours,
            "is_active": stmt.excluded.is_active,
            "updated_at": func.now(),
        },
    )
    db.execute(stmt)


def _get_by_key(db: Session, session: ReminderSession, prescription_id: int, medicine_name: str) -> MedicationSchedule:
    return (
        db.query(MedicationSchedule)
        .filter(
            MedicationSchedule.user_id == session.user_id,
            MedicationSchedule.prescription_id == prescription_id,
            MedicationSchedule.medicine_name == medicine_name,
        )
        .first()
    )


def save_schedule(db: Session, session: ReminderSession, data: MedicationScheduleIn) -> MedicationSchedule | None:
    """Create or overwrite the schedule for (user, prescription, medicine). No-op without a user."""
    if not session.is_authenticated:
        return None
    _ensure_prescription(db, session, data.prescription_id)
    try:
        _upsert(db, session, data)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Error saving schedule for %s", data.medicine_name)
        raise PersistenceFailure(SAVE_FAILED_MESSAGE, exc) from exc
    return _get_by_key(db, session, data.prescription_id, data.medicine_name)


def save_intake_plan(
    db: Session,
    session: ReminderSession,
    prescription_id: int,
    items: list[IntakeScheduleIn],
) -> list[MedicationSchedule]:
    """
    Save every active item of an intake plan for one prescription.
    Inactive items are skipped. Stops at the first store error; items saved
    before it stay saved.
    """
    if not session.is_authenticated:
        return []
    _ensure_prescription(db, session, prescription_id)
    saved = []
    for item in items:
        if not item.is_active:
            continue
        data = MedicationScheduleIn(prescription_id=prescription_id, **item.model_dump())
        saved.append(save_schedule(db, session, data))
    return saved


def list_schedules(db: Session, session: ReminderSession) -> list[MedicationSchedule]:
    if not session.is_authenticated:
        return []
    return (
        db.query(MedicationSchedule)
        .filter(MedicationSchedule.user_id == session.user_id)
        .order_by(MedicationSchedule.prescription_id.asc(), MedicationSchedule.medicine_name.asc())
        .all()
    )


def deactivate_schedule(db: Session, session: ReminderSession, schedule_id: int) -> MedicationSchedule:
    if not session.is_authenticated:
        raise NotAuthenticated("Sign in to update schedules")
    row = (
        db.query(MedicationSchedule)
        .filter(
            MedicationSchedule.id == schedule_id,
            MedicationSchedule.user_id == session.user_id,
        )
        .first()
    )
    if not row:
        raise ScheduleNotFound(schedule_id)
    row.is_active = False
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Error deactivating schedule %s", schedule_id)
        raise PersistenceFailure("Failed to deactivate schedule", exc) from exc
    db.refresh(row)
    return row


def preview_intake_times(data: IntakeScheduleIn, day: date) -> list[datetime]:
    if not data.is_active:
        return []
    plan = resolve_plan(data.frequency, data.times_per_day, data.interval_hours)
    return calculate_intake_times(day, data.start_time, plan.times_per_day, plan.interval_hours)
