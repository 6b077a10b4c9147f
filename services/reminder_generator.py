"""
Materializes today's reminders from active medication schedules.

Generation is idempotent: rows are inserted with ON CONFLICT DO NOTHING on
(user_id, prescription_id, medicine_name, scheduled_time), so running it
again only adds slots that are missing. Past slots of today are never
back-filled.

Failure policy is best-effort: each schedule is written in its own
transaction, a failing schedule is logged and reported, and the remaining
schedules are still generated.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from database import dialect_insert
from models.medication_reminder import MedicationReminder
from models.medication_schedule import MedicationSchedule
from services.errors import PersistenceFailure, is_duplicate_key_error
from services.recurrence import intake_times_for_schedule
from services.reminders import today_window
from services.session import ReminderSession

logger = logging.getLogger("rxremind.generator")

LOAD_FAILED_MESSAGE = "Failed to load medication schedules"

DEDUP_KEY = ("user_id", "prescription_id", "medicine_name", "scheduled_time")


@dataclass
class GenerationFailure:
    schedule_id: int
    medicine_name: str
    error: str


@dataclass
class GenerationReport:
    schedules: int = 0
    created: int = 0
    failures: list[GenerationFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def build_reminder_rows(schedule: MedicationSchedule, session: ReminderSession) -> list[dict]:
    start, end = today_window(session)
    rows = []
    for scheduled_time in intake_times_for_schedule(schedule, session.now.date()):
        if not (start <= scheduled_time < end) or scheduled_time <= session.now:
            continue
        rows.append(
            {
                "user_id": schedule.user_id,
                "prescription_id": schedule.prescription_id,
                "medicine_name": schedule.medicine_name,
                "scheduled_time": scheduled_time,
                "is_taken": False,
                "frequency": schedule.frequency,
            }
        )
    return rows


def _insert_ignoring_duplicates(db: Session, rows: list[dict]) -> int:
    insert = dialect_insert(db)
    stmt = insert(MedicationReminder).values(rows).on_conflict_do_nothing(index_elements=list(DEDUP_KEY))
    result = db.execute(stmt)
    return max(result.rowcount or 0, 0)


def ensure_today_generated(db: Session, session: ReminderSession) -> GenerationReport:
    report = GenerationReport()
    if not session.is_authenticated:
        return report

    try:
        schedules = (
            db.query(MedicationSchedule)
            .filter(
                MedicationSchedule.user_id == session.user_id,
                MedicationSchedule.is_active.is_(True),
            )
            .order_by(MedicationSchedule.id.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Error loading medication schedules for user %s", session.user_id)
        raise PersistenceFailure(LOAD_FAILED_MESSAGE, exc) from exc
    report.schedules = len(schedules)

    for schedule in schedules:
        rows = build_reminder_rows(schedule, session)
        if not rows:
            continue
        try:
            report.created += _insert_ignoring_duplicates(db, rows)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            if is_duplicate_key_error(exc):
                logger.debug("Reminders for schedule %s already generated", schedule.id)
                continue
            logger.exception("Reminder generation failed for schedule %s", schedule.id)
            report.failures.append(GenerationFailure(schedule.id, schedule.medicine_name, str(exc.orig)))
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Reminder generation failed for schedule %s", schedule.id)
            report.failures.append(GenerationFailure(schedule.id, schedule.medicine_name, str(exc)))

    if report.created:
        logger.info("Generated %s reminder(s) for user %s", report.created, session.user_id)
    return report


def ensure_today_generated_for_all_users(db: Session, now: datetime | None = None) -> GenerationReport:
    user_ids = [
        row[0]
        for row in db.query(MedicationSchedule.user_id)
        .filter(MedicationSchedule.is_active.is_(True))
        .distinct()
        .order_by(MedicationSchedule.user_id.asc())
        .all()
    ]
    total = GenerationReport()
    for user_id in user_ids:
        session = ReminderSession(user_id=user_id) if now is None else ReminderSession(user_id=user_id, now=now)
        report = ensure_today_generated(db, session)
        total.schedules += report.schedules
        total.created += report.created
        total.failures.extend(report.failures)
    return total
