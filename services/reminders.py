from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from models.medication_reminder import MedicationReminder
from models.prescription import Prescription
from services.clock import day_bounds
from services.reminder_status import ReminderStatus, classify
from services.session import ReminderSession

UNKNOWN_PRESCRIPTION_NAME = "Unknown Prescription"


@dataclass
class TodayReminder:
    reminder: MedicationReminder
    prescription_name: str
    status: ReminderStatus


def today_window(session: ReminderSession) -> tuple[datetime, datetime]:
    return day_bounds(session.now.date())


def list_today_reminders(db: Session, session: ReminderSession) -> list[TodayReminder]:
    """Today's reminders for the session user, ascending, each classified against ``session.now``."""
    if not session.is_authenticated:
        return []
    start, end = today_window(session)
    rows = (
        db.query(MedicationReminder, Prescription.prescription_name)
        .outerjoin(Prescription, Prescription.id == MedicationReminder.prescription_id)
        .filter(
            MedicationReminder.user_id == session.user_id,
            MedicationReminder.scheduled_time >= start,
            MedicationReminder.scheduled_time < end,
        )
        .order_by(MedicationReminder.scheduled_time.asc(), MedicationReminder.id.asc())
        .all()
    )
    return [
        TodayReminder(
            reminder=reminder,
            prescription_name=name or UNKNOWN_PRESCRIPTION_NAME,
            status=classify(session.now, reminder.scheduled_time),
        )
        for reminder, name in rows
    ]


def get_user_reminder(db: Session, session: ReminderSession, reminder_id: int) -> MedicationReminder | None:
    return (
        db.query(MedicationReminder)
        .filter(
            MedicationReminder.id == reminder_id,
            MedicationReminder.user_id == session.user_id,
        )
        .first()
    )
