from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_reminder_session
from schemas.reminder import GenerationFailureOut, GenerationOut, ReminderActionOut, ReminderOut
from services.errors import ReminderError
from services.reminder_generator import ensure_today_generated
from services.reminder_lifecycle import MISSED_MESSAGE, TAKEN_MESSAGE, reminder_lifecycle
from services.reminder_status import STATUS_TEXT
from services.reminders import TodayReminder, list_today_reminders
from services.session import ReminderSession
from routers.http_errors import to_http_exception

router = APIRouter(prefix="/reminders", tags=["Medication Reminders"])


def _to_out(item: TodayReminder) -> ReminderOut:
    r = item.reminder
    return ReminderOut(
        id=r.id,
        prescription_id=r.prescription_id,
        prescription_name=item.prescription_name,
        medicine_name=r.medicine_name,
        scheduled_time=r.scheduled_time,
        is_taken=bool(r.is_taken),
        taken_at=r.taken_at,
        frequency=r.frequency,
        status=item.status,
        status_text=STATUS_TEXT[item.status],
        created_at=r.created_at,
    )


@router.get("/today", response_model=list[ReminderOut])
def list_today(
    session: ReminderSession = Depends(get_reminder_session),
    db: Session = Depends(get_db),
):
    return [_to_out(item) for item in list_today_reminders(db, session)]


@router.post("/generate", response_model=GenerationOut)
def generate_today(
    session: ReminderSession = Depends(get_reminder_session),
    db: Session = Depends(get_db),
):
    try:
        report = ensure_today_generated(db, session)
    except ReminderError as exc:
        raise to_http_exception(exc)
    return GenerationOut(
        schedules=report.schedules,
        created=report.created,
        failures=[
            GenerationFailureOut(schedule_id=f.schedule_id, medicine_name=f.medicine_name, error=f.error)
            for f in report.failures
        ],
        reminders=[_to_out(item) for item in list_today_reminders(db, session)],
    )


@router.post("/{reminder_id}/taken", response_model=ReminderActionOut)
def mark_taken(
    reminder_id: int,
    session: ReminderSession = Depends(get_reminder_session),
    db: Session = Depends(get_db),
):
    try:
        items = reminder_lifecycle.mark_taken(db, session, reminder_id)
    except ReminderError as exc:
        raise to_http_exception(exc)
    return ReminderActionOut(message=TAKEN_MESSAGE, reminders=[_to_out(item) for item in items])


@router.post("/{reminder_id}/missed", response_model=ReminderActionOut)
def mark_missed(
    reminder_id: int,
    session: ReminderSession = Depends(get_reminder_session),
    db: Session = Depends(get_db),
):
    try:
        items = reminder_lifecycle.mark_missed(db, session, reminder_id)
    except ReminderError as exc:
        raise to_http_exception(exc)
    return ReminderActionOut(message=MISSED_MESSAGE, reminders=[_to_out(item) for item in items])
