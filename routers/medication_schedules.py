from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_reminder_session
from models.medication_schedule import Frequency
from schemas.schedule import (
    FrequencyOut,
    IntakePlanIn,
    IntakePreviewOut,
    IntakeScheduleIn,
    MedicationScheduleIn,
    MedicationScheduleOut,
)
from services.errors import ReminderError
from services.recurrence import FREQUENCY_LABELS, PRESET_PLANS
from services.schedules import (
    deactivate_schedule,
    list_schedules,
    preview_intake_times,
    save_intake_plan,
    save_schedule,
)
from services.session import ReminderSession
from routers.http_errors import to_http_exception

router = APIRouter(prefix="/medication-schedules", tags=["Medication Schedules"])


@router.get("/frequencies", response_model=list[FrequencyOut])
def list_frequencies():
    out = []
    for frequency in Frequency:
        plan = PRESET_PLANS.get(frequency)
        out.append(
            FrequencyOut(
                value=frequency,
                label=FREQUENCY_LABELS[frequency],
                times_per_day=plan.times_per_day if plan else None,
                interval_hours=plan.interval_hours if plan else None,
            )
        )
    return out


@router.get("/", response_model=list[MedicationScheduleOut])
def list_user_schedules(
    session: ReminderSession = Depends(get_reminder_session),
    db: Session = Depends(get_db),
):
    return list_schedules(db, session)


@router.post("/", response_model=MedicationScheduleOut | None)
def save_user_schedule(
    data: MedicationScheduleIn,
    session: ReminderSession = Depends(get_reminder_session),
    db: Session = Depends(get_db),
):
    try:
        return save_schedule(db, session, data)
    except ReminderError as exc:
        raise to_http_exception(exc)


@router.put("/prescriptions/{prescription_id}", response_model=list[MedicationScheduleOut])
def save_prescription_intake_plan(
    prescription_id: int,
    data: IntakePlanIn,
    session: ReminderSession = Depends(get_reminder_session),
    db: Session = Depends(get_db),
):
    try:
        return save_intake_plan(db, session, prescription_id, data.schedules)
    except ReminderError as exc:
        raise to_http_exception(exc)


@router.post("/preview", response_model=IntakePreviewOut)
def preview_schedule(
    data: IntakeScheduleIn,
    session: ReminderSession = Depends(get_reminder_session),
):
    return IntakePreviewOut(
        medicine_name=data.medicine_name,
        frequency=data.frequency,
        intake_times=preview_intake_times(data, session.now.date()),
    )


@router.post("/{schedule_id}/deactivate", response_model=MedicationScheduleOut)
def deactivate_user_schedule(
    schedule_id: int,
    session: ReminderSession = Depends(get_reminder_session),
    db: Session = Depends(get_db),
):
    try:
        return deactivate_schedule(db, session, schedule_id)
    except ReminderError as exc:
        raise to_http_exception(exc)
