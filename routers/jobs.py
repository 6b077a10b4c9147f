import hmac

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from config import JOB_RUN_KEY
from database import get_db
from services.errors import ReminderError
from services.reminder_generator import ensure_today_generated_for_all_users
from routers.http_errors import to_http_exception

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("/run-reminder-generation")
def run_reminder_generation(
    key: str = Query(default=""),
    db: Session = Depends(get_db),
):
    """External scheduler hook: generates today's intake reminders for all users."""
    if not JOB_RUN_KEY:
        raise HTTPException(status_code=503, detail="JOB_RUN_KEY is not configured")
    if not hmac.compare_digest(key, JOB_RUN_KEY):
        raise HTTPException(status_code=401, detail="Invalid job key")
    try:
        report = ensure_today_generated_for_all_users(db)
    except ReminderError as exc:
        raise to_http_exception(exc)
    return {
        "ok": report.ok,
        "schedules": report.schedules,
        "created_reminders": report.created,
        "failed_schedules": [f.schedule_id for f in report.failures],
    }
