from datetime import datetime

from pydantic import BaseModel

from models.medication_schedule import Frequency
from services.reminder_status import ReminderStatus


class ReminderOut(BaseModel):
    id: int
    prescription_id: int
    prescription_name: str
    medicine_name: str
    scheduled_time: datetime
    is_taken: bool
    taken_at: datetime | None = None
    frequency: Frequency
    status: ReminderStatus
    status_text: str
    created_at: datetime | None = None


class GenerationFailureOut(BaseModel):
    schedule_id: int
    medicine_name: str
    error: str


class GenerationOut(BaseModel):
    schedules: int
    created: int
    failures: list[GenerationFailureOut] = []
    reminders: list[ReminderOut] = []


class ReminderActionOut(BaseModel):
    message: str
    reminders: list[ReminderOut] = []
