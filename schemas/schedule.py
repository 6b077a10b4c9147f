from datetime import datetime, time

from pydantic import BaseModel, Field, model_validator

from models.medication_schedule import Frequency
from services.recurrence import resolve_plan


class IntakeScheduleIn(BaseModel):
    medicine_name: str = Field(min_length=1, max_length=200)
    frequency: Frequency = Frequency.once_daily
    start_time: time = time(8, 0)
    times_per_day: int | None = Field(default=None, ge=1)
    interval_hours: int | None = Field(default=None, ge=1)
    is_active: bool = True

    @model_validator(mode="after")
    def apply_frequency_plan(self):
        plan = resolve_plan(self.frequency, self.times_per_day, self.interval_hours)
        self.times_per_day = plan.times_per_day
        self.interval_hours = plan.interval_hours
        return self


class MedicationScheduleIn(IntakeScheduleIn):
    prescription_id: int


class IntakePlanIn(BaseModel):
    schedules: list[IntakeScheduleIn] = Field(min_length=1)


class MedicationScheduleOut(BaseModel):
    id: int
    prescription_id: int
    medicine_name: str
    frequency: Frequency
    start_time: time
    times_per_day: int
    interval_hours: int
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class IntakePreviewOut(BaseModel):
    medicine_name: str
    frequency: Frequency
    intake_times: list[datetime]


class FrequencyOut(BaseModel):
    value: Frequency
    label: str
    times_per_day: int | None
    interval_hours: int | None
