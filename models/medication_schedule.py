from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Time, ForeignKey, UniqueConstraint, Enum as SAEnum
)
from sqlalchemy.sql import func
import enum

from database import Base


class Frequency(str, enum.Enum):
    once_daily = "once_daily"
    twice_daily = "twice_daily"
    three_times_daily = "three_times_daily"
    every_6_hours = "every_6_hours"
    every_8_hours = "every_8_hours"
    every_12_hours = "every_12_hours"
    custom = "custom"


class MedicationSchedule(Base):
    __tablename__ = "medication_schedules"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "prescription_id", "medicine_name",
            name="uq_medication_schedules_medicine",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    prescription_id = Column(Integer, ForeignKey("prescriptions.id"), nullable=False, index=True)
    medicine_name = Column(String(200), nullable=False)
    frequency = Column(SAEnum(Frequency), nullable=False, default=Frequency.once_daily)
    start_time = Column(Time, nullable=False)
    times_per_day = Column(Integer, nullable=False, default=1)
    interval_hours = Column(Integer, nullable=False, default=24)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
