from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum
)
from sqlalchemy.sql import func

from database import Base
from models.medication_schedule import Frequency


class MedicationReminder(Base):
    __tablename__ = "medication_reminders"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "prescription_id", "medicine_name", "scheduled_time",
            name="uq_medication_reminders_slot",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    prescription_id = Column(Integer, ForeignKey("prescriptions.id"), nullable=False)
    medicine_name = Column(String(200), nullable=False)
    # Naive local wall-clock time (see services.clock)
    scheduled_time = Column(DateTime, nullable=False, index=True)
    is_taken = Column(Boolean, nullable=False, default=False)
    taken_at = Column(DateTime, nullable=True)
    frequency = Column(SAEnum(Frequency), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
