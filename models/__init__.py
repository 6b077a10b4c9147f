from models.prescription import Prescription
from models.medication_schedule import Frequency, MedicationSchedule
from models.medication_reminder import MedicationReminder

__all__ = ["Prescription", "Frequency", "MedicationSchedule", "MedicationReminder"]
