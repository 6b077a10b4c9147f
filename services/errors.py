class ReminderError(Exception):
    """Base class for reminder engine failures."""


class NotAuthenticated(ReminderError):
    pass


class ReminderNotFound(ReminderError):
    def __init__(self, reminder_id: int):
        super().__init__(f"Reminder {reminder_id} not found")
        self.reminder_id = reminder_id


class ScheduleNotFound(ReminderError):
    def __init__(self, schedule_id: int):
        super().__init__(f"Medication schedule {schedule_id} not found")
        self.schedule_id = schedule_id


class PrescriptionNotFound(ReminderError):
    def __init__(self, prescription_id: int):
        super().__init__(f"Prescription {prescription_id} not found")
        self.prescription_id = prescription_id


class ActionInFlight(ReminderError):
    def __init__(self, reminder_id: int):
        super().__init__(f"An update for reminder {reminder_id} is already in progress")
        self.reminder_id = reminder_id


class PersistenceFailure(ReminderError):
    """A store error other than a duplicate key. ``message`` is safe to show to the user."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


def is_duplicate_key_error(exc: Exception) -> bool:
    orig = getattr(exc, "orig", exc)
    if getattr(orig, "pgcode", None) == "23505":
        return True
    return "UNIQUE constraint failed" in str(orig)
