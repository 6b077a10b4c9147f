import logging
import threading
from contextlib import contextmanager
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from services.errors import ActionInFlight, NotAuthenticated, PersistenceFailure, ReminderNotFound
from services.reminders import TodayReminder, get_user_reminder, list_today_reminders
from services.session import ReminderSession

logger = logging.getLogger("rxremind.lifecycle")

TAKEN_MESSAGE = "Medication marked as taken!"
MISSED_MESSAGE = "Medication marked as missed"
TAKEN_FAILED_MESSAGE = "Failed to mark medication as taken"
MISSED_FAILED_MESSAGE = "Failed to update reminder"

# (db, session, prescription_id, medicine_name) -> refreshed list for today
NextReminderHook = Callable[[Session, ReminderSession, int, str], list[TodayReminder]]


def refresh_only(db: Session, session: ReminderSession, prescription_id: int, medicine_name: str) -> list[TodayReminder]:
    """Default next-reminder strategy: no carry-forward, just re-read today's list."""
    return list_today_reminders(db, session)


class ReminderLifecycle:
    """Applies patient outcomes to reminders, one in-flight action per reminder id."""

    def __init__(self, next_reminder: NextReminderHook | None = None):
        self.next_reminder = next_reminder or refresh_only
        self._in_flight: set[int] = set()
        self._lock = threading.Lock()

    def is_in_flight(self, reminder_id: int) -> bool:
        with self._lock:
            return reminder_id in self._in_flight

    @contextmanager
    def _guard(self, reminder_id: int):
        with self._lock:
            if reminder_id in self._in_flight:
                raise ActionInFlight(reminder_id)
            self._in_flight.add(reminder_id)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard(reminder_id)

    def _delete(self, db: Session, session: ReminderSession, reminder_id: int, failure_message: str):
        try:
            reminder = get_user_reminder(db, session, reminder_id)
            if not reminder:
                raise ReminderNotFound(reminder_id)
            key = (reminder.prescription_id, reminder.medicine_name)
            db.delete(reminder)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Error updating reminder %s", reminder_id)
            raise PersistenceFailure(failure_message, exc) from exc
        return key

    def _refresh(self, db: Session, reminder_id: int, refresh: Callable[[], list[TodayReminder]]):
        # The delete is already committed; a failed re-read only leaves the list empty.
        try:
            return refresh()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Error refreshing reminders after updating reminder %s", reminder_id)
            return []

    def mark_taken(self, db: Session, session: ReminderSession, reminder_id: int) -> list[TodayReminder]:
        if not session.is_authenticated:
            raise NotAuthenticated("Sign in to update reminders")
        with self._guard(reminder_id):
            prescription_id, medicine_name = self._delete(db, session, reminder_id, TAKEN_FAILED_MESSAGE)
            logger.info("Reminder %s marked as taken by user %s", reminder_id, session.user_id)
            return self._refresh(
                db, reminder_id, lambda: self.next_reminder(db, session, prescription_id, medicine_name)
            )

    def mark_missed(self, db: Session, session: ReminderSession, reminder_id: int) -> list[TodayReminder]:
        if not session.is_authenticated:
            raise NotAuthenticated("Sign in to update reminders")
        with self._guard(reminder_id):
            self._delete(db, session, reminder_id, MISSED_FAILED_MESSAGE)
            logger.info("Reminder %s marked as missed by user %s", reminder_id, session.user_id)
            return self._refresh(db, reminder_id, lambda: list_today_reminders(db, session))


reminder_lifecycle = ReminderLifecycle()
