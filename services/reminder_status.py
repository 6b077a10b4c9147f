import enum
import math
from datetime import datetime

from services.clock import to_local_naive

DUE_WINDOW_MINUTES = 30
OVERDUE_WINDOW_MINUTES = 60


class ReminderStatus(str, enum.Enum):
    upcoming = "upcoming"
    due = "due"
    overdue = "overdue"
    missed = "missed"


STATUS_TEXT = {
    ReminderStatus.upcoming: "Upcoming",
    ReminderStatus.due: "Due Now",
    ReminderStatus.overdue: "Overdue",
    ReminderStatus.missed: "Missed",
}


def minutes_since(now: datetime, scheduled_time: datetime) -> int:
    elapsed = to_local_naive(now) - to_local_naive(scheduled_time)
    return math.floor(elapsed.total_seconds() / 60)


def classify(now: datetime, scheduled_time: datetime) -> ReminderStatus:
    delta = minutes_since(now, scheduled_time)
    if delta < 0:
        return ReminderStatus.upcoming
    if delta <= DUE_WINDOW_MINUTES:
        return ReminderStatus.due
    if delta <= OVERDUE_WINDOW_MINUTES:
        return ReminderStatus.overdue
    return ReminderStatus.missed
