from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from config import REMINDER_TIMEZONE

LOCAL_TZ = ZoneInfo(REMINDER_TIMEZONE)


def to_local_naive(dt: datetime) -> datetime:
    """Normalize ``dt`` to a naive wall-clock datetime in the reminder zone."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(LOCAL_TZ).replace(tzinfo=None)


def local_now() -> datetime:
    return datetime.now(LOCAL_TZ).replace(tzinfo=None)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open ``[start_of_day, start_of_next_day)`` window for ``day``."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)
