from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from models.medication_schedule import Frequency, MedicationSchedule


@dataclass(frozen=True)
class FrequencyPlan:
    times_per_day: int
    interval_hours: int


PRESET_PLANS: dict[Frequency, FrequencyPlan] = {
    Frequency.once_daily: FrequencyPlan(1, 24),
    Frequency.twice_daily: FrequencyPlan(2, 12),
    Frequency.three_times_daily: FrequencyPlan(3, 8),
    Frequency.every_6_hours: FrequencyPlan(4, 6),
    Frequency.every_8_hours: FrequencyPlan(3, 8),
    Frequency.every_12_hours: FrequencyPlan(2, 12),
}

FREQUENCY_LABELS: dict[Frequency, str] = {
    Frequency.once_daily: "Once Daily",
    Frequency.twice_daily: "Twice Daily",
    Frequency.three_times_daily: "Three Times Daily",
    Frequency.every_6_hours: "Every 6 Hours",
    Frequency.every_8_hours: "Every 8 Hours",
    Frequency.every_12_hours: "Every 12 Hours",
    Frequency.custom: "Custom",
}


def resolve_plan(
    frequency: Frequency,
    times_per_day: int | None = None,
    interval_hours: int | None = None,
) -> FrequencyPlan:
    """
    Dose count and spacing for ``frequency``.
    Preset labels ignore the supplied values; ``custom`` requires both.
    """
    preset = PRESET_PLANS.get(Frequency(frequency))
    if preset is not None:
        return preset
    if times_per_day is None or interval_hours is None:
        raise ValueError("Custom frequency requires times_per_day and interval_hours")
    return FrequencyPlan(times_per_day, interval_hours)


def calculate_intake_times(
    day: date,
    start_time: time,
    times_per_day: int,
    interval_hours: int,
) -> list[datetime]:
    first = datetime.combine(day, start_time.replace(second=0, microsecond=0, tzinfo=None))
    return [first + timedelta(hours=i * interval_hours) for i in range(max(times_per_day, 0))]


def intake_times_for_schedule(schedule: MedicationSchedule, day: date) -> list[datetime]:
    if not schedule.is_active:
        return []
    return calculate_intake_times(day, schedule.start_time, schedule.times_per_day, schedule.interval_hours)
