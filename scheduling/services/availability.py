"""
Weekly schedule helpers.

A schedule is a list of seven entries (Sunday first), each a list of
time ranges for that weekday.
"""

from dataclasses import dataclass
from datetime import time

Schedule = list[list[tuple[time, time]]]

WORKING_HOURS = (time(9, 0), time(17, 0))

# Monday to Friday, 9:00 to 17:00
DEFAULT_SCHEDULE: Schedule = [
    [],
    [WORKING_HOURS],
    [WORKING_HOURS],
    [WORKING_HOURS],
    [WORKING_HOURS],
    [WORKING_HOURS],
    [],
]


@dataclass(slots=True)
class AvailabilityRange:
    days: list[int]
    start_time: time
    end_time: time


def get_availability_from_schedule(schedule: Schedule) -> list[AvailabilityRange]:
    """
    Collapse a weekly schedule into availability rows, one per distinct
    time range, listing every weekday that shares it.
    """
    availability: list[AvailabilityRange] = []
    for day, ranges in enumerate(schedule):
        for start_time, end_time in ranges:
            existing = next(
                (
                    a
                    for a in availability
                    if a.start_time == start_time and a.end_time == end_time
                ),
                None,
            )
            if existing:
                existing.days.append(day)
            else:
                availability.append(
                    AvailabilityRange(days=[day], start_time=start_time, end_time=end_time)
                )
    return availability
