"""Candidate slot generation.

Starts are quantized to a fixed step that does not depend on the service
length, so a 45-minute service on a 30-minute step yields starts that
overlap each other. Each candidate on its own fits inside the window.
"""

from datetime import date, datetime

from clinic_scheduler.scheduling.calendar import at_minutes
from clinic_scheduler.scheduling.hours import WorkingWindow

DEFAULT_SLOT_INTERVAL_MINUTES = 30


def iterate_slot_minutes(window: WorkingWindow, duration_minutes: int, interval_minutes: int) -> list[int]:
    if duration_minutes <= 0:
        raise ValueError('Service duration must be positive.')
    if interval_minutes <= 0:
        raise ValueError('Slot interval must be positive.')

    starts: list[int] = []
    current = window.start

    while current + duration_minutes <= window.end:
        starts.append(current)
        current += interval_minutes

    return starts


def generate_slot_starts(
    day: date,
    window: WorkingWindow,
    duration_minutes: int,
    interval_minutes: int = DEFAULT_SLOT_INTERVAL_MINUTES,
) -> list[datetime]:
    return [at_minutes(day, minutes) for minutes in iterate_slot_minutes(window, duration_minutes, interval_minutes)]
