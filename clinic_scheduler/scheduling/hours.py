"""Working-hours resolution.

A provider works the clinic-wide hours unless they have switched on
``override_clinic_hours`` and stored their own schedule. Clinic days off
close the day for everyone, overrides included.
"""

from dataclasses import dataclass
from datetime import date

from clinic_scheduler.scheduling.calendar import format_minutes, to_minutes
from clinic_scheduler.scheduling.domain import BusinessSettings, Provider, WorkingDay


@dataclass(frozen=True)
class WorkingWindow:
    """A ``[start, end)`` range in minutes past midnight."""

    start: int
    end: int

    def contains(self, start_minutes: int, end_minutes: int) -> bool:
        return self.start <= start_minutes and end_minutes <= self.end

    def __str__(self) -> str:
        return f'{format_minutes(self.start)}-{format_minutes(self.end)}'


def uses_own_hours(provider: Provider) -> bool:
    return provider.override_clinic_hours and provider.working_hours is not None


def resolve_working_day(provider: Provider, day: date, settings: BusinessSettings) -> WorkingDay:
    if uses_own_hours(provider):
        return provider.working_hours.for_day(day)
    return settings.working_hours.for_day(day)


def windows_of(working_day: WorkingDay) -> list[WorkingWindow]:
    if not working_day.is_open:
        return []

    ranges = [(working_day.open, working_day.close)]
    if working_day.is_split:
        ranges.append((working_day.open2, working_day.close2))

    windows = []
    for open_time, close_time in ranges:
        start, end = to_minutes(open_time), to_minutes(close_time)
        if end > start:
            windows.append(WorkingWindow(start, end))

    return windows


def resolve_windows(provider: Provider, day: date, settings: BusinessSettings) -> list[WorkingWindow]:
    """Bookable windows for ``provider`` on ``day``; an empty list means closed."""
    if settings.is_day_off(day):
        return []
    return windows_of(resolve_working_day(provider, day, settings))
