"""Overlap checks between candidate intervals and existing appointments."""

from bisect import bisect_left
from collections.abc import Iterable
from datetime import datetime

from clinic_scheduler.scheduling.calendar import overlaps
from clinic_scheduler.scheduling.domain import Appointment


def occupying(appointments: Iterable[Appointment]) -> list[Appointment]:
    return [appointment for appointment in appointments if appointment.occupies_calendar]


def find_conflicts(
    start: datetime,
    end: datetime,
    appointments: Iterable[Appointment],
    exclude_id: str | None = None,
) -> list[Appointment]:
    return [
        appointment
        for appointment in occupying(appointments)
        if appointment.id != exclude_id
        and overlaps(start, end, appointment.start_time, appointment.end_time)
    ]


def is_slot_free(start: datetime, end: datetime, appointments: Iterable[Appointment]) -> bool:
    return not find_conflicts(start, end, appointments)


class ProviderCalendar:
    """Sorted index of one provider's occupying appointments.

    ``_max_end[i]`` is the latest end among the first ``i + 1`` appointments
    by start time, so an overlap test is one binary search.
    """

    def __init__(self, appointments: Iterable[Appointment]):
        intervals = sorted(
            (appointment.start_time, appointment.end_time)
            for appointment in occupying(appointments)
        )
        self._starts = [start for start, _ in intervals]
        self._max_end: list[datetime] = []

        latest = None
        for _, end in intervals:
            latest = end if latest is None or end > latest else latest
            self._max_end.append(latest)

    def __len__(self) -> int:
        return len(self._starts)

    def is_free(self, start: datetime, end: datetime) -> bool:
        # appointments starting before ``end`` are the only overlap candidates
        candidates = bisect_left(self._starts, end)
        if candidates == 0:
            return True
        return self._max_end[candidates - 1] <= start
