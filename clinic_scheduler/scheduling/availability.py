"""Availability for one service on one calendar day.

``compute_availability`` only reads from the repository. Running it twice
over the same snapshot returns the same view, and "no availability" comes
back as an empty view rather than an error.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta

from clinic_scheduler.core import config
from clinic_scheduler.scheduling.calendar import at_minutes, parse_iso_date
from clinic_scheduler.scheduling.conflicts import ProviderCalendar
from clinic_scheduler.scheduling.domain import (
    Appointment,
    AvailabilityStatus,
    AvailabilityView,
    BusinessSettings,
    Provider,
    ProviderAvailability,
    Service,
    TimeSlot,
)
from clinic_scheduler.scheduling.errors import NotFoundError
from clinic_scheduler.scheduling.hours import resolve_windows
from clinic_scheduler.scheduling.repository import ClinicRepository
from clinic_scheduler.scheduling.slots import generate_slot_starts

logger = logging.getLogger(__name__)

SLOT_TIME_FORMAT = '%H:%M'


def bucket_status(slots_count: int, limited_max_slots: int = 5) -> AvailabilityStatus:
    if slots_count > limited_max_slots:
        return AvailabilityStatus.AVAILABLE
    if slots_count > 0:
        return AvailabilityStatus.LIMITED
    return AvailabilityStatus.OFF


def day_bounds(day: date) -> tuple[datetime, datetime]:
    start = at_minutes(day, 0)
    return start, start + timedelta(days=1)


def provider_slot_starts(
    provider: Provider,
    service: Service,
    day: date,
    settings: BusinessSettings,
    appointments: list[Appointment],
    slot_interval: int,
) -> list[datetime]:
    """Free candidate starts for one provider, ascending and without duplicates."""
    windows = resolve_windows(provider, day, settings)
    if not windows:
        return []

    provider_calendar = ProviderCalendar(appointments)
    duration = timedelta(minutes=service.duration_minutes)
    free_starts: set[datetime] = set()

    for window in windows:
        for start in generate_slot_starts(day, window, service.duration_minutes, slot_interval):
            if provider_calendar.is_free(start, start + duration):
                free_starts.add(start)

    return sorted(free_starts)


def compute_availability(
    repository: ClinicRepository,
    service_id: str,
    day: date | str,
    *,
    slot_interval: int | None = None,
    limited_max_slots: int | None = None,
    strict: bool | None = None,
) -> AvailabilityView:
    day = parse_iso_date(day)
    slot_interval = config.SLOT_INTERVAL_MINUTES if slot_interval is None else slot_interval
    limited_max_slots = config.LIMITED_MAX_SLOTS if limited_max_slots is None else limited_max_slots
    strict = config.AVAILABILITY_STRICT_SERVICE_LOOKUP if strict is None else strict

    service = repository.get_service(service_id)
    if service is None:
        if strict:
            raise NotFoundError('Service', service_id)
        logger.warning('Availability requested for unknown service %s', service_id)
        return AvailabilityView()

    settings = repository.get_settings()
    range_start, range_end = day_bounds(day)

    provider_stats: list[ProviderAvailability] = []
    providers_by_time: dict[str, list[str]] = defaultdict(list)

    for provider in repository.list_active_providers_for_service(service):
        appointments = repository.list_non_cancelled_appointments_for_provider(provider.id, range_start, range_end)
        starts = provider_slot_starts(provider, service, day, settings, appointments, slot_interval)

        for start in starts:
            providers_by_time[start.strftime(SLOT_TIME_FORMAT)].append(provider.id)

        provider_stats.append(
            ProviderAvailability(
                provider_id=provider.id,
                slots_count=len(starts),
                status=bucket_status(len(starts), limited_max_slots),
            )
        )

    slots = [
        TimeSlot(time=slot_time, available=True, providers=providers_by_time[slot_time])
        for slot_time in sorted(providers_by_time)
    ]

    logger.debug(
        'Availability for service %s on %s: %d providers, %d slots',
        service_id,
        day.isoformat(),
        len(provider_stats),
        len(slots),
    )
    return AvailabilityView(provider_stats=provider_stats, slots=slots)
