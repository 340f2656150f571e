from datetime import date, datetime, timedelta

import pytest

from clinic_scheduler.core import config
from clinic_scheduler.repositories.memory import InMemoryClinicRepository
from clinic_scheduler.scheduling.availability import bucket_status, compute_availability
from clinic_scheduler.scheduling.domain import (
    Appointment,
    AppointmentStatus,
    AvailabilityStatus,
    BusinessSettings,
    Provider,
    Service,
    WorkingDay,
    WorkingHours,
)
from clinic_scheduler.scheduling.errors import NotFoundError, TimeFormatError
from clinic_scheduler.seed import demo_providers, demo_services, demo_settings

MONDAY = date(2026, 1, 5)
WEDNESDAY = date(2026, 1, 7)
SATURDAY = date(2026, 1, 10)
SUNDAY = date(2026, 1, 11)


def _booking(appointment_id: str, provider_id: str, start: datetime, minutes: int = 30, status=AppointmentStatus.BOOKED):
    return Appointment(
        id=appointment_id,
        client_id='c1',
        service_id='s1',
        provider_id=provider_id,
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        status=status,
    )


def _demo_repository(appointments: list[Appointment] | None = None) -> InMemoryClinicRepository:
    return InMemoryClinicRepository(demo_settings(), demo_providers(), demo_services(), appointments=appointments)


def _slot_times(view, provider_id: str) -> list[str]:
    return [slot.time for slot in view.slots if provider_id in slot.providers]


def _stats(view) -> dict[str, tuple[int, AvailabilityStatus]]:
    return {stats.provider_id: (stats.slots_count, stats.status) for stats in view.provider_stats}


def test_slots_are_sorted_and_list_providers_in_roster_order(repository) -> None:
    view = compute_availability(repository, 's1', MONDAY)

    times = [slot.time for slot in view.slots]
    assert times == sorted(times)
    assert times[0] == '09:00'
    assert times[-1] == '16:30'
    assert view.slots[0].providers == ['p1', 'p3']
    assert all(slot.available for slot in view.slots)
    assert _stats(view) == {'p1': (16, AvailabilityStatus.AVAILABLE), 'p3': (16, AvailabilityStatus.AVAILABLE)}


@pytest.mark.parametrize('day', [MONDAY, WEDNESDAY, SATURDAY, SUNDAY, date(2026, 3, 18)])
def test_service_only_lists_its_credentialed_providers(repository, day: date) -> None:
    view = compute_availability(repository, 's3', day)

    assert [stats.provider_id for stats in view.provider_stats] == ['p2']
    assert all(slot.providers == ['p2'] for slot in view.slots)


def test_inactive_provider_is_never_offered(repository) -> None:
    view = compute_availability(repository, 's4', MONDAY)

    assert [stats.provider_id for stats in view.provider_stats] == ['p3']
    assert all('p4' not in slot.providers for slot in view.slots)


def test_override_hours_bound_the_generated_slots(repository) -> None:
    view = compute_availability(repository, 's3', WEDNESDAY)

    assert [slot.time for slot in view.slots] == [
        '08:00', '08:30', '09:00', '09:30', '10:00', '10:30', '11:00', '11:30',
    ]
    assert _stats(view) == {'p2': (8, AvailabilityStatus.AVAILABLE)}


def test_closed_day_marks_providers_off(repository) -> None:
    view = compute_availability(repository, 's1', SUNDAY)

    assert _stats(view) == {'p1': (0, AvailabilityStatus.OFF), 'p3': (0, AvailabilityStatus.OFF)}
    assert view.slots == []


def test_clinic_day_off_empties_the_day(repository) -> None:
    view = compute_availability(repository, 's2', '2026-12-25')

    assert _stats(view) == {'p1': (0, AvailabilityStatus.OFF), 'p2': (0, AvailabilityStatus.OFF)}
    assert view.slots == []


def test_split_shift_generates_both_windows_and_skips_the_gap(repository) -> None:
    view = compute_availability(repository, 's1', SATURDAY)

    assert _slot_times(view, 'p1') == [
        '09:00', '09:30', '10:00', '10:30', '11:00', '11:30',
        '13:00', '13:30', '14:00', '14:30',
    ]


def test_booked_appointment_suppresses_only_the_overlapping_start() -> None:
    repository = _demo_repository([_booking('a1', 'p1', datetime(2026, 1, 5, 10, 0))])

    view = compute_availability(repository, 's1', MONDAY)
    p1_times = _slot_times(view, 'p1')

    assert '10:00' not in p1_times
    assert '09:30' in p1_times
    assert '10:30' in p1_times
    assert next(slot for slot in view.slots if slot.time == '10:00').providers == ['p3']
    assert _stats(view)['p1'] == (15, AvailabilityStatus.AVAILABLE)


def test_longer_service_is_blocked_by_appointments_inside_its_span() -> None:
    repository = _demo_repository([_booking('a1', 'p3', datetime(2026, 1, 5, 10, 0))])

    p3_times = _slot_times(compute_availability(repository, 's4', MONDAY), 'p3')

    assert '09:00' in p3_times
    assert '09:30' not in p3_times
    assert '10:00' not in p3_times
    assert '10:30' in p3_times


def test_cancelled_appointment_does_not_suppress_slot() -> None:
    repository = _demo_repository([
        _booking('a1', 'p1', datetime(2026, 1, 5, 10, 0), status=AppointmentStatus.CANCELLED),
    ])

    assert '10:00' in _slot_times(compute_availability(repository, 's1', MONDAY), 'p1')


def test_appointments_of_other_days_are_ignored() -> None:
    repository = _demo_repository([_booking('a1', 'p1', datetime(2026, 1, 6, 10, 0))])

    assert '10:00' in _slot_times(compute_availability(repository, 's1', MONDAY), 'p1')


def test_fully_booked_provider_is_off_but_still_reported() -> None:
    appointments = [
        _booking(f'a{index}', 'p2', datetime(2026, 1, 7, 8, 0) + timedelta(minutes=30 * index))
        for index in range(8)
    ]
    view = compute_availability(_demo_repository(appointments), 's3', WEDNESDAY)

    assert _stats(view) == {'p2': (0, AvailabilityStatus.OFF)}
    assert view.slots == []


@pytest.mark.parametrize(
    ('close', 'expected_count', 'expected_status'),
    [
        ('12:00', 6, AvailabilityStatus.AVAILABLE),
        ('11:30', 5, AvailabilityStatus.LIMITED),
        ('09:30', 1, AvailabilityStatus.LIMITED),
        ('09:00', 0, AvailabilityStatus.OFF),
    ],
)
def test_status_buckets_follow_slot_counts(close: str, expected_count: int, expected_status: AvailabilityStatus) -> None:
    settings = BusinessSettings(
        name='Bucket Clinic',
        working_hours=WorkingHours.uniform(WorkingDay(open='09:00', close=close, is_open=True)),
    )
    repository = InMemoryClinicRepository(
        settings,
        providers=[Provider(id='p1', name='Dr. One')],
        services=[Service(id='s1', name='Consult', duration_minutes=30, provider_ids=['p1'])],
    )

    view = compute_availability(repository, 's1', MONDAY)

    assert _stats(view) == {'p1': (expected_count, expected_status)}


@pytest.mark.parametrize(
    ('slots_count', 'expected'),
    [(0, AvailabilityStatus.OFF), (1, AvailabilityStatus.LIMITED), (5, AvailabilityStatus.LIMITED), (6, AvailabilityStatus.AVAILABLE)],
)
def test_bucket_status_thresholds(slots_count: int, expected: AvailabilityStatus) -> None:
    assert bucket_status(slots_count) == expected


def test_limited_threshold_can_be_configured(repository) -> None:
    view = compute_availability(repository, 's3', WEDNESDAY, limited_max_slots=10)

    assert _stats(view) == {'p2': (8, AvailabilityStatus.LIMITED)}


def test_slot_interval_can_be_configured(repository) -> None:
    view = compute_availability(repository, 's3', WEDNESDAY, slot_interval=60)

    assert [slot.time for slot in view.slots] == ['08:00', '09:00', '10:00', '11:00']


def test_slot_interval_defaults_to_configuration(repository, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'SLOT_INTERVAL_MINUTES', 120)

    view = compute_availability(repository, 's3', WEDNESDAY)

    assert [slot.time for slot in view.slots] == ['08:00', '10:00']


def test_repeated_queries_return_identical_views() -> None:
    repository = _demo_repository([_booking('a1', 'p1', datetime(2026, 1, 5, 10, 0))])

    first = compute_availability(repository, 's1', MONDAY)
    second = compute_availability(repository, 's1', MONDAY)

    assert first == second
    assert first.model_dump() == second.model_dump()


def test_unknown_service_returns_empty_view(repository) -> None:
    view = compute_availability(repository, 'missing', MONDAY)

    assert view.provider_stats == []
    assert view.slots == []


def test_unknown_service_raises_in_strict_mode(repository) -> None:
    with pytest.raises(NotFoundError) as exception_info:
        compute_availability(repository, 'missing', MONDAY, strict=True)

    assert exception_info.value.kind == 'Service'


def test_malformed_date_fails_fast(repository) -> None:
    with pytest.raises(TimeFormatError):
        compute_availability(repository, 's1', '05/01/2026')


def test_service_without_eligible_providers_is_empty_not_an_error() -> None:
    repository = InMemoryClinicRepository(
        demo_settings(),
        providers=demo_providers(),
        services=[Service(id='s9', name='Unstaffed', duration_minutes=30, provider_ids=['p4'])],
    )

    view = compute_availability(repository, 's9', MONDAY)

    assert view.provider_stats == []
    assert view.slots == []
