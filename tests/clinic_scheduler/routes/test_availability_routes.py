import os
import threading
import time

import pytest
from fastapi import HTTPException

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from clinic_scheduler.core import config  # noqa: E402
from clinic_scheduler.repositories.memory import InMemoryClinicRepository  # noqa: E402
from clinic_scheduler.routes import dependencies  # noqa: E402
from clinic_scheduler.routes.availability_routes import (  # noqa: E402
    get_availability,
    list_providers,
    list_services,
)
from clinic_scheduler.routes.dependencies import get_repository, to_http_exception  # noqa: E402
from clinic_scheduler.scheduling.errors import (  # noqa: E402
    BookingValidationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
)


def test_get_availability_returns_slots_for_service(repository) -> None:
    view = get_availability(service_id=' s1 ', day='2026-01-05', provider_id=None, repository=repository)

    assert [stats.provider_id for stats in view.provider_stats] == ['p1', 'p3']
    assert view.slots[0].time == '09:00'


def test_get_availability_rejects_malformed_date(repository) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_availability(service_id='s1', day='2026-1-5', provider_id=None, repository=repository)

    assert exception_info.value.status_code == 400


def test_get_availability_for_unknown_service_is_empty(repository) -> None:
    view = get_availability(service_id='missing', day='2026-01-05', provider_id=None, repository=repository)

    assert view.provider_stats == []
    assert view.slots == []


def test_get_availability_for_unknown_service_is_404_in_strict_mode(repository, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'AVAILABILITY_STRICT_SERVICE_LOOKUP', True)

    with pytest.raises(HTTPException) as exception_info:
        get_availability(service_id='missing', day='2026-01-05', provider_id=None, repository=repository)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Service not found: missing'


def test_get_availability_can_focus_on_one_provider(repository) -> None:
    view = get_availability(service_id='s2', day='2026-01-07', provider_id='p2', repository=repository)

    assert [stats.provider_id for stats in view.provider_stats] == ['p2']
    assert [slot.time for slot in view.slots][0] == '08:00'
    assert all('p2' in slot.providers for slot in view.slots)


def test_list_services_returns_catalog(repository) -> None:
    services = list_services(repository=repository)

    assert [service.id for service in services] == ['s1', 's2', 's3', 's4']


def test_list_providers_filters_by_service(repository) -> None:
    assert [provider.id for provider in list_providers(service_id=None, repository=repository)] == ['p1', 'p2', 'p3', 'p4']
    assert [provider.id for provider in list_providers(service_id='s4', repository=repository)] == ['p3']


def test_list_providers_rejects_unknown_service(repository) -> None:
    with pytest.raises(HTTPException) as exception_info:
        list_providers(service_id='missing', repository=repository)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Service not found.'


@pytest.mark.parametrize(
    ('error', 'status_code'),
    [
        (NotFoundError('Appointment', 'a1'), 404),
        (ConflictError('p1', ['a1']), 409),
        (InvalidTransitionError('Appointment a1 is already cancelled.'), 409),
        (BookingValidationError('Provider p4 is inactive.'), 400),
    ],
)
def test_scheduling_errors_map_to_http_status(error, status_code: int) -> None:
    exception = to_http_exception(error)

    assert exception.status_code == status_code
    assert exception.detail == str(error)


def test_memory_backend_serves_one_shared_store(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'STORAGE_BACKEND', 'memory')
    monkeypatch.setattr(dependencies, '_memory_store', None)

    first = next(get_repository())
    second = next(get_repository())

    assert first is second
    assert first.get_service('s1').name == 'General Consultation'


def test_concurrent_first_requests_build_one_memory_store(monkeypatch: pytest.MonkeyPatch) -> None:
    builds: list[InMemoryClinicRepository] = []
    build_demo_store = InMemoryClinicRepository.with_demo_data

    def slow_demo_store(latency_ms: int = 0) -> InMemoryClinicRepository:
        time.sleep(0.05)
        store = build_demo_store(latency_ms=latency_ms)
        builds.append(store)
        return store

    monkeypatch.setattr(dependencies, '_memory_store', None)
    monkeypatch.setattr(InMemoryClinicRepository, 'with_demo_data', staticmethod(slow_demo_store))
    barrier = threading.Barrier(4)
    stores: list[InMemoryClinicRepository] = []

    def first_request() -> None:
        barrier.wait()
        stores.append(dependencies.get_memory_store())

    threads = [threading.Thread(target=first_request) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(builds) == 1
    assert all(store is builds[0] for store in stores)
