"""Process-local clinic store.

Stands in for a backend during demos and tests. Reads and writes go
through copies so callers never share objects with the store.
"""

import time
from datetime import datetime

from clinic_scheduler.scheduling.calendar import overlaps
from clinic_scheduler.scheduling.domain import Appointment, BusinessSettings, Provider, Service
from clinic_scheduler.scheduling.errors import NotFoundError
from clinic_scheduler.seed import demo_providers, demo_services, demo_settings


class InMemoryClinicRepository:
    def __init__(
        self,
        settings: BusinessSettings,
        providers: list[Provider] | None = None,
        services: list[Service] | None = None,
        appointments: list[Appointment] | None = None,
        latency_ms: int = 0,
    ):
        self._settings = settings.model_copy(deep=True)
        self._providers = {provider.id: provider.model_copy(deep=True) for provider in providers or []}
        self._services = {service.id: service.model_copy(deep=True) for service in services or []}
        self._appointments = {appointment.id: appointment.model_copy(deep=True) for appointment in appointments or []}
        self.latency_ms = latency_ms

    @classmethod
    def with_demo_data(cls, latency_ms: int = 0) -> 'InMemoryClinicRepository':
        return cls(demo_settings(), demo_providers(), demo_services(), latency_ms=latency_ms)

    def _wait(self) -> None:
        if self.latency_ms > 0:
            time.sleep(self.latency_ms / 1000)

    def get_service(self, service_id: str) -> Service | None:
        self._wait()
        service = self._services.get(service_id)
        return service.model_copy(deep=True) if service else None

    def list_services(self) -> list[Service]:
        self._wait()
        return [service.model_copy(deep=True) for service in self._services.values()]

    def get_provider(self, provider_id: str) -> Provider | None:
        self._wait()
        provider = self._providers.get(provider_id)
        return provider.model_copy(deep=True) if provider else None

    def list_providers(self) -> list[Provider]:
        self._wait()
        return [provider.model_copy(deep=True) for provider in self._providers.values()]

    def list_active_providers_for_service(self, service: Service) -> list[Provider]:
        self._wait()
        return [
            provider.model_copy(deep=True)
            for provider in self._providers.values()
            if provider.active and provider.id in service.provider_ids
        ]

    def list_non_cancelled_appointments_for_provider(
        self,
        provider_id: str,
        range_start: datetime,
        range_end: datetime,
    ) -> list[Appointment]:
        self._wait()
        return [
            appointment.model_copy(deep=True)
            for appointment in self._appointments.values()
            if appointment.provider_id == provider_id
            and appointment.occupies_calendar
            and overlaps(appointment.start_time, appointment.end_time, range_start, range_end)
        ]

    def get_settings(self) -> BusinessSettings:
        self._wait()
        return self._settings.model_copy(deep=True)

    def get_appointment(self, appointment_id: str) -> Appointment | None:
        self._wait()
        appointment = self._appointments.get(appointment_id)
        return appointment.model_copy(deep=True) if appointment else None

    def list_appointments(self) -> list[Appointment]:
        self._wait()
        return sorted(
            (appointment.model_copy(deep=True) for appointment in self._appointments.values()),
            key=lambda appointment: appointment.start_time,
        )

    def add_appointment(self, appointment: Appointment) -> Appointment:
        self._wait()
        if appointment.id in self._appointments:
            raise ValueError(f'Appointment {appointment.id} already exists.')
        self._appointments[appointment.id] = appointment.model_copy(deep=True)
        return appointment

    def save_appointment(self, appointment: Appointment) -> Appointment:
        self._wait()
        stored = self._appointments.get(appointment.id)
        if stored is None:
            raise NotFoundError('Appointment', appointment.id)
        if appointment.audit_trail[: len(stored.audit_trail)] != stored.audit_trail:
            raise ValueError(f'Audit trail of appointment {appointment.id} is append-only.')
        self._appointments[appointment.id] = appointment.model_copy(deep=True)
        return appointment

    def save_provider(self, provider: Provider) -> Provider:
        self._wait()
        self._providers[provider.id] = provider.model_copy(deep=True)
        return provider

    def save_service(self, service: Service) -> Service:
        self._wait()
        for provider_id in service.provider_ids:
            if provider_id not in self._providers:
                raise NotFoundError('Provider', provider_id)
        self._services[service.id] = service.model_copy(deep=True)
        return service

    def save_settings(self, settings: BusinessSettings) -> BusinessSettings:
        self._wait()
        self._settings = settings.model_copy(deep=True)
        return settings
