"""Storage interface the engine and booking service depend on."""

from datetime import datetime
from typing import Protocol

from clinic_scheduler.scheduling.domain import Appointment, BusinessSettings, Provider, Service


class ClinicRepository(Protocol):
    def get_service(self, service_id: str) -> Service | None: ...

    def list_services(self) -> list[Service]: ...

    def get_provider(self, provider_id: str) -> Provider | None: ...

    def list_providers(self) -> list[Provider]: ...

    def list_active_providers_for_service(self, service: Service) -> list[Provider]:
        """Active providers credentialed for ``service``, in roster order."""
        ...

    def list_non_cancelled_appointments_for_provider(
        self,
        provider_id: str,
        range_start: datetime,
        range_end: datetime,
    ) -> list[Appointment]:
        """Occupying appointments of ``provider_id`` that intersect ``[range_start, range_end)``."""
        ...

    def get_settings(self) -> BusinessSettings: ...

    def get_appointment(self, appointment_id: str) -> Appointment | None: ...

    def list_appointments(self) -> list[Appointment]: ...

    def add_appointment(self, appointment: Appointment) -> Appointment: ...

    def save_appointment(self, appointment: Appointment) -> Appointment: ...

    def save_provider(self, provider: Provider) -> Provider: ...

    def save_service(self, service: Service) -> Service:
        """Insert or replace ``service``, including the providers credentialed for it."""
        ...

    def save_settings(self, settings: BusinessSettings) -> BusinessSettings: ...
