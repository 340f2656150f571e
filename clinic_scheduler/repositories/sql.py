"""SQLAlchemy-backed clinic store."""

import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_scheduler.models.appointment import Appointment, AppointmentAuditEntry
from clinic_scheduler.models.provider import Provider
from clinic_scheduler.models.service import Service
from clinic_scheduler.models.settings import SETTINGS_ROW_ID, ClinicSettings
from clinic_scheduler.scheduling import domain
from clinic_scheduler.scheduling.errors import NotFoundError
from clinic_scheduler.seed import demo_providers, demo_services, demo_settings

logger = logging.getLogger(__name__)

OCCUPYING_STATUSES = [status.value for status in domain.AppointmentStatus if status.occupies_calendar]


def provider_from_row(row: Provider) -> domain.Provider:
    return domain.Provider(
        id=row.id,
        name=row.name,
        role=row.role,
        active=row.active,
        override_clinic_hours=row.override_clinic_hours,
        working_hours=row.working_hours,
    )


def service_from_row(row: Service) -> domain.Service:
    return domain.Service(
        id=row.id,
        name=row.name,
        duration_minutes=row.duration_minutes,
        price=row.price or 0.0,
        provider_ids=[provider.id for provider in row.providers],
    )


def appointment_from_row(row: Appointment) -> domain.Appointment:
    return domain.Appointment(
        id=row.id,
        client_id=row.client_id,
        client_name=row.client_name or '',
        service_id=row.service_id,
        provider_id=row.provider_id,
        start_time=row.start_time,
        end_time=row.end_time,
        status=row.status,
        notes=row.notes,
        cancel_reason=row.cancel_reason,
        audit_trail=[
            domain.AuditEntry(type=entry.event_type, at=entry.at, detail=entry.detail or {})
            for entry in row.audit_entries
        ],
    )


def audit_row(entry: domain.AuditEntry) -> AppointmentAuditEntry:
    return AppointmentAuditEntry(event_type=entry.type.value, at=entry.at, detail=entry.detail)


def dump_working_hours(working_hours: domain.WorkingHours | None) -> dict | None:
    return working_hours.model_dump(mode='json') if working_hours is not None else None


class SqlClinicRepository:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def get_service(self, service_id: str) -> domain.Service | None:
        row = self.db.get(Service, service_id)
        return service_from_row(row) if row else None

    def list_services(self) -> list[domain.Service]:
        rows = self.db.query(Service).order_by(Service.id.asc()).all()
        return [service_from_row(row) for row in rows]

    def get_provider(self, provider_id: str) -> domain.Provider | None:
        row = self.db.get(Provider, provider_id)
        return provider_from_row(row) if row else None

    def list_providers(self) -> list[domain.Provider]:
        rows = self.db.query(Provider).order_by(Provider.roster_position.asc()).all()
        return [provider_from_row(row) for row in rows]

    def list_active_providers_for_service(self, service: domain.Service) -> list[domain.Provider]:
        rows = self.db.query(Provider).filter(
            Provider.active.is_(True),
            Provider.id.in_(service.provider_ids),
        ).order_by(Provider.roster_position.asc()).all()
        return [provider_from_row(row) for row in rows]

    def list_non_cancelled_appointments_for_provider(
        self,
        provider_id: str,
        range_start: datetime,
        range_end: datetime,
    ) -> list[domain.Appointment]:
        rows = self.db.query(Appointment).filter(
            Appointment.provider_id == provider_id,
            Appointment.status.in_(OCCUPYING_STATUSES),
            Appointment.start_time < range_end,
            Appointment.end_time > range_start,
        ).order_by(Appointment.start_time.asc()).all()
        return [appointment_from_row(row) for row in rows]

    def get_settings(self) -> domain.BusinessSettings:
        row = self.db.get(ClinicSettings, SETTINGS_ROW_ID)
        if row is None:
            raise NotFoundError('Clinic settings', str(SETTINGS_ROW_ID))
        return domain.BusinessSettings(
            name=row.name,
            timezone=row.timezone,
            working_hours=row.working_hours,
            days_off=row.days_off or [],
        )

    def get_appointment(self, appointment_id: str) -> domain.Appointment | None:
        row = self.db.get(Appointment, appointment_id)
        return appointment_from_row(row) if row else None

    def list_appointments(self) -> list[domain.Appointment]:
        rows = self.db.query(Appointment).order_by(Appointment.start_time.asc()).all()
        return [appointment_from_row(row) for row in rows]

    def add_appointment(self, appointment: domain.Appointment) -> domain.Appointment:
        row = Appointment(
            id=appointment.id,
            client_id=appointment.client_id,
            client_name=appointment.client_name,
            service_id=appointment.service_id,
            provider_id=appointment.provider_id,
            start_time=appointment.start_time,
            end_time=appointment.end_time,
            status=appointment.status.value,
            notes=appointment.notes,
            cancel_reason=appointment.cancel_reason,
            audit_entries=[audit_row(entry) for entry in appointment.audit_trail],
        )
        self.db.add(row)
        self._commit()
        return appointment

    def save_appointment(self, appointment: domain.Appointment) -> domain.Appointment:
        row = self.db.get(Appointment, appointment.id)
        if row is None:
            raise NotFoundError('Appointment', appointment.id)

        stored_entries = len(row.audit_entries)
        if len(appointment.audit_trail) < stored_entries:
            raise ValueError(f'Audit trail of appointment {appointment.id} is append-only.')

        row.provider_id = appointment.provider_id
        row.start_time = appointment.start_time
        row.end_time = appointment.end_time
        row.status = appointment.status.value
        row.notes = appointment.notes
        row.cancel_reason = appointment.cancel_reason
        for entry in appointment.audit_trail[stored_entries:]:
            row.audit_entries.append(audit_row(entry))

        self._commit()
        return appointment

    def save_provider(self, provider: domain.Provider) -> domain.Provider:
        row = self.db.get(Provider, provider.id)
        if row is None:
            last_position = self.db.query(func.max(Provider.roster_position)).scalar()
            row = Provider(id=provider.id, roster_position=(last_position or 0) + 1)
            self.db.add(row)

        row.name = provider.name
        row.role = provider.role.value
        row.active = provider.active
        row.override_clinic_hours = provider.override_clinic_hours
        row.working_hours = dump_working_hours(provider.working_hours)

        self._commit()
        return provider

    def save_service(self, service: domain.Service) -> domain.Service:
        providers = []
        for provider_id in service.provider_ids:
            provider = self.db.get(Provider, provider_id)
            if provider is None:
                raise NotFoundError('Provider', provider_id)
            providers.append(provider)

        row = self.db.get(Service, service.id)
        if row is None:
            row = Service(id=service.id)
            self.db.add(row)

        row.name = service.name
        row.duration_minutes = service.duration_minutes
        row.price = service.price
        # replaces the service_providers rows of this service
        row.providers = providers

        self._commit()
        return service

    def save_settings(self, settings: domain.BusinessSettings) -> domain.BusinessSettings:
        row = self.db.get(ClinicSettings, SETTINGS_ROW_ID)
        if row is None:
            row = ClinicSettings(id=SETTINGS_ROW_ID)
            self.db.add(row)

        row.name = settings.name
        row.timezone = settings.timezone
        row.working_hours = dump_working_hours(settings.working_hours)
        row.days_off = [day_off.model_dump(mode='json') for day_off in settings.days_off]

        self._commit()
        return settings


def seed_demo_data(db: Session) -> bool:
    """Load the demo clinic into an empty database. Returns False when data already exists."""
    if db.get(ClinicSettings, SETTINGS_ROW_ID) is not None:
        return False

    repository = SqlClinicRepository(db)
    repository.save_settings(demo_settings())
    for provider in demo_providers():
        repository.save_provider(provider)

    for service in demo_services():
        repository.save_service(service)

    logger.info('Seeded demo clinic data')
    return True
