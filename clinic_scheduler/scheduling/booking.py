"""Appointment mutations.

Every write that can place an appointment on a provider's calendar re-checks
conflicts while holding that provider's lock, so two requests racing for
the same slot cannot both commit.
"""

import logging
import uuid
from collections.abc import Callable, Iterator
from contextlib import ExitStack, contextmanager
from datetime import datetime, timedelta
from threading import Lock

from clinic_scheduler.scheduling.availability import day_bounds
from clinic_scheduler.scheduling.calendar import minutes_of
from clinic_scheduler.scheduling.conflicts import find_conflicts
from clinic_scheduler.scheduling.domain import (
    Appointment,
    AppointmentStatus,
    AuditEventType,
    Provider,
    Service,
)
from clinic_scheduler.scheduling.errors import (
    BookingValidationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
)
from clinic_scheduler.scheduling.hours import resolve_windows
from clinic_scheduler.scheduling.repository import ClinicRepository

logger = logging.getLogger(__name__)


class ProviderLockRegistry:
    """One lock per provider id, created on first use."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: dict[str, Lock] = {}

    def lock_for(self, provider_id: str) -> Lock:
        with self._guard:
            lock = self._locks.get(provider_id)
            if lock is None:
                lock = self._locks[provider_id] = Lock()
            return lock

    @contextmanager
    def hold(self, *provider_ids: str) -> Iterator[None]:
        # sorted acquisition order keeps two-provider holds deadlock free
        with ExitStack() as stack:
            for provider_id in sorted(set(provider_ids)):
                stack.enter_context(self.lock_for(provider_id))
            yield


provider_locks = ProviderLockRegistry()


def generate_id(prefix: str) -> str:
    return f'{prefix}_{uuid.uuid4().hex[:8]}'


def to_wall_clock(moment: datetime) -> datetime:
    if moment.second or moment.microsecond:
        raise BookingValidationError(f'Appointment times must fall on a whole minute, got {moment.isoformat()}.')
    if moment.tzinfo is not None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment


class BookingService:
    def __init__(
        self,
        repository: ClinicRepository,
        locks: ProviderLockRegistry | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.repository = repository
        self.locks = locks or provider_locks
        self.clock = clock

    def create_appointment(
        self,
        *,
        client_id: str,
        service_id: str,
        provider_id: str,
        start_time: datetime,
        end_time: datetime | None = None,
        client_name: str = '',
        notes: str | None = None,
    ) -> Appointment:
        service = self._require_service(service_id)
        provider = self._require_provider(provider_id)
        self._check_eligible(provider, service)
        start, end = self._interval(service, start_time, end_time)
        self._check_working_hours(provider, start, end)

        with self.locks.hold(provider.id):
            self._check_conflicts(provider.id, start, end)

            appointment = Appointment(
                id=generate_id('appt'),
                client_id=client_id,
                client_name=client_name,
                service_id=service.id,
                provider_id=provider.id,
                start_time=start,
                end_time=end,
                status=AppointmentStatus.BOOKED,
                notes=notes,
            ).with_event(
                AuditEventType.CREATED,
                self.clock(),
                {'provider_id': provider.id, 'start_time': start.isoformat(), 'end_time': end.isoformat()},
            )
            saved = self.repository.add_appointment(appointment)

        logger.info('Booked %s for provider %s at %s', saved.id, provider.id, start.isoformat())
        return saved

    def reschedule_appointment(
        self,
        appointment_id: str,
        start_time: datetime,
        end_time: datetime | None = None,
        provider_id: str | None = None,
    ) -> Appointment:
        current = self._require_appointment(appointment_id)
        service = self._require_service(current.service_id)
        provider = self._require_provider(provider_id or current.provider_id)
        self._check_eligible(provider, service)
        start, end = self._interval(service, start_time, end_time)
        self._check_working_hours(provider, start, end)

        with self.locks.hold(current.provider_id, provider.id):
            appointment = self._require_appointment(appointment_id)
            if not appointment.status.reschedulable:
                raise InvalidTransitionError(
                    f'Appointment {appointment.id} is {appointment.status.value} and cannot be rescheduled.'
                )

            self._check_conflicts(provider.id, start, end, exclude_id=appointment.id)

            updated = appointment.with_event(
                AuditEventType.RESCHEDULED,
                self.clock(),
                {
                    'from_provider_id': appointment.provider_id,
                    'from_start_time': appointment.start_time.isoformat(),
                    'from_end_time': appointment.end_time.isoformat(),
                    'to_provider_id': provider.id,
                    'to_start_time': start.isoformat(),
                    'to_end_time': end.isoformat(),
                },
                provider_id=provider.id,
                start_time=start,
                end_time=end,
                status=AppointmentStatus.BOOKED,
            )
            saved = self.repository.save_appointment(updated)

        logger.info('Rescheduled %s to provider %s at %s', saved.id, provider.id, start.isoformat())
        return saved

    def cancel_appointment(self, appointment_id: str, reason: str | None = None) -> Appointment:
        current = self._require_appointment(appointment_id)

        with self.locks.hold(current.provider_id):
            appointment = self._require_appointment(appointment_id)
            if appointment.status == AppointmentStatus.CANCELLED:
                raise InvalidTransitionError(f'Appointment {appointment.id} is already cancelled.')

            updated = appointment.with_event(
                AuditEventType.CANCELLED,
                self.clock(),
                {'reason': reason, 'previous_status': appointment.status.value},
                status=AppointmentStatus.CANCELLED,
                cancel_reason=reason,
            )
            saved = self.repository.save_appointment(updated)

        logger.info('Cancelled %s (%s)', saved.id, reason or 'no reason given')
        return saved

    def update_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment:
        if status == AppointmentStatus.CANCELLED:
            return self.cancel_appointment(appointment_id)

        current = self._require_appointment(appointment_id)

        with self.locks.hold(current.provider_id):
            appointment = self._require_appointment(appointment_id)
            if appointment.status == status:
                return appointment

            if status.occupies_calendar and not appointment.occupies_calendar:
                provider = self._require_provider(appointment.provider_id)
                self._check_working_hours(provider, appointment.start_time, appointment.end_time)
                self._check_conflicts(
                    appointment.provider_id,
                    appointment.start_time,
                    appointment.end_time,
                    exclude_id=appointment.id,
                )

            updated = appointment.with_event(
                AuditEventType.STATUS_CHANGED,
                self.clock(),
                {'from': appointment.status.value, 'to': status.value},
                status=status,
                cancel_reason=None,
            )
            saved = self.repository.save_appointment(updated)

        logger.info('Appointment %s status %s -> %s', saved.id, appointment.status.value, status.value)
        return saved

    def _require_service(self, service_id: str) -> Service:
        service = self.repository.get_service(service_id)
        if service is None:
            raise NotFoundError('Service', service_id)
        return service

    def _require_provider(self, provider_id: str) -> Provider:
        provider = self.repository.get_provider(provider_id)
        if provider is None:
            raise NotFoundError('Provider', provider_id)
        return provider

    def _require_appointment(self, appointment_id: str) -> Appointment:
        appointment = self.repository.get_appointment(appointment_id)
        if appointment is None:
            raise NotFoundError('Appointment', appointment_id)
        return appointment

    @staticmethod
    def _check_eligible(provider: Provider, service: Service) -> None:
        if not provider.active:
            raise BookingValidationError(f'Provider {provider.id} is inactive.')
        if provider.id not in service.provider_ids:
            raise BookingValidationError(f'Provider {provider.id} does not perform service {service.id}.')

    @staticmethod
    def _interval(service: Service, start_time: datetime, end_time: datetime | None) -> tuple[datetime, datetime]:
        start = to_wall_clock(start_time)
        end = to_wall_clock(end_time) if end_time is not None else start + timedelta(minutes=service.duration_minutes)

        if end <= start:
            raise BookingValidationError('Appointment end time must be after its start time.')

        return start, end

    def _check_working_hours(self, provider: Provider, start: datetime, end: datetime) -> None:
        day = start.date()
        day_start, day_end = day_bounds(day)
        windows = resolve_windows(provider, day, self.repository.get_settings())

        if end <= day_end:
            start_minutes = minutes_of(start)
            end_minutes = int((end - day_start).total_seconds() // 60)
            if any(window.contains(start_minutes, end_minutes) for window in windows):
                return

        raise BookingValidationError(
            f'Provider {provider.id} is not working from {start:%H:%M} to {end:%H:%M} on {day.isoformat()}.'
        )

    def _check_conflicts(
        self,
        provider_id: str,
        start: datetime,
        end: datetime,
        exclude_id: str | None = None,
    ) -> None:
        appointments = self.repository.list_non_cancelled_appointments_for_provider(provider_id, start, end)
        conflicts = find_conflicts(start, end, appointments, exclude_id=exclude_id)

        if conflicts:
            conflicting_ids = [appointment.id for appointment in conflicts]
            logger.warning(
                'Rejected booking for provider %s %s-%s: overlaps %s',
                provider_id,
                start.isoformat(),
                end.isoformat(),
                conflicting_ids,
            )
            raise ConflictError(provider_id, conflicting_ids)
