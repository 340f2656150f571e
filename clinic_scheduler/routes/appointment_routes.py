from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError

from clinic_scheduler.routes.dependencies import database_unavailable, get_repository, to_http_exception
from clinic_scheduler.scheduling.booking import BookingService
from clinic_scheduler.scheduling.domain import Appointment, AppointmentStatus
from clinic_scheduler.scheduling.errors import SchedulingError
from clinic_scheduler.scheduling.repository import ClinicRepository

router = APIRouter(tags=['appointments'])

MAX_APPOINTMENT_NOTES_LENGTH = 600
MAX_CANCEL_REASON_LENGTH = 200


def _normalize_optional_text(value: str | None, max_length: int, label: str) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    if len(normalized) > max_length:
        raise ValueError(f'{label} must be {max_length} characters or fewer.')

    return normalized


class CreateAppointmentRequest(BaseModel):
    client_id: str
    client_name: str = ''
    service_id: str
    provider_id: str
    start_time: datetime
    end_time: datetime | None = None
    notes: str | None = None

    @field_validator('client_id', 'service_id', 'provider_id')
    @classmethod
    def validate_identifier(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Identifier is required.')
        return normalized

    @field_validator('client_name')
    @classmethod
    def validate_client_name(cls, value: str) -> str:
        return value.strip()

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_optional_text(value, MAX_APPOINTMENT_NOTES_LENGTH, 'Notes')


class RescheduleAppointmentRequest(BaseModel):
    start_time: datetime
    end_time: datetime | None = None
    provider_id: str | None = None

    @field_validator('provider_id')
    @classmethod
    def validate_provider_id(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class CancelAppointmentRequest(BaseModel):
    reason: str | None = None

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        return _normalize_optional_text(value, MAX_CANCEL_REASON_LENGTH, 'Cancellation reason')


class UpdateAppointmentStatusRequest(BaseModel):
    status: AppointmentStatus


@router.get('', response_model=list[Appointment])
def list_appointments(
    provider_id: str | None = None,
    include_cancelled: bool = True,
    repository: ClinicRepository = Depends(get_repository),
):
    try:
        appointments = repository.list_appointments()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc

    return [
        appointment
        for appointment in appointments
        if (provider_id is None or appointment.provider_id == provider_id)
        and (include_cancelled or appointment.occupies_calendar)
    ]


@router.get('/{appointment_id}', response_model=Appointment)
def get_appointment(appointment_id: str, repository: ClinicRepository = Depends(get_repository)):
    try:
        appointment = repository.get_appointment(appointment_id)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc

    if appointment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Appointment not found.',
        )

    return appointment


@router.post('', response_model=Appointment, status_code=status.HTTP_201_CREATED)
def create_appointment(data: CreateAppointmentRequest, repository: ClinicRepository = Depends(get_repository)):
    try:
        return BookingService(repository).create_appointment(
            client_id=data.client_id,
            client_name=data.client_name,
            service_id=data.service_id,
            provider_id=data.provider_id,
            start_time=data.start_time,
            end_time=data.end_time,
            notes=data.notes,
        )
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.post('/{appointment_id}/reschedule', response_model=Appointment)
def reschedule_appointment(
    appointment_id: str,
    data: RescheduleAppointmentRequest,
    repository: ClinicRepository = Depends(get_repository),
):
    try:
        return BookingService(repository).reschedule_appointment(
            appointment_id,
            start_time=data.start_time,
            end_time=data.end_time,
            provider_id=data.provider_id,
        )
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.post('/{appointment_id}/cancel', response_model=Appointment)
def cancel_appointment(
    appointment_id: str,
    data: CancelAppointmentRequest,
    repository: ClinicRepository = Depends(get_repository),
):
    try:
        return BookingService(repository).cancel_appointment(appointment_id, reason=data.reason)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.patch('/{appointment_id}/status', response_model=Appointment)
def update_appointment_status(
    appointment_id: str,
    data: UpdateAppointmentStatusRequest,
    repository: ClinicRepository = Depends(get_repository),
):
    try:
        return BookingService(repository).update_status(appointment_id, data.status)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc
