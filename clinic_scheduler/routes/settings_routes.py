from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError

from clinic_scheduler.routes.dependencies import database_unavailable, get_repository, to_http_exception
from clinic_scheduler.scheduling.domain import BusinessSettings, DayOff, Provider, ProviderRole, Service, WorkingHours
from clinic_scheduler.scheduling.errors import SchedulingError
from clinic_scheduler.scheduling.repository import ClinicRepository
from clinic_scheduler.scheduling.roster import add_provider, assign_provider_services, create_service

router = APIRouter(tags=['settings'])


class UpdateProviderRequest(BaseModel):
    active: bool | None = None
    override_clinic_hours: bool | None = None


def _require_name(value: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError('Name is required.')
    return normalized


class CreateProviderRequest(BaseModel):
    name: str
    role: ProviderRole = ProviderRole.DOCTOR
    active: bool = True

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _require_name(value)


class CreateServiceRequest(BaseModel):
    name: str
    duration_minutes: int = Field(gt=0)
    price: float = Field(default=0.0, ge=0)
    provider_ids: list[str] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _require_name(value)


class ProviderServicesRequest(BaseModel):
    service_ids: list[str]

    @field_validator('service_ids')
    @classmethod
    def validate_service_ids(cls, value: list[str]) -> list[str]:
        return [service_id.strip() for service_id in value if service_id.strip()]


def _require_provider(repository: ClinicRepository, provider_id: str) -> Provider:
    provider = repository.get_provider(provider_id)
    if provider is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Provider not found.',
        )
    return provider


@router.get('/working-hours', response_model=BusinessSettings)
def get_business_settings(repository: ClinicRepository = Depends(get_repository)):
    try:
        return repository.get_settings()
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.put('/working-hours', response_model=BusinessSettings)
def update_clinic_working_hours(data: WorkingHours, repository: ClinicRepository = Depends(get_repository)):
    try:
        settings = repository.get_settings()
        return repository.save_settings(settings.model_copy(update={'working_hours': data}))
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.put('/days-off', response_model=BusinessSettings)
def update_days_off(data: list[DayOff], repository: ClinicRepository = Depends(get_repository)):
    try:
        settings = repository.get_settings()
        days_off = sorted(data, key=lambda day_off: day_off.date)
        return repository.save_settings(settings.model_copy(update={'days_off': days_off}))
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.put('/providers/{provider_id}/working-hours', response_model=Provider)
def update_provider_working_hours(
    provider_id: str,
    data: WorkingHours,
    repository: ClinicRepository = Depends(get_repository),
):
    try:
        provider = _require_provider(repository, provider_id)
        # saving a personal schedule switches the provider onto it
        updated = provider.model_copy(update={'working_hours': data, 'override_clinic_hours': True})
        return repository.save_provider(updated)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.patch('/providers/{provider_id}', response_model=Provider)
def update_provider(
    provider_id: str,
    data: UpdateProviderRequest,
    repository: ClinicRepository = Depends(get_repository),
):
    try:
        provider = _require_provider(repository, provider_id)
        changes = data.model_dump(exclude_none=True)

        if changes.get('override_clinic_hours') and provider.working_hours is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='Set the provider working hours before overriding clinic hours.',
            )

        return repository.save_provider(provider.model_copy(update=changes))
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.post('/providers', response_model=Provider, status_code=status.HTTP_201_CREATED)
def create_provider(data: CreateProviderRequest, repository: ClinicRepository = Depends(get_repository)):
    try:
        return add_provider(repository, data.name, role=data.role, active=data.active)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.put('/providers/{provider_id}/services', response_model=list[Service])
def update_provider_services(
    provider_id: str,
    data: ProviderServicesRequest,
    repository: ClinicRepository = Depends(get_repository),
):
    try:
        return assign_provider_services(repository, provider_id, data.service_ids)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.post('/services', response_model=Service, status_code=status.HTTP_201_CREATED)
def create_clinic_service(data: CreateServiceRequest, repository: ClinicRepository = Depends(get_repository)):
    try:
        return create_service(
            repository,
            data.name,
            data.duration_minutes,
            price=data.price,
            provider_ids=data.provider_ids,
        )
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc
