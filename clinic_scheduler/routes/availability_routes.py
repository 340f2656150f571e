from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError

from clinic_scheduler.routes.dependencies import database_unavailable, get_repository, to_http_exception
from clinic_scheduler.scheduling.availability import compute_availability
from clinic_scheduler.scheduling.domain import AvailabilityView, Provider, Service
from clinic_scheduler.scheduling.errors import SchedulingError
from clinic_scheduler.scheduling.repository import ClinicRepository

router = APIRouter(tags=['availability'])


@router.get('', response_model=AvailabilityView)
def get_availability(
    service_id: str = Query(...),
    day: str = Query(..., alias='date', description='Calendar day as YYYY-MM-DD'),
    provider_id: str | None = Query(default=None),
    repository: ClinicRepository = Depends(get_repository),
):
    try:
        view = compute_availability(repository, service_id.strip(), day.strip())
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc

    if provider_id is None:
        return view

    return AvailabilityView(
        provider_stats=[stats for stats in view.provider_stats if stats.provider_id == provider_id],
        slots=[slot for slot in view.slots if provider_id in slot.providers],
    )


@router.get('/services', response_model=list[Service])
def list_services(repository: ClinicRepository = Depends(get_repository)):
    try:
        return repository.list_services()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/providers', response_model=list[Provider])
def list_providers(
    service_id: str | None = Query(default=None),
    repository: ClinicRepository = Depends(get_repository),
):
    try:
        if service_id is None:
            return repository.list_providers()

        service = repository.get_service(service_id)
        if service is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Service not found.')

        return repository.list_active_providers_for_service(service)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc
