"""Staff onboarding and service credentialing.

Which providers a service lists decides who the availability engine and the
booking path consider eligible. Existing appointments are left alone when a
provider is taken off a service.
"""

import logging

from clinic_scheduler.scheduling.booking import generate_id
from clinic_scheduler.scheduling.domain import Provider, ProviderRole, Service
from clinic_scheduler.scheduling.errors import NotFoundError
from clinic_scheduler.scheduling.repository import ClinicRepository

logger = logging.getLogger(__name__)


def add_provider(
    repository: ClinicRepository,
    name: str,
    role: ProviderRole = ProviderRole.DOCTOR,
    active: bool = True,
) -> Provider:
    provider = Provider(id=generate_id('prov'), name=name, role=role, active=active)
    saved = repository.save_provider(provider)
    logger.info('Added provider %s (%s)', saved.id, saved.name)
    return saved


def create_service(
    repository: ClinicRepository,
    name: str,
    duration_minutes: int,
    price: float = 0.0,
    provider_ids: list[str] | None = None,
) -> Service:
    service = Service(
        id=generate_id('svc'),
        name=name,
        duration_minutes=duration_minutes,
        price=price,
        provider_ids=list(dict.fromkeys(provider_ids or [])),
    )
    saved = repository.save_service(service)
    logger.info('Created service %s (%s, %d min)', saved.id, saved.name, saved.duration_minutes)
    return saved


def assign_provider_services(repository: ClinicRepository, provider_id: str, service_ids: list[str]) -> list[Service]:
    """Make ``service_ids`` the exact set of services ``provider_id`` performs.

    Returns the services the provider is assigned to afterwards, in catalog order.
    """
    if repository.get_provider(provider_id) is None:
        raise NotFoundError('Provider', provider_id)

    wanted = set(service_ids)
    services = repository.list_services()
    unknown = sorted(wanted - {service.id for service in services})
    if unknown:
        raise NotFoundError('Service', unknown[0])

    assigned: list[Service] = []
    for service in services:
        offers = provider_id in service.provider_ids

        if service.id in wanted and not offers:
            service = repository.save_service(
                service.model_copy(update={'provider_ids': [*service.provider_ids, provider_id]})
            )
        elif service.id not in wanted and offers:
            service = repository.save_service(
                service.model_copy(
                    update={'provider_ids': [other for other in service.provider_ids if other != provider_id]}
                )
            )

        if service.id in wanted:
            assigned.append(service)

    logger.info('Provider %s now performs %s', provider_id, [service.id for service in assigned])
    return assigned
