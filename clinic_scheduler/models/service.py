"""Service catalog model definitions."""

from sqlalchemy import Column, Float, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship
from clinic_scheduler.database import Base
from clinic_scheduler.models.provider import Provider

service_providers = Table(
    "service_providers",
    Base.metadata,
    Column("service_id", String, ForeignKey("services.id"), primary_key=True),
    Column("provider_id", String, ForeignKey("providers.id"), primary_key=True),
)


class Service(Base):
    """Represents a bookable service and the providers credentialed for it."""
    __tablename__ = "services"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Float, default=0.0)
    providers = relationship(Provider, secondary=service_providers, order_by=Provider.roster_position)
