"""Provider model definitions."""

from sqlalchemy import JSON, Boolean, Column, Integer, String
from clinic_scheduler.database import Base


class Provider(Base):
    """Represents a clinician who can be booked."""
    __tablename__ = "providers"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False)  # DOCTOR/NURSE/THERAPIST
    active = Column(Boolean, default=True, nullable=False)
    override_clinic_hours = Column(Boolean, default=False, nullable=False)
    working_hours = Column(JSON, nullable=True)
    roster_position = Column(Integer, nullable=False, default=0)
