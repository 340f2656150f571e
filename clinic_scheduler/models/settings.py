"""Clinic-wide settings model definitions."""

from sqlalchemy import JSON, Column, Integer, String
from clinic_scheduler.database import Base

SETTINGS_ROW_ID = 1


class ClinicSettings(Base):
    """Single row holding the clinic default hours and closure dates."""
    __tablename__ = "clinic_settings"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    timezone = Column(String, nullable=False)
    working_hours = Column(JSON, nullable=False)
    days_off = Column(JSON, nullable=False, default=list)
