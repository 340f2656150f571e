"""Appointment model definitions."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from clinic_scheduler.database import Base


class Appointment(Base):
    """Represents a scheduled appointment."""
    __tablename__ = "appointments"

    id = Column(String, primary_key=True)
    client_id = Column(String, nullable=False)
    client_name = Column(String)
    service_id = Column(String, ForeignKey("services.id"), nullable=False)
    provider_id = Column(String, ForeignKey("providers.id"), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String, nullable=False)
    notes = Column(String)
    cancel_reason = Column(String)
    audit_entries = relationship(
        "AppointmentAuditEntry",
        order_by="AppointmentAuditEntry.id",
        cascade="all, delete-orphan",
    )


class AppointmentAuditEntry(Base):
    """One append-only audit record of an appointment change."""
    __tablename__ = "appointment_audit"

    id = Column(Integer, primary_key=True)
    appointment_id = Column(String, ForeignKey("appointments.id"), nullable=False)
    event_type = Column(String, nullable=False)
    at = Column(DateTime, nullable=False)
    detail = Column(JSON)
