"""Domain types for providers, services, working hours and appointments."""

import datetime as dt
from enum import Enum
from typing import Any, NamedTuple

from pydantic import BaseModel, Field, field_validator, model_validator

from clinic_scheduler.scheduling.calendar import WEEKDAY_KEYS, day_key_of, to_minutes


class ProviderRole(str, Enum):
    DOCTOR = 'DOCTOR'
    NURSE = 'NURSE'
    THERAPIST = 'THERAPIST'


class AppointmentStatus(str, Enum):
    BOOKED = 'BOOKED'
    CONFIRMED = 'CONFIRMED'
    COMPLETED = 'COMPLETED'
    CANCELLED = 'CANCELLED'
    NO_SHOW = 'NO_SHOW'
    PENDING = 'PENDING'
    RESCHEDULED = 'RESCHEDULED'

    @property
    def occupies_calendar(self) -> bool:
        return STATUS_POLICIES[self].occupies_calendar

    @property
    def reschedulable(self) -> bool:
        return STATUS_POLICIES[self].reschedulable


class StatusPolicy(NamedTuple):
    occupies_calendar: bool
    reschedulable: bool


# Every status must appear here; a missing entry is a KeyError at the first lookup.
STATUS_POLICIES: dict[AppointmentStatus, StatusPolicy] = {
    AppointmentStatus.BOOKED: StatusPolicy(occupies_calendar=True, reschedulable=True),
    AppointmentStatus.CONFIRMED: StatusPolicy(occupies_calendar=True, reschedulable=True),
    AppointmentStatus.COMPLETED: StatusPolicy(occupies_calendar=True, reschedulable=True),
    AppointmentStatus.CANCELLED: StatusPolicy(occupies_calendar=False, reschedulable=False),
    AppointmentStatus.NO_SHOW: StatusPolicy(occupies_calendar=True, reschedulable=True),
    AppointmentStatus.PENDING: StatusPolicy(occupies_calendar=True, reschedulable=True),
    AppointmentStatus.RESCHEDULED: StatusPolicy(occupies_calendar=True, reschedulable=True),
}


class AuditEventType(str, Enum):
    CREATED = 'CREATED'
    RESCHEDULED = 'RESCHEDULED'
    CANCELLED = 'CANCELLED'
    STATUS_CHANGED = 'STATUS_CHANGED'


class AvailabilityStatus(str, Enum):
    AVAILABLE = 'AVAILABLE'
    LIMITED = 'LIMITED'
    OFF = 'OFF'


class WorkingDay(BaseModel):
    """One day's opening hours, optionally split into two windows."""

    open: str = '09:00'
    close: str = '17:00'
    is_open: bool = True
    is_split: bool = False
    open2: str | None = None
    close2: str | None = None

    @field_validator('open', 'close', 'open2', 'close2')
    @classmethod
    def validate_clock_time(cls, value: str | None) -> str | None:
        if value is not None:
            to_minutes(value)
        return value

    @model_validator(mode='after')
    def validate_split_window(self) -> 'WorkingDay':
        if not (self.is_open and self.is_split):
            return self

        if self.open2 is None or self.close2 is None:
            raise ValueError('Split days need both open2 and close2.')

        if to_minutes(self.open2) < to_minutes(self.close):
            raise ValueError('The second window must start at or after the first window closes.')

        return self


class WorkingHours(BaseModel):
    monday: WorkingDay
    tuesday: WorkingDay
    wednesday: WorkingDay
    thursday: WorkingDay
    friday: WorkingDay
    saturday: WorkingDay
    sunday: WorkingDay

    def for_day(self, day: dt.date) -> WorkingDay:
        return getattr(self, day_key_of(day))

    @classmethod
    def uniform(cls, working_day: WorkingDay) -> 'WorkingHours':
        return cls(**{key: working_day.model_copy() for key in WEEKDAY_KEYS})


class DayOff(BaseModel):
    date: dt.date
    description: str = ''


class BusinessSettings(BaseModel):
    name: str
    timezone: str = 'America/New_York'
    working_hours: WorkingHours
    days_off: list[DayOff] = Field(default_factory=list)

    def is_day_off(self, day: dt.date) -> bool:
        return any(day_off.date == day for day_off in self.days_off)


class Provider(BaseModel):
    id: str
    name: str
    role: ProviderRole = ProviderRole.DOCTOR
    active: bool = True
    override_clinic_hours: bool = False
    working_hours: WorkingHours | None = None


class Service(BaseModel):
    id: str
    name: str
    duration_minutes: int = Field(gt=0)
    price: float = 0.0
    provider_ids: list[str] = Field(default_factory=list)


class AuditEntry(BaseModel):
    type: AuditEventType
    at: dt.datetime
    detail: dict[str, Any] = Field(default_factory=dict)


class Appointment(BaseModel):
    id: str
    client_id: str
    client_name: str = ''
    service_id: str
    provider_id: str
    start_time: dt.datetime
    end_time: dt.datetime
    status: AppointmentStatus = AppointmentStatus.BOOKED
    notes: str | None = None
    cancel_reason: str | None = None
    audit_trail: list[AuditEntry] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_interval(self) -> 'Appointment':
        if self.end_time <= self.start_time:
            raise ValueError('Appointment end_time must be after start_time.')
        return self

    @property
    def occupies_calendar(self) -> bool:
        return self.status.occupies_calendar

    def with_event(
        self,
        event_type: AuditEventType,
        at: dt.datetime,
        detail: dict[str, Any] | None = None,
        **changes: Any,
    ) -> 'Appointment':
        """Return a copy with ``changes`` applied and one more audit entry."""
        entry = AuditEntry(type=event_type, at=at, detail=detail or {})
        return self.model_copy(update={**changes, 'audit_trail': [*self.audit_trail, entry]})


class TimeSlot(BaseModel):
    time: str
    available: bool = True
    providers: list[str] = Field(default_factory=list)


class ProviderAvailability(BaseModel):
    provider_id: str
    slots_count: int
    status: AvailabilityStatus


class AvailabilityView(BaseModel):
    provider_stats: list[ProviderAvailability] = Field(default_factory=list)
    slots: list[TimeSlot] = Field(default_factory=list)
