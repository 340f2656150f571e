"""Demo clinic used by the in-memory store and to seed an empty database."""

from datetime import date

from clinic_scheduler.scheduling.domain import (
    BusinessSettings,
    DayOff,
    Provider,
    ProviderRole,
    Service,
    WorkingDay,
    WorkingHours,
)

WEEKDAY_HOURS = WorkingDay(open='09:00', close='17:00', is_open=True)
CLOSED_DAY = WorkingDay(open='00:00', close='00:00', is_open=False)


def demo_settings() -> BusinessSettings:
    return BusinessSettings(
        name='Riverside Family Clinic',
        timezone='America/New_York',
        working_hours=WorkingHours(
            monday=WEEKDAY_HOURS,
            tuesday=WEEKDAY_HOURS,
            wednesday=WEEKDAY_HOURS,
            thursday=WEEKDAY_HOURS,
            friday=WEEKDAY_HOURS,
            saturday=WorkingDay(open='09:00', close='12:00', is_open=True, is_split=True, open2='13:00', close2='15:00'),
            sunday=CLOSED_DAY,
        ),
        days_off=[
            DayOff(date=date(2026, 12, 25), description='Christmas Day'),
            DayOff(date=date(2027, 1, 1), description="New Year's Day"),
        ],
    )


def demo_providers() -> list[Provider]:
    morning_wednesdays = WorkingHours(
        monday=WEEKDAY_HOURS,
        tuesday=WEEKDAY_HOURS,
        wednesday=WorkingDay(open='08:00', close='12:00', is_open=True),
        thursday=WEEKDAY_HOURS,
        friday=WEEKDAY_HOURS,
        saturday=CLOSED_DAY,
        sunday=CLOSED_DAY,
    )

    return [
        Provider(id='p1', name='Dr. Amara Okafor', role=ProviderRole.DOCTOR),
        Provider(
            id='p2',
            name='Dr. Lucas Brandt',
            role=ProviderRole.DOCTOR,
            override_clinic_hours=True,
            working_hours=morning_wednesdays,
        ),
        Provider(id='p3', name='Nurse Priya Raman', role=ProviderRole.NURSE),
        Provider(id='p4', name='Tomas Lindqvist', role=ProviderRole.THERAPIST, active=False),
    ]


def demo_services() -> list[Service]:
    return [
        Service(id='s1', name='General Consultation', duration_minutes=30, price=80.0, provider_ids=['p1', 'p3']),
        Service(id='s2', name='Follow-up Visit', duration_minutes=15, price=45.0, provider_ids=['p1', 'p2']),
        Service(id='s3', name='Pediatric Checkup', duration_minutes=30, price=70.0, provider_ids=['p2']),
        Service(id='s4', name='Physiotherapy Session', duration_minutes=45, price=95.0, provider_ids=['p3', 'p4']),
    ]
