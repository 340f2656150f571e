import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from clinic_scheduler.database import Base  # noqa: E402
from clinic_scheduler.models import appointment, provider, service, settings  # noqa: E402,F401
from clinic_scheduler.repositories.memory import InMemoryClinicRepository  # noqa: E402
from clinic_scheduler.scheduling.booking import BookingService, ProviderLockRegistry  # noqa: E402

FIXED_NOW = datetime(2026, 1, 1, 8, 0)


@pytest.fixture
def repository() -> InMemoryClinicRepository:
    return InMemoryClinicRepository.with_demo_data()


@pytest.fixture
def booking(repository: InMemoryClinicRepository) -> BookingService:
    return BookingService(repository, locks=ProviderLockRegistry(), clock=lambda: FIXED_NOW)


@pytest.fixture
def sql_engine():
    engine = create_engine('sqlite:///:memory:')
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def sql_db(sql_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=sql_engine)
    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
