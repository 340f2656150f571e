from collections.abc import Iterator
from threading import Lock

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from clinic_scheduler.core import config
from clinic_scheduler.database import SessionLocal, ensure_scheduling_schema
from clinic_scheduler.repositories.memory import InMemoryClinicRepository
from clinic_scheduler.repositories.sql import SqlClinicRepository
from clinic_scheduler.scheduling.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    SchedulingError,
)
from clinic_scheduler.scheduling.repository import ClinicRepository

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'

_memory_store: InMemoryClinicRepository | None = None
_memory_store_lock = Lock()


def database_unavailable(exc: SQLAlchemyError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE_DETAIL,
    )


def ensure_database_ready() -> None:
    try:
        ensure_scheduling_schema()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


def get_memory_store() -> InMemoryClinicRepository:
    global _memory_store

    if _memory_store is not None:
        return _memory_store

    with _memory_store_lock:
        if _memory_store is None:
            _memory_store = InMemoryClinicRepository.with_demo_data(latency_ms=config.MOCK_LATENCY_MS)
        return _memory_store


def get_repository() -> Iterator[ClinicRepository]:
    if config.STORAGE_BACKEND == 'memory':
        yield get_memory_store()
        return

    ensure_database_ready()
    db = SessionLocal()
    try:
        yield SqlClinicRepository(db)
    finally:
        db.close()


def to_http_exception(exc: SchedulingError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (ConflictError, InvalidTransitionError)):
        status_code = status.HTTP_409_CONFLICT
    else:
        status_code = status.HTTP_400_BAD_REQUEST

    return HTTPException(status_code=status_code, detail=str(exc))
