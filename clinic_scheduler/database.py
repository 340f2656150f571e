from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from clinic_scheduler.core import config


connect_args = {'check_same_thread': False} if config.DATABASE_URL.startswith('sqlite') else {}

engine = create_engine(config.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_scheduling_schema_checked = False


def ensure_scheduling_schema(bind=None) -> None:
    global _scheduling_schema_checked

    if _scheduling_schema_checked and bind is None:
        return

    with _schema_lock:
        if _scheduling_schema_checked and bind is None:
            return

        target = bind or engine
        inspector = inspect(target)
        table_names = inspector.get_table_names()

        if 'appointments' not in table_names:
            if bind is None:
                _scheduling_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('client_name', 'ALTER TABLE appointments ADD COLUMN client_name VARCHAR'),
            ('notes', 'ALTER TABLE appointments ADD COLUMN notes VARCHAR'),
            ('cancel_reason', 'ALTER TABLE appointments ADD COLUMN cancel_reason VARCHAR'),
        ]

        with target.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_provider_start ON appointments(provider_id, start_time)')
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_time_range ON appointments(start_time, end_time)')
            )
            if 'appointment_audit' in table_names:
                connection.execute(
                    text('CREATE INDEX IF NOT EXISTS idx_appointment_audit_appointment ON appointment_audit(appointment_id)')
                )

        if bind is None:
            _scheduling_schema_checked = True
