from datetime import datetime, timezone
from threading import Lock

from sqlalchemy import DateTime, create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.types import TypeDecorator

from telehealth.core import config


DATABASE_URL = config.DATABASE_URL

engine = create_engine(DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_checked_tables: set[str] = set()


class UTCDateTime(TypeDecorator):
    """Stores instants as naive UTC and hands them back timezone-aware.

    Naive values coming in are taken to already be UTC.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


AVAILABILITY_MIGRATIONS = [
    ('status', "ALTER TABLE availability ADD COLUMN status VARCHAR DEFAULT 'AVAILABLE'"),
    ('updated_at', 'ALTER TABLE availability ADD COLUMN updated_at TIMESTAMP'),
]
AVAILABILITY_INDEXES = [
    'CREATE UNIQUE INDEX IF NOT EXISTS uq_availability_doctor ON availability(doctor_id)',
]

APPOINTMENT_MIGRATIONS = [
    ('patient_description', 'ALTER TABLE appointments ADD COLUMN patient_description VARCHAR'),
    ('video_session_token', 'ALTER TABLE appointments ADD COLUMN video_session_token VARCHAR'),
    ('created_at', 'ALTER TABLE appointments ADD COLUMN created_at TIMESTAMP'),
]
APPOINTMENT_INDEXES = [
    'CREATE INDEX IF NOT EXISTS idx_appointments_doctor_status_start ON appointments(doctor_id, status, start_time)',
    'CREATE INDEX IF NOT EXISTS idx_appointments_patient_start ON appointments(patient_id, start_time)',
]


def _ensure_table_schema(table_name: str, migration_steps: list[tuple[str, str]], index_statements: list[str]) -> None:
    """Add late columns and indexes to an existing table, once per process."""
    if table_name in _checked_tables:
        return

    with _schema_lock:
        if table_name in _checked_tables:
            return

        inspector = inspect(engine)
        if table_name not in inspector.get_table_names():
            _checked_tables.add(table_name)
            return

        existing_columns = {column['name'] for column in inspector.get_columns(table_name)}
        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            for statement in index_statements:
                connection.execute(text(statement))

        _checked_tables.add(table_name)


def ensure_availability_schema() -> None:
    _ensure_table_schema('availability', AVAILABILITY_MIGRATIONS, AVAILABILITY_INDEXES)


def ensure_appointment_schema() -> None:
    _ensure_table_schema('appointments', APPOINTMENT_MIGRATIONS, APPOINTMENT_INDEXES)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
