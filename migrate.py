"""
Simple migration script: creates tables and brings older reminder tables
up to date (missing columns, deduplication indexes).
Safe to run multiple times (checks before altering).
"""

import logging

from sqlalchemy import text, inspect

from database import engine, Base

# Import all models so Base.metadata knows about them
from models.prescription import Prescription  # noqa: F401
from models.medication_schedule import MedicationSchedule  # noqa: F401
from models.medication_reminder import MedicationReminder  # noqa: F401

logger = logging.getLogger("rxremind.migrate")

MIGRATION_LOCK_ID = 987654321

COLUMN_MIGRATIONS = {
    "medication_schedules": [
        ("is_active", "BOOLEAN NOT NULL DEFAULT TRUE"),
        ("updated_at", "TIMESTAMP"),
    ],
    "medication_reminders": [
        ("is_taken", "BOOLEAN NOT NULL DEFAULT FALSE"),
        ("taken_at", "TIMESTAMP"),
    ],
}

UNIQUE_INDEXES = [
    ("medication_schedules", "uq_medication_schedules_medicine", ("user_id", "prescription_id", "medicine_name")),
    (
        "medication_reminders",
        "uq_medication_reminders_slot",
        ("user_id", "prescription_id", "medicine_name", "scheduled_time"),
    ),
]


def get_existing_columns(conn, table_name: str) -> set:
    """Get the set of column names that already exist in a table."""
    insp = inspect(conn)
    if not insp.has_table(table_name):
        return set()
    return {col["name"] for col in insp.get_columns(table_name)}


def has_unique_key(conn, table_name: str, columns: tuple) -> bool:
    insp = inspect(conn)
    wanted = set(columns)
    for uc in insp.get_unique_constraints(table_name):
        if set(uc["column_names"]) == wanted:
            return True
    for ix in insp.get_indexes(table_name):
        if ix.get("unique") and set(ix["column_names"]) == wanted:
            return True
    return False


def migrate():
    with engine.connect() as conn:
        is_postgres = conn.dialect.name == "postgresql"
        if is_postgres:
            # Prevent concurrent migration execution across multiple startup workers.
            lock_acquired = bool(conn.execute(text(f"SELECT pg_try_advisory_lock({MIGRATION_LOCK_ID})")).scalar())
            if not lock_acquired:
                logger.info("Migration skipped: another process is running migrations")
                return

        try:
            # 1. Create any tables that don't exist yet
            Base.metadata.create_all(bind=conn)
            conn.commit()
            logger.info("Tables created/verified")

            # 2. Add missing columns
            for table_name, columns in COLUMN_MIGRATIONS.items():
                existing = get_existing_columns(conn, table_name)
                for col_name, col_type in columns:
                    if col_name in existing:
                        continue
                    conn.execute(text(f"ALTER TABLE {table_name} ADD COLUMN {col_name} {col_type}"))
                    conn.commit()
                    logger.info("Added column: %s.%s", table_name, col_name)

            # 3. Deduplication keys for tables created before the constraints existed
            for table_name, index_name, columns in UNIQUE_INDEXES:
                if has_unique_key(conn, table_name, columns):
                    continue
                conn.execute(text(
                    f"CREATE UNIQUE INDEX IF NOT EXISTS {index_name} ON {table_name} ({', '.join(columns)})"
                ))
                conn.commit()
                logger.info("Created unique index: %s", index_name)
        finally:
            if is_postgres:
                conn.rollback()
                conn.execute(text(f"SELECT pg_advisory_unlock({MIGRATION_LOCK_ID})"))
                conn.commit()

    logger.info("Migration complete")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    migrate()
