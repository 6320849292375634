"""
Schema manager.

Creates the ledger tables when absent and applies additive migrations to
stores created by older versions. Migrations only ever add columns: nothing
is dropped or renamed.
"""
from typing import Dict, List

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from hisab.db import Base
from hisab.errors import StorageFailure
from hisab.utils.log import get_logger
from hisab.utils.timestamps import epoch_now

log = get_logger("schema")

# columns that older installations may lack; added with a backfill of "now"
MIGRATORY_COLUMNS: Dict[str, List[str]] = {
    "products": ["created_at", "updated_at"],
    "customers": ["created_at", "updated_at"],
    "transactions": ["created_at", "updated_at"],
}


def _is_duplicate_column(exc: OperationalError) -> bool:
    msg = str(getattr(exc, "orig", exc)).lower()
    return "duplicate column" in msg or "already exists" in msg


def add_column_if_missing(engine: Engine, table: str, column: str) -> bool:
    """
    ALTER TABLE ... ADD COLUMN for an integer timestamp column defaulting to
    the current time, and backfill existing rows with it. Returns True if the
    column was added.
    A "duplicate column" error is the expected outcome on an up-to-date store
    and is ignored.
    """
    # sqlite refuses expression defaults when the table already has rows,
    # so the default is the migration time as a literal
    now = epoch_now()
    try:
        with engine.begin() as conn:
            conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} INTEGER DEFAULT {now}"))
            conn.execute(
                text(f"UPDATE {table} SET {column} = :now WHERE {column} IS NULL"),
                {"now": now},
            )
    except OperationalError as e:
        if _is_duplicate_column(e):
            log.debug(f"{table}.{column} already present")
            return False
        raise
    log.info(f"Added column {table}.{column}")
    return True


def ensure_schema(engine: Engine) -> None:
    """
    Create missing tables, then add missing timestamp columns.
    Any failure while creating tables is fatal and surfaces as StorageFailure.
    """
    import hisab.models  # noqa: F401  register every table on Base.metadata

    try:
        log.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        log.error(f"Schema initialization failed: {e}")
        raise StorageFailure(f"Failed to initialize database: {e}") from e

    try:
        existing = inspect(engine)
        for table, columns in MIGRATORY_COLUMNS.items():
            present = {c["name"] for c in existing.get_columns(table)}
            for column in columns:
                if column not in present:
                    add_column_if_missing(engine, table, column)
    except SQLAlchemyError as e:
        log.error(f"Schema migration failed: {e}")
        raise StorageFailure(f"Failed to migrate database: {e}") from e

    log.info("Database initialized.")


def list_tables(engine: Engine) -> List[str]:
    return sorted(inspect(engine).get_table_names())
