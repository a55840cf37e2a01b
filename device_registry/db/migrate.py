"""Small, idempotent SQLite migrations for the ``computers`` table."""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# Columns added after the first release. Additive only; nothing is dropped.
COMPUTER_COLUMNS: dict[str, str] = {
    "device_name": "TEXT",
    "model": "TEXT",
    "user_name": "TEXT",
    "status": "TEXT",
    "warranty_expiry": "TEXT",
    "notes": "TEXT",
    "updated_at": "TEXT",
}

# Early tables used different names for the same data.
LEGACY_RENAMES: dict[str, str] = {
    "name": "device_name",
    "department": "user_name",
    "warranty_end_date": "warranty_expiry",
}


def _column_names(engine: Engine, table: str) -> set[str]:
    with engine.connect() as conn:
        rows = conn.execute(text(f"PRAGMA table_info({table})")).mappings().all()
    return {row["name"] for row in rows}


def _add_column_sqlite(engine: Engine, table: str, col_def: str) -> None:
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {col_def}"))


def _copy_legacy_values(engine: Engine, table: str, legacy: str, current: str) -> None:
    """Fill ``current`` from ``legacy`` where the new column is still empty."""

    with engine.begin() as conn:
        conn.execute(
            text(
                f"UPDATE {table} SET {current} = {legacy} "
                f"WHERE ({current} IS NULL OR {current} = '') AND {legacy} IS NOT NULL"
            )
        )


def run_migrations(engine: Engine) -> None:
    """Bring an existing SQLite ``computers`` table up to the current model."""

    if engine.dialect.name != "sqlite":
        return

    cols = _column_names(engine, "computers")
    if not cols:
        # Fresh database; create_all already built the current schema.
        return

    for name, dtype in COMPUTER_COLUMNS.items():
        if name not in cols:
            logger.info("migrate.add_column", extra={"extra_data": {"table": "computers", "column": name}})
            _add_column_sqlite(engine, "computers", f"{name} {dtype}")

    cols = _column_names(engine, "computers")
    for legacy, current in LEGACY_RENAMES.items():
        if legacy in cols and current in cols:
            _copy_legacy_values(engine, "computers", legacy, current)
