"""Tiny home-grown migration helpers with plain-language explanations."""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# Simple, idempotent migrations. ``Base.metadata.create_all`` builds fresh
# tables; the helpers below only ADD what older databases are missing.

OPEN_ENTRY_INDEX = "ux_time_entries_one_open"
# Dialects that understand ``CREATE UNIQUE INDEX ... WHERE``.
PARTIAL_INDEX_DIALECTS = {"sqlite", "postgresql"}


def _column_names(engine: Engine, table: str) -> set[str]:
    """Return the set of column names for ``table`` (empty when it is absent)."""

    inspector = inspect(engine)
    if not inspector.has_table(table):
        return set()
    return {column["name"] for column in inspector.get_columns(table)}


def _index_names(engine: Engine, table: str) -> set[str]:
    inspector = inspect(engine)
    if not inspector.has_table(table):
        return set()
    return {index["name"] for index in inspector.get_indexes(table) if index.get("name")}


def _add_column(engine: Engine, table: str, col_def: str) -> None:
    """ALTER TABLE ADD COLUMN helper."""
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {col_def}"))


def _create_index_if_not_exists(
    engine: Engine,
    table: str,
    name: str,
    cols: Iterable[str],
    unique: bool = False,
    where: str | None = None,
) -> None:
    """Build an index only if it hasn't already been defined."""

    if name in _index_names(engine, table):
        return
    cols_sql = ", ".join(cols)
    unique_sql = "UNIQUE " if unique else ""
    where_sql = f" WHERE {where}" if where else ""
    with engine.begin() as conn:
        conn.execute(text(f"CREATE {unique_sql}INDEX {name} ON {table} ({cols_sql}){where_sql}"))


def ensure_open_entry_index(engine: Engine) -> bool:
    """Let the database itself refuse a second open time entry for a user.

    Returns ``False`` when the dialect cannot express a partial unique index;
    the application-level check in ``start_entry`` is then the only guard.
    """

    if engine.dialect.name not in PARTIAL_INDEX_DIALECTS:
        logger.warning(
            "Database dialect %s has no partial unique indexes; open-entry uniqueness is checked in the application only",
            engine.dialect.name,
        )
        return False
    _create_index_if_not_exists(
        engine,
        "time_entries",
        OPEN_ENTRY_INDEX,
        ["user_id"],
        unique=True,
        where="end_at IS NULL",
    )
    return True


def run_migrations(engine: Engine) -> None:
    """Bring the schema up-to-date with the expectations of the code."""

    # Early databases stored only the user's email and hash.
    ucols = _column_names(engine, "users")
    if ucols and "full_name" not in ucols:
        _add_column(engine, "users", "full_name VARCHAR(190) DEFAULT '' NOT NULL")
    if ucols and "created_at" not in ucols:
        _add_column(engine, "users", "created_at DATETIME")

    scols = _column_names(engine, "app_settings")
    if scols and "updated_at" not in scols:
        _add_column(engine, "app_settings", "updated_at DATETIME")

    if _column_names(engine, "time_entries"):
        _create_index_if_not_exists(engine, "time_entries", "ix_time_entries_user_start", ["user_id", "start_at"])
        ensure_open_entry_index(engine)
