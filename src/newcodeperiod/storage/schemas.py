"""DDL for the new code period settings table."""

from __future__ import annotations

import logging

import duckdb

log = logging.getLogger(__name__)

NEW_CODE_PERIODS_TABLE = "new_code_periods"

TABLE_SCHEMAS: dict[str, str] = {
    NEW_CODE_PERIODS_TABLE: f"""
        CREATE TABLE IF NOT EXISTS {NEW_CODE_PERIODS_TABLE} (
            uuid VARCHAR PRIMARY KEY,
            project_uuid VARCHAR,
            branch_uuid VARCHAR,
            type VARCHAR NOT NULL,
            value VARCHAR,
            created_at BIGINT NOT NULL,
            updated_at BIGINT NOT NULL,
            CHECK (branch_uuid IS NULL OR project_uuid IS NOT NULL)
        )
    """,
}

INDEX_DDL: tuple[str, ...] = (
    f"CREATE INDEX IF NOT EXISTS idx_ncp_scope ON {NEW_CODE_PERIODS_TABLE} "
    "(project_uuid, branch_uuid)",
)


def apply_all_schemas(con: duckdb.DuckDBPyConnection) -> None:
    """Create settings tables and indexes when they are missing."""
    for name, ddl in TABLE_SCHEMAS.items():
        log.debug("Ensuring table %s", name)
        con.execute(ddl)
    for ddl in INDEX_DDL:
        con.execute(ddl)


def assert_schema_alignment(con: duckdb.DuckDBPyConnection) -> None:
    """
    Verify every expected table exists in the connected database.

    Raises
    ------
    RuntimeError
        If a table is missing.
    """
    present = {
        row[0]
        for row in con.execute(
            "SELECT table_name FROM information_schema.tables WHERE table_schema = 'main'"
        ).fetchall()
    }
    missing = sorted(set(TABLE_SCHEMAS) - present)
    if missing:
        message = f"Settings store is missing tables: {missing}"
        raise RuntimeError(message)


__all__ = ["NEW_CODE_PERIODS_TABLE", "TABLE_SCHEMAS", "apply_all_schemas", "assert_schema_alignment"]
