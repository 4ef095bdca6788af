"""Shared repository helpers for DuckDB-backed storage."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import duckdb

RowDict = dict[str, Any]
Clock = Callable[[], int]
"""Callable returning the current time in epoch milliseconds."""


def system_clock() -> int:
    """
    Return the wall clock in epoch milliseconds.

    Returns
    -------
    int
        Milliseconds since the Unix epoch.
    """
    return time.time_ns() // 1_000_000


def fetch_one_dict(
    con: duckdb.DuckDBPyConnection, sql: str, params: Sequence[object]
) -> RowDict | None:
    """
    Execute a query and return the first row as a mapping.

    Returns
    -------
    RowDict | None
        Mapping of column to value when a row exists; otherwise ``None``.
    """
    result = con.execute(sql, list(params))
    row = result.fetchone()
    if row is None:
        return None
    cols = [desc[0] for desc in result.description]
    return {col: row[idx] for idx, col in enumerate(cols)}


@dataclass(frozen=True)
class BaseRepository:
    """Base class for repositories bound to one store session."""

    con: duckdb.DuckDBPyConnection
    clock: Clock = system_clock
