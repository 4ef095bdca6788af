"""Storage gateway over the DuckDB settings database."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import duckdb

from newcodeperiod.storage.repositories.base import Clock, system_clock
from newcodeperiod.storage.repositories.new_code_periods import NewCodePeriodRepository
from newcodeperiod.storage.schemas import apply_all_schemas, assert_schema_alignment

DuckDBConnection = duckdb.DuckDBPyConnection
DuckDBError = duckdb.Error

log = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


@dataclass(frozen=True)
class StorageConfig:
    """Define configuration for opening the settings database."""

    db_path: Path | str
    read_only: bool = False
    apply_schema: bool = False
    validate_schema: bool = False

    @classmethod
    def for_admin(cls, db_path: Path) -> StorageConfig:
        """
        Build a write-capable configuration that creates missing tables.

        Returns
        -------
        StorageConfig
            Configuration used when seeding or migrating settings.
        """
        return cls(db_path=db_path, read_only=False, apply_schema=True, validate_schema=True)

    @classmethod
    def for_readonly(cls, db_path: Path) -> StorageConfig:
        """
        Build a read-only configuration for analysis runs.

        Returns
        -------
        StorageConfig
            Configuration that never issues DDL.
        """
        return cls(db_path=db_path, read_only=True, apply_schema=False, validate_schema=True)

    @property
    def is_memory(self) -> bool:
        """Whether the configuration targets an in-memory database."""
        return str(self.db_path) == MEMORY_DB


class StorageGateway(Protocol):
    """Expose the settings database and scoped store sessions."""

    config: StorageConfig

    @property
    def con(self) -> DuckDBConnection:
        """Return the live DuckDB connection."""
        ...

    def session(self) -> AbstractContextManager[NewCodePeriodRepository]:
        """Open a scoped settings-store session."""
        ...

    def close(self) -> None:
        """Close the underlying DuckDB connection."""
        ...


@dataclass
class _DuckDBGateway:
    """Concrete gateway bound to one DuckDB connection."""

    config: StorageConfig
    _con: DuckDBConnection | None
    clock: Clock = system_clock

    @property
    def con(self) -> DuckDBConnection:
        """
        Return the live DuckDB connection.

        Raises
        ------
        RuntimeError
            If the gateway has been closed.
        """
        if self._con is None:
            message = f"Gateway for {self.config.db_path} is closed"
            raise RuntimeError(message)
        return self._con

    @contextmanager
    def session(self) -> Iterator[NewCodePeriodRepository]:
        """
        Yield a repository bound to a dedicated cursor.

        The cursor is closed when the block exits, including on error.

        Yields
        ------
        NewCodePeriodRepository
            Repository scoped to this session.
        """
        cursor = self.con.cursor()
        log.debug("Opened settings session on %s", self.config.db_path)
        try:
            yield NewCodePeriodRepository(cursor, clock=self.clock)
        finally:
            cursor.close()
            log.debug("Closed settings session on %s", self.config.db_path)

    def close(self) -> None:
        """Close the connection if it is still open."""
        if self._con is not None:
            log.info("Closing DuckDB connection to %s", self.config.db_path)
            self._con.close()
            self._con = None


def _connect(config: StorageConfig) -> DuckDBConnection:
    if not config.is_memory and not config.read_only:
        Path(config.db_path).parent.mkdir(parents=True, exist_ok=True)
    log.info("Connecting to DuckDB at %s (read_only=%s)", config.db_path, config.read_only)
    con = duckdb.connect(str(config.db_path), read_only=config.read_only)
    try:
        if config.apply_schema and not config.read_only:
            apply_all_schemas(con)
        if config.validate_schema:
            assert_schema_alignment(con)
    except Exception:
        con.close()
        raise
    return con


def open_gateway(config: StorageConfig, *, clock: Clock = system_clock) -> StorageGateway:
    """
    Create a StorageGateway bound to a DuckDB database.

    Parameters
    ----------
    config
        Storage configuration describing connection options.
    clock
        Millisecond clock used to stamp writes.

    Returns
    -------
    StorageGateway
        Gateway exposing scoped store sessions.
    """
    return _DuckDBGateway(config=config, _con=_connect(config), clock=clock)


def open_memory_gateway(*, clock: Clock = system_clock) -> StorageGateway:
    """
    Create an in-memory gateway with the settings schema applied.

    Returns
    -------
    StorageGateway
        Gateway backed by a private in-memory database.
    """
    config = StorageConfig(db_path=MEMORY_DB, apply_schema=True, validate_schema=True)
    return open_gateway(config, clock=clock)


__all__ = [
    "Clock",
    "DuckDBConnection",
    "DuckDBError",
    "StorageConfig",
    "StorageGateway",
    "open_gateway",
    "open_memory_gateway",
    "system_clock",
]
