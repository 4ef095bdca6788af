"""Pytest configuration for the new code period test suite."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from newcodeperiod.storage.gateway import (
    StorageConfig,
    StorageGateway,
    open_gateway,
    open_memory_gateway,
)
from tests._helpers.fakes import FakeMaterializer, RecordingGateway, fixed_clock


@pytest.fixture
def memory_gateway() -> Iterator[StorageGateway]:
    """Provide an in-memory settings gateway with the schema applied.

    Yields
    ------
    StorageGateway
        Gateway closed after the test.
    """
    gateway = open_memory_gateway(clock=fixed_clock)
    try:
        yield gateway
    finally:
        gateway.close()


@pytest.fixture
def settings_db(tmp_path: Path) -> Path:
    """Create an empty on-disk settings database and return its path.

    Returns
    -------
    Path
        Path to a DuckDB file with the settings schema applied.
    """
    db_path = tmp_path / "db" / "settings.duckdb"
    gateway = open_gateway(StorageConfig.for_admin(db_path), clock=fixed_clock)
    gateway.close()
    return db_path


@pytest.fixture
def recording_gateway() -> RecordingGateway:
    """Provide a gateway fake recording store lookups.

    Returns
    -------
    RecordingGateway
        Fresh fake with no stored settings.
    """
    return RecordingGateway()


@pytest.fixture
def materializer() -> FakeMaterializer:
    """Provide a materializer fake that always succeeds.

    Returns
    -------
    FakeMaterializer
        Fresh fake with no recorded calls.
    """
    return FakeMaterializer()
