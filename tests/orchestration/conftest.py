"""Prefect fixtures for running the period flow against a throwaway backend."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
from prefect.settings import PREFECT_API_KEY, PREFECT_API_URL, temporary_settings
from prefect.testing.utilities import prefect_test_harness


@pytest.fixture
def prefect_harness(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run flows on the ephemeral Prefect API with events and console logs muted."""
    monkeypatch.setenv("PREFECT_EVENTS_ENABLED", "false")
    prefect_logger = logging.getLogger("prefect")
    previous_level = prefect_logger.level
    prefect_logger.setLevel(logging.CRITICAL)
    try:
        with (
            temporary_settings({PREFECT_API_URL: None, PREFECT_API_KEY: "testing-disable-events"}),
            prefect_test_harness(),
        ):
            yield
    finally:
        prefect_logger.setLevel(previous_level)
