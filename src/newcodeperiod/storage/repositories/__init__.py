"""Repositories over the settings database."""

from __future__ import annotations

from newcodeperiod.storage.repositories.new_code_periods import (
    NewCodePeriodRecord,
    NewCodePeriodRepository,
)

__all__ = ["NewCodePeriodRecord", "NewCodePeriodRepository"]
