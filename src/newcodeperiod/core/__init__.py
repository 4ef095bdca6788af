"""Core value types shared across the new code period pipeline."""

from __future__ import annotations

from newcodeperiod.core.types import (
    Date,
    NewCodePeriodSetting,
    NewCodePeriodType,
    NumberOfDays,
    PreviousVersion,
    ReferenceBranch,
    SpecificAnalysis,
    Version,
    default_setting,
    setting_from_record,
)

__all__ = [
    "Date",
    "NewCodePeriodSetting",
    "NewCodePeriodType",
    "NumberOfDays",
    "PreviousVersion",
    "ReferenceBranch",
    "SpecificAnalysis",
    "Version",
    "default_setting",
    "setting_from_record",
]
