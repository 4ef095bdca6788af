"""Boundary configuration models for the new code period pipeline."""

from __future__ import annotations

from newcodeperiod.config.models import AnalysisConfig, PeriodsStepConfig

__all__ = ["AnalysisConfig", "PeriodsStepConfig"]
