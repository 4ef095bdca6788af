"""Read-only analysis metadata consumed by pipeline steps."""

from __future__ import annotations

from newcodeperiod.analysis.metadata import AnalysisContextProvider, AnalysisMetadata

__all__ = ["AnalysisContextProvider", "AnalysisMetadata"]
