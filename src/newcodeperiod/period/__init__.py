"""Period values, the analysis-scoped period holder, and materializer contracts."""

from __future__ import annotations

from newcodeperiod.period.holder import PeriodHolder, PeriodHolderStateError
from newcodeperiod.period.materializer import PeriodMaterializationError, PeriodMaterializer
from newcodeperiod.period.period import Period

__all__ = [
    "Period",
    "PeriodHolder",
    "PeriodHolderStateError",
    "PeriodMaterializationError",
    "PeriodMaterializer",
]
