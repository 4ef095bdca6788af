"""Contract for turning an effective setting into a concrete period."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from newcodeperiod.core.types import NewCodePeriodSetting
from newcodeperiod.period.period import Period
from newcodeperiod.services.errors import ProblemError, problem
from newcodeperiod.storage.repositories.new_code_periods import NewCodePeriodRepository


@runtime_checkable
class PeriodMaterializer(Protocol):
    """Match an effective setting against analysis history."""

    def resolve(
        self,
        repository: NewCodePeriodRepository,
        branch_uuid: str,
        setting: NewCodePeriodSetting,
        project_version: str | None,
    ) -> Period:
        """
        Return the period matching ``setting`` for the analyzed branch.

        Implementations share the step's open store session through
        ``repository`` and raise :class:`PeriodMaterializationError` when no
        analysis matches.
        """
        ...


class PeriodMaterializationError(ProblemError):
    """User-facing failure: the setting cannot be matched to any analysis."""

    @classmethod
    def unmatched(cls, setting: NewCodePeriodSetting, reason: str) -> PeriodMaterializationError:
        """
        Build an error for a setting without a matching analysis.

        Returns
        -------
        PeriodMaterializationError
            Error carrying a ``period.unmatched`` problem detail.
        """
        detail = problem(
            code="period.unmatched",
            title="New code period cannot be resolved",
            detail=reason,
            extras={"type": setting.type.value, "value": setting.value},
        )
        return cls(detail)


__all__ = ["PeriodMaterializationError", "PeriodMaterializer"]
