"""Load the new code period of the analyzed branch.

The effective setting is chosen as follows:

- a non-blank reference branch passed by the scanner always wins;
- otherwise the first configured of branch, project and global settings,
  falling back to the default (previous version);
- a first analysis without an explicit reference branch has no period.

The chosen setting is handed to the materializer and the resulting period is
published to the period holder.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, TypeVar

from newcodeperiod.analysis.metadata import AnalysisContextProvider
from newcodeperiod.core.types import (
    NewCodePeriodSetting,
    NewCodePeriodType,
    ReferenceBranch,
    default_setting,
)
from newcodeperiod.pipeline.orchestration.core import (
    PipelineContext,
    PipelineStep,
    StepPhase,
    _log_step,
)

log = logging.getLogger(__name__)

T = TypeVar("T")

CONFLICT_MESSAGE = (
    "A scanner parameter is defining a new code reference branch but one is already defined"
    " in the New Code Period settings. Please check your configuration to make sure it is"
    " expected."
)


class SettingsLookup(Protocol):
    """Read side of the settings store used by the selection."""

    def select_by_branch(self, project_uuid: str, branch_uuid: str) -> NewCodePeriodSetting | None:
        """Return the branch-level setting, if any."""
        ...

    def select_by_project(self, project_uuid: str) -> NewCodePeriodSetting | None:
        """Return the project-level setting, if any."""
        ...

    def select_global(self) -> NewCodePeriodSetting | None:
        """Return the global setting, if any."""
        ...


class SettingSource(Enum):
    """Where the effective setting came from."""

    OVERRIDE = "override"
    BRANCH = "branch"
    PROJECT = "project"
    GLOBAL = "global"
    DEFAULT = "default"


class SkipReason(Enum):
    """Why no period is computed for an analysis."""

    NOT_BRANCH = "not_branch"
    FIRST_ANALYSIS = "first_analysis"


@dataclass(frozen=True)
class SettingSelection:
    """
    Outcome of choosing the effective new code period setting.

    Attributes
    ----------
    setting : NewCodePeriodSetting | None
        Effective setting, or ``None`` when the analysis has no period.
    source : SettingSource | None
        Origin of ``setting``; ``None`` when the analysis is skipped before
        any lookup.
    conflict : bool
        True when a scanner override shadows a branch or project setting.
    skipped : SkipReason | None
        Reason no period is computed, if any.
    """

    setting: NewCodePeriodSetting | None
    source: SettingSource | None
    conflict: bool = False
    skipped: SkipReason | None = None

    def to_dict(self) -> dict[str, object]:
        """
        Serialize to a JSON-friendly mapping.

        Returns
        -------
        dict[str, object]
            Effective setting, source, conflict flag and skip reason.
        """
        setting = (
            None
            if self.setting is None
            else {"type": self.setting.type.value, "value": self.setting.value}
        )
        return {
            "setting": setting,
            "source": None if self.source is None else self.source.value,
            "conflict": self.conflict,
            "skipped": None if self.skipped is None else self.skipped.value,
        }


def _first_present(
    probes: Iterable[tuple[SettingSource, Callable[[], T | None]]],
) -> tuple[SettingSource, T] | None:
    """Evaluate probes in order and stop at the first non-null result."""
    for source, probe in probes:
        result = probe()
        if result is not None:
            return source, result
    return None


def select_setting(
    metadata: AnalysisContextProvider,
    repository: SettingsLookup,
) -> SettingSelection:
    """
    Choose the effective new code period setting for an analysis.

    Lookups stop at the first configured scope, so lower-priority scopes are
    never queried once a higher one matches. Non-branch analyses issue no
    lookup at all.

    Parameters
    ----------
    metadata
        Analysis being processed.
    repository
        Settings store session.

    Returns
    -------
    SettingSelection
        Effective setting with its origin, or a skip reason.
    """
    if not metadata.is_branch_analysis():
        return SettingSelection(setting=None, source=None, skipped=SkipReason.NOT_BRANCH)

    project_uuid = metadata.project_uuid
    branch_uuid = metadata.branch_uuid
    override_branch = metadata.reference_override()

    specific = _first_present(
        (
            (SettingSource.BRANCH, lambda: repository.select_by_branch(project_uuid, branch_uuid)),
            (SettingSource.PROJECT, lambda: repository.select_by_project(project_uuid)),
        )
    )

    if override_branch is not None:
        return SettingSelection(
            setting=ReferenceBranch(override_branch),
            source=SettingSource.OVERRIDE,
            conflict=specific is not None,
        )

    if specific is not None:
        source, setting = specific
    else:
        global_setting = repository.select_global()
        if global_setting is not None:
            source, setting = SettingSource.GLOBAL, global_setting
        else:
            source, setting = SettingSource.DEFAULT, default_setting()

    if metadata.is_first_analysis() and setting.type is not NewCodePeriodType.REFERENCE_BRANCH:
        return SettingSelection(setting=None, source=source, skipped=SkipReason.FIRST_ANALYSIS)
    return SettingSelection(setting=setting, source=source)


@dataclass
class LoadPeriodsStep:
    """Resolve the new code period and publish it to the period holder."""

    name: str = "load_periods"
    description: str = "Load new code period"
    phase: StepPhase = StepPhase.PERIODS
    deps: Sequence[str] = ()

    def run(self, ctx: PipelineContext) -> None:
        """
        Select the effective setting, materialize it and publish the period.

        Materializer errors propagate unchanged; the store session is closed
        on every exit path.
        """
        _log_step(self.name)
        metadata = ctx.metadata
        if not metadata.is_branch_analysis():
            log.debug("Analysis target is not a branch; no new code period")
            ctx.period_holder.set_period(None)
            return

        with ctx.gateway.session() as repository:
            selection = select_setting(metadata, repository)
            if selection.conflict:
                log.warning(
                    "Reference branch override conflicts with stored settings for project %s",
                    metadata.project_uuid,
                )
                ctx.messages.append(CONFLICT_MESSAGE, ctx.clock())

            if selection.setting is None:
                log.debug("No new code period: %s", selection.skipped)
                ctx.period_holder.set_period(None)
                return

            log.debug(
                "Effective new code period %s=%s from %s",
                selection.setting.type.value,
                selection.setting.value,
                selection.source,
            )
            period = ctx.materializer.resolve(
                repository,
                metadata.branch_uuid,
                selection.setting,
                metadata.project_version,
            )
            ctx.period_holder.set_period(period)


PERIOD_STEPS: dict[str, PipelineStep] = {
    "load_periods": LoadPeriodsStep(),
}


__all__ = [
    "CONFLICT_MESSAGE",
    "PERIOD_STEPS",
    "LoadPeriodsStep",
    "SettingSelection",
    "SettingSource",
    "SettingsLookup",
    "SkipReason",
    "select_setting",
]
