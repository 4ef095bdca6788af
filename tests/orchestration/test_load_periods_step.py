"""Tests for the load_periods pipeline step."""

from __future__ import annotations

import pytest

from newcodeperiod.analysis.metadata import AnalysisMetadata
from newcodeperiod.core.types import NumberOfDays, PreviousVersion, ReferenceBranch, Version
from newcodeperiod.period.holder import PeriodHolderStateError
from newcodeperiod.period.materializer import PeriodMaterializationError
from newcodeperiod.period.period import Period
from newcodeperiod.pipeline.orchestration.core import PipelineContext, StepPhase
from newcodeperiod.pipeline.orchestration.steps import run_pipeline
from newcodeperiod.pipeline.orchestration.steps_periods import CONFLICT_MESSAGE, LoadPeriodsStep
from newcodeperiod.storage.gateway import StorageGateway
from tests._helpers.expect import expect_equal, expect_length, expect_true
from tests._helpers.fakes import (
    FIXED_NOW_MS,
    FakeMaterializer,
    RecordingGateway,
    fixed_clock,
)

PROJECT = "project-uuid"
BRANCH = "branch-uuid"


def _context(
    gateway: RecordingGateway | StorageGateway,
    materializer: FakeMaterializer,
    *,
    is_branch: bool = True,
    first: bool = False,
    override: str | None = None,
) -> PipelineContext:
    metadata = AnalysisMetadata(
        project_uuid=PROJECT,
        branch_uuid=BRANCH,
        is_branch=is_branch,
        first_analysis=first,
        new_code_reference_branch=override,
        project_version="3.1",
    )
    return PipelineContext(
        metadata=metadata,
        gateway=gateway,  # type: ignore[arg-type]
        materializer=materializer,
        clock=fixed_clock,
    )


def test_step_metadata() -> None:
    """The step is registered under its pipeline name."""
    step = LoadPeriodsStep()
    expect_equal(step.name, "load_periods", label="name")
    expect_equal(step.phase, StepPhase.PERIODS, label="phase")
    expect_equal(tuple(step.deps), (), label="deps")


def test_not_a_branch_publishes_none_without_session(
    recording_gateway: RecordingGateway, materializer: FakeMaterializer
) -> None:
    """Scenario: non-branch analysis has no period and opens no session."""
    ctx = _context(recording_gateway, materializer, is_branch=False)
    LoadPeriodsStep().run(ctx)

    expect_true(not ctx.period_holder.has_period(), message="no period")
    expect_equal(recording_gateway.opened, 0, label="sessions")
    expect_equal(recording_gateway.store.calls, [], label="lookups")
    expect_equal(materializer.calls, [], label="materializer calls")


def test_first_analysis_without_settings_publishes_none(
    recording_gateway: RecordingGateway, materializer: FakeMaterializer
) -> None:
    """Scenario: first analysis with nothing configured has no period."""
    ctx = _context(recording_gateway, materializer, first=True)
    LoadPeriodsStep().run(ctx)

    expect_true(not ctx.period_holder.has_period(), message="no period")
    expect_equal(materializer.calls, [], label="materializer calls")
    expect_equal(recording_gateway.closed, 1, label="session closed")


def test_override_conflict_appends_one_message(
    recording_gateway: RecordingGateway, materializer: FakeMaterializer
) -> None:
    """Scenario: override with a project setting warns once and uses the override."""
    recording_gateway.store.project[PROJECT] = Version("1.0")
    ctx = _context(recording_gateway, materializer, override="main")
    LoadPeriodsStep().run(ctx)

    expect_equal(
        materializer.calls, [(BRANCH, ReferenceBranch("main"), "3.1")], label="materializer"
    )
    expect_equal(
        [(m.text, m.timestamp) for m in ctx.messages],
        [(CONFLICT_MESSAGE, FIXED_NOW_MS)],
        label="messages",
    )
    expect_equal(
        ctx.period_holder.get_period(),
        Period(mode="REFERENCE_BRANCH", mode_parameter="main", date=FIXED_NOW_MS),
        label="period",
    )


def test_override_with_only_global_adds_no_message(
    recording_gateway: RecordingGateway, materializer: FakeMaterializer
) -> None:
    """Overrides never conflict with the global setting."""
    recording_gateway.store.global_setting = NumberOfDays("30")
    ctx = _context(recording_gateway, materializer, override="main")
    LoadPeriodsStep().run(ctx)

    expect_length(ctx.messages, 0, label="messages")
    expect_equal(materializer.calls[0][1], ReferenceBranch("main"), label="effective setting")


def test_branch_setting_beats_project_setting(
    recording_gateway: RecordingGateway, materializer: FakeMaterializer
) -> None:
    """Scenario: branch-level days beat project-level version."""
    recording_gateway.store.branch[PROJECT, BRANCH] = NumberOfDays("30")
    recording_gateway.store.project[PROJECT] = Version("2.0")
    ctx = _context(recording_gateway, materializer)
    LoadPeriodsStep().run(ctx)

    expect_equal(materializer.calls, [(BRANCH, NumberOfDays("30"), "3.1")], label="materializer")
    expect_equal(ctx.period_holder.get_period().mode, "NUMBER_OF_DAYS", label="period mode")
    expect_length(ctx.messages, 0, label="messages")


def test_first_analysis_with_override_materializes(
    recording_gateway: RecordingGateway, materializer: FakeMaterializer
) -> None:
    """Reference branches are materialized even on a first analysis."""
    ctx = _context(recording_gateway, materializer, first=True, override="main")
    LoadPeriodsStep().run(ctx)

    expect_true(ctx.period_holder.has_period(), message="period published")
    expect_equal(materializer.calls[0][1], ReferenceBranch("main"), label="setting")


def test_default_setting_is_materialized(
    recording_gateway: RecordingGateway, materializer: FakeMaterializer
) -> None:
    """With no settings and a previous analysis the default is materialized."""
    ctx = _context(recording_gateway, materializer)
    LoadPeriodsStep().run(ctx)

    expect_equal(materializer.calls, [(BRANCH, PreviousVersion(), "3.1")], label="materializer")


def test_materializer_failure_propagates_and_closes_session(
    recording_gateway: RecordingGateway,
) -> None:
    """Unmatchable settings abort the step unchanged and leave the holder unset."""
    recording_gateway.store.project[PROJECT] = NumberOfDays("30")
    failing = FakeMaterializer(fail_with="No analysis older than 30 days")
    ctx = _context(recording_gateway, failing)

    with pytest.raises(PeriodMaterializationError, match="No analysis older than 30 days") as exc:
        LoadPeriodsStep().run(ctx)

    expect_equal(exc.value.problem_detail.code, "period.unmatched", label="problem code")
    expect_equal(recording_gateway.opened, recording_gateway.closed, label="session released")
    expect_true(not ctx.period_holder.is_initialized, message="holder untouched")


def test_running_twice_in_one_analysis_is_rejected(
    recording_gateway: RecordingGateway, materializer: FakeMaterializer
) -> None:
    """The holder refuses a second publication."""
    ctx = _context(recording_gateway, materializer, is_branch=False)
    step = LoadPeriodsStep()
    step.run(ctx)
    with pytest.raises(PeriodHolderStateError):
        step.run(ctx)


def test_run_pipeline_with_duckdb_store(
    memory_gateway: StorageGateway, materializer: FakeMaterializer
) -> None:
    """The default pipeline reads settings from DuckDB."""
    with memory_gateway.session() as repository:
        repository.upsert(Version("2.0"), project_uuid=PROJECT)
        repository.upsert(NumberOfDays("30"), project_uuid=PROJECT, branch_uuid=BRANCH)
        repository.upsert(PreviousVersion())

    ctx = _context(memory_gateway, materializer)
    run_pipeline(ctx)

    expect_equal(materializer.calls, [(BRANCH, NumberOfDays("30"), "3.1")], label="materializer")
    expect_equal(ctx.period_holder.get_period().mode_parameter, "30", label="period parameter")


def test_run_pipeline_rejects_unknown_step(
    recording_gateway: RecordingGateway, materializer: FakeMaterializer
) -> None:
    """Unknown step names fail before anything runs."""
    ctx = _context(recording_gateway, materializer)
    with pytest.raises(KeyError, match="Unknown pipeline step"):
        run_pipeline(ctx, selected_steps=["nope"])
    expect_true(not ctx.period_holder.is_initialized, message="holder unset")
