"""Prefect 3 flow running the new code period step for one analysis."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from prefect import flow

from newcodeperiod.config.models import AnalysisConfig, PeriodsStepConfig
from newcodeperiod.period.holder import PeriodHolder
from newcodeperiod.period.materializer import PeriodMaterializer
from newcodeperiod.period.period import Period
from newcodeperiod.pipeline.messages import Message, TaskMessages
from newcodeperiod.pipeline.orchestration.core import PipelineContext
from newcodeperiod.pipeline.orchestration.prefect_adapter import run_pipeline_as_tasks
from newcodeperiod.pipeline.orchestration.steps import PIPELINE_STEPS, run_pipeline
from newcodeperiod.storage.gateway import open_gateway

log = logging.getLogger(__name__)

StepRunner = Callable[[PipelineContext], None]


@dataclass(frozen=True)
class PeriodsFlowArgs:
    """Inputs for the load_periods Prefect flow."""

    analysis: AnalysisConfig
    storage: PeriodsStepConfig = field(default_factory=PeriodsStepConfig)


@dataclass(frozen=True)
class PeriodsFlowResult:
    """Analysis-scoped state produced by the flow."""

    period: Period | None
    messages: tuple[Message, ...]


def run_periods(
    args: PeriodsFlowArgs,
    materializer: PeriodMaterializer,
    *,
    runner: StepRunner = run_pipeline,
) -> PeriodsFlowResult:
    """
    Open the settings store, run the period step and collect its outputs.

    The gateway is closed before returning, including when the step fails.

    Returns
    -------
    PeriodsFlowResult
        Published period (possibly ``None``) and task messages.
    """
    gateway = open_gateway(args.storage.storage_config())
    try:
        ctx = PipelineContext(
            metadata=args.analysis.to_metadata(),
            gateway=gateway,
            materializer=materializer,
            period_holder=PeriodHolder(),
            messages=TaskMessages(),
        )
        runner(ctx)
        period = ctx.period_holder.get_period() if ctx.period_holder.has_period() else None
        return PeriodsFlowResult(period=period, messages=ctx.messages.messages)
    finally:
        gateway.close()


@flow(name="newcodeperiod_load_periods", validate_parameters=False)
def load_periods_flow(args: PeriodsFlowArgs, materializer: PeriodMaterializer) -> PeriodsFlowResult:
    """
    Resolve the new code period of one analysis under Prefect orchestration.

    Returns
    -------
    PeriodsFlowResult
        Published period and task messages.
    """
    log.info(
        "Loading new code period for project=%s branch=%s",
        args.analysis.project_uuid,
        args.analysis.branch_uuid,
    )
    return run_periods(
        args,
        materializer,
        runner=lambda ctx: run_pipeline_as_tasks(ctx, PIPELINE_STEPS),
    )


__all__ = ["PeriodsFlowArgs", "PeriodsFlowResult", "load_periods_flow", "run_periods"]
