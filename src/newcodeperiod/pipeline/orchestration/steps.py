"""Pipeline step registry and execution helpers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from newcodeperiod.pipeline.orchestration.core import (
    PipelineContext,
    PipelineStep,
    StepMetadata,
    step_metadata,
)
from newcodeperiod.pipeline.orchestration.steps_periods import PERIOD_STEPS, LoadPeriodsStep

PIPELINE_STEPS: dict[str, PipelineStep] = {}
PIPELINE_STEPS.update(PERIOD_STEPS)


def list_steps(steps: Mapping[str, PipelineStep] | None = None) -> list[StepMetadata]:
    """
    Return metadata for registered steps in execution order.

    Returns
    -------
    list[StepMetadata]
        One entry per registered step.
    """
    registry = PIPELINE_STEPS if steps is None else steps
    return [step_metadata(step) for step in registry.values()]


def _ordered(step_names: Sequence[str], steps: Mapping[str, PipelineStep]) -> list[str]:
    """
    Order requested steps so that dependencies run first.

    Raises
    ------
    KeyError
        If a step or one of its dependencies is not registered.
    """
    ordered: list[str] = []

    def visit(name: str) -> None:
        if name in ordered:
            return
        if name not in steps:
            message = f"Unknown pipeline step: {name}"
            raise KeyError(message)
        for dep in steps[name].deps:
            visit(dep)
        ordered.append(name)

    for name in step_names:
        visit(name)
    return ordered


def run_pipeline(
    ctx: PipelineContext,
    *,
    selected_steps: Sequence[str] | None = None,
    steps: Mapping[str, PipelineStep] | None = None,
) -> None:
    """
    Execute pipeline steps in dependency order using the shared context.

    Parameters
    ----------
    ctx
        PipelineContext for the current analysis.
    selected_steps
        Optional subset of steps to execute; dependencies are included automatically.
    steps
        Step registry; defaults to the built-in steps.

    Raises
    ------
    KeyError
        If a requested step name is not registered.
    """
    registry = PIPELINE_STEPS if steps is None else steps
    names = tuple(selected_steps) if selected_steps is not None else tuple(registry)
    for name in _ordered(names, registry):
        registry[name].run(ctx)


__all__ = [
    "PIPELINE_STEPS",
    "LoadPeriodsStep",
    "PipelineContext",
    "PipelineStep",
    "list_steps",
    "run_pipeline",
]
