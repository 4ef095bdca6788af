"""Prefect task wrapper factory for pipeline steps."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING

from prefect import task
from prefect.cache_policies import NO_CACHE

from newcodeperiod.pipeline.orchestration.core import PipelineStep
from newcodeperiod.pipeline.orchestration.steps import _ordered

if TYPE_CHECKING:
    from newcodeperiod.pipeline.orchestration.core import PipelineContext

log = logging.getLogger(__name__)


def make_prefect_task(step: PipelineStep) -> Callable[[PipelineContext], None]:
    """
    Wrap a PipelineStep as a Prefect task.

    Steps publish into single-assignment state; the task is created without
    retries.

    Parameters
    ----------
    step
        The pipeline step to wrap.

    Returns
    -------
    Callable[[PipelineContext], None]
        A Prefect task function that executes the step.
    """

    @task(name=step.name, retries=0, cache_policy=NO_CACHE)
    def _task(ctx: PipelineContext) -> None:
        log.debug("Running Prefect task for step: %s", step.name)
        step.run(ctx)

    _task.step = step  # type: ignore[attr-defined]
    _task.step_name = step.name  # type: ignore[attr-defined]
    return _task


def run_pipeline_as_tasks(
    ctx: PipelineContext,
    steps: Mapping[str, PipelineStep],
    *,
    selected_steps: Sequence[str] | None = None,
) -> None:
    """
    Execute pipeline steps as individual Prefect tasks in dependency order.

    Raises
    ------
    KeyError
        If a requested step name is not registered.
    """
    names = tuple(selected_steps) if selected_steps is not None else tuple(steps)
    for name in _ordered(names, steps):
        log.info("Executing step as Prefect task: %s", name)
        make_prefect_task(steps[name])(ctx)


__all__ = ["make_prefect_task", "run_pipeline_as_tasks"]
