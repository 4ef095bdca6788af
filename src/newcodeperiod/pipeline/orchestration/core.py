"""Shared orchestration primitives for pipeline steps."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from newcodeperiod.analysis.metadata import AnalysisContextProvider
from newcodeperiod.period.holder import PeriodHolder
from newcodeperiod.period.materializer import PeriodMaterializer
from newcodeperiod.pipeline.messages import TaskMessages
from newcodeperiod.storage.gateway import StorageGateway
from newcodeperiod.storage.repositories.base import Clock, system_clock

log = logging.getLogger(__name__)


class StepPhase(Enum):
    """Classification of pipeline step phases."""

    PERIODS = "periods"


@dataclass(frozen=True)
class StepMetadata:
    """
    Machine-readable metadata for a pipeline step.

    Parameters
    ----------
    name
        Unique step identifier.
    description
        Human-readable description of what the step does.
    phase
        Pipeline phase this step belongs to.
    deps
        Names of steps this step depends on.
    """

    name: str
    description: str
    phase: StepPhase
    deps: tuple[str, ...]


def _log_step(name: str) -> None:
    """Log step execution at debug level."""
    log.debug("Running pipeline step: %s", name)


@dataclass
class PipelineContext:
    """
    Shared context passed to every pipeline step of one analysis.

    ``period_holder`` and ``messages`` are analysis-scoped: build a fresh
    context for every analysis run.
    """

    metadata: AnalysisContextProvider
    gateway: StorageGateway
    materializer: PeriodMaterializer
    period_holder: PeriodHolder = field(default_factory=PeriodHolder)
    messages: TaskMessages = field(default_factory=TaskMessages)
    clock: Clock = system_clock


class PipelineStep(Protocol):
    """
    Contract for pipeline steps.

    Each step must define:
    - name: Unique identifier for the step.
    - description: Human-readable description of the step's purpose.
    - phase: The pipeline phase this step belongs to.
    - deps: Sequence of step names this step depends on.
    - run(): Method to execute the step with a PipelineContext.
    """

    name: str
    description: str
    phase: StepPhase
    deps: Sequence[str]

    def run(self, ctx: PipelineContext) -> None:
        """Execute the step using shared context."""


def step_metadata(step: PipelineStep) -> StepMetadata:
    """
    Describe a step as immutable metadata.

    Returns
    -------
    StepMetadata
        Name, description, phase and dependencies of the step.
    """
    return StepMetadata(
        name=step.name,
        description=step.description,
        phase=step.phase,
        deps=tuple(step.deps),
    )


__all__ = [
    "PipelineContext",
    "PipelineStep",
    "StepMetadata",
    "StepPhase",
    "_log_step",
    "step_metadata",
]
