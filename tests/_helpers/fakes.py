"""Typed fakes for the settings store, gateway and period materializer."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from newcodeperiod.core.types import NewCodePeriodSetting
from newcodeperiod.period.materializer import PeriodMaterializationError
from newcodeperiod.period.period import Period
from newcodeperiod.storage.gateway import StorageConfig

FIXED_NOW_MS = 1_700_000_000_000


def fixed_clock() -> int:
    """Return a constant timestamp."""
    return FIXED_NOW_MS


@dataclass
class RecordingSettingsStore:
    """In-memory settings store that records every lookup in call order."""

    branch: dict[tuple[str, str], NewCodePeriodSetting] = field(default_factory=dict)
    project: dict[str, NewCodePeriodSetting] = field(default_factory=dict)
    global_setting: NewCodePeriodSetting | None = None
    calls: list[str] = field(default_factory=list)

    def select_by_branch(self, project_uuid: str, branch_uuid: str) -> NewCodePeriodSetting | None:
        """Return the branch-level setting, if any."""
        self.calls.append("branch")
        return self.branch.get((project_uuid, branch_uuid))

    def select_by_project(self, project_uuid: str) -> NewCodePeriodSetting | None:
        """Return the project-level setting, if any."""
        self.calls.append("project")
        return self.project.get(project_uuid)

    def select_global(self) -> NewCodePeriodSetting | None:
        """Return the global setting, if any."""
        self.calls.append("global")
        return self.global_setting


@dataclass
class RecordingGateway:
    """Gateway fake handing out a recording store and counting sessions."""

    store: RecordingSettingsStore = field(default_factory=RecordingSettingsStore)
    config: StorageConfig = field(default_factory=lambda: StorageConfig(db_path=":memory:"))
    opened: int = 0
    closed: int = 0

    @property
    def con(self) -> object:
        """Fake gateways expose no real connection."""
        message = "RecordingGateway has no DuckDB connection"
        raise RuntimeError(message)

    @contextmanager
    def session(self) -> Iterator[RecordingSettingsStore]:
        """Yield the store and count open/close pairs."""
        self.opened += 1
        try:
            yield self.store
        finally:
            self.closed += 1

    def close(self) -> None:
        """Nothing to release."""


@dataclass
class FakeMaterializer:
    """Materializer returning a period mirroring the setting, or failing on demand."""

    date: int | None = FIXED_NOW_MS
    fail_with: str | None = None
    calls: list[tuple[str, NewCodePeriodSetting, str | None]] = field(default_factory=list)

    def resolve(
        self,
        repository: object,
        branch_uuid: str,
        setting: NewCodePeriodSetting,
        project_version: str | None,
    ) -> Period:
        """
        Record the call and return a period tagged with the setting.

        Raises
        ------
        PeriodMaterializationError
            When ``fail_with`` is set.
        """
        _ = repository
        self.calls.append((branch_uuid, setting, project_version))
        if self.fail_with is not None:
            raise PeriodMaterializationError.unmatched(setting, self.fail_with)
        return Period.from_setting(setting, date=self.date)
