"""
Configuration models used by the CLI and the Prefect flow.

These Pydantic models validate raw inputs at the process boundary and convert
them into the frozen dataclasses consumed by pipeline steps.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from newcodeperiod.analysis.metadata import AnalysisMetadata
from newcodeperiod.storage.gateway import StorageConfig

DEFAULT_DB_PATH = Path("build/db/newcodeperiod.duckdb")


class AnalysisConfig(BaseModel):
    """Identity and scanner parameters of the analysis being processed."""

    model_config = ConfigDict(frozen=True)

    project_uuid: str = Field(..., min_length=1, description="Project unique identifier")
    branch_uuid: str = Field(..., min_length=1, description="Analyzed branch unique identifier")
    is_branch: bool = Field(True, description="False for the main-component-only case")
    is_first_analysis: bool = Field(False, description="No previous analysis of the branch exists")
    reference_branch: str | None = Field(
        default=None,
        description="Scanner-supplied new code reference branch",
    )
    project_version: str | None = Field(default=None, description="Declared project version")

    @field_validator("project_uuid", "branch_uuid")
    @classmethod
    def _strip_identifier(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            message = "identifier cannot be blank"
            raise ValueError(message)
        return stripped

    @field_validator("reference_branch", "project_version", mode="before")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        if v is None or not str(v).strip():
            return None
        return v

    def to_metadata(self) -> AnalysisMetadata:
        """
        Convert to the immutable metadata consumed by pipeline steps.

        Returns
        -------
        AnalysisMetadata
            Frozen analysis metadata.
        """
        return AnalysisMetadata(
            project_uuid=self.project_uuid,
            branch_uuid=self.branch_uuid,
            is_branch=self.is_branch,
            first_analysis=self.is_first_analysis,
            new_code_reference_branch=self.reference_branch,
            project_version=self.project_version,
        )


class PeriodsStepConfig(BaseModel):
    """Settings store location for the period step."""

    db_path: Path = Field(DEFAULT_DB_PATH, description="Path to the settings DuckDB database")
    read_only: bool = Field(True, description="Open the settings database read-only")

    @field_validator("db_path", mode="before")
    @classmethod
    def _expand_path(cls, v: Path | str) -> Path:
        return Path(str(v)).expanduser()

    def storage_config(self) -> StorageConfig:
        """
        Return the storage configuration for the settings database.

        Returns
        -------
        StorageConfig
            Read-only or admin configuration depending on ``read_only``.
        """
        if self.read_only:
            return StorageConfig.for_readonly(self.db_path)
        return StorageConfig.for_admin(self.db_path)


__all__ = ["DEFAULT_DB_PATH", "AnalysisConfig", "PeriodsStepConfig"]
