"""Analysis metadata for the branch under analysis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class AnalysisContextProvider(Protocol):
    """Read-only view of the current analysis supplied by the pipeline driver."""

    project_uuid: str
    branch_uuid: str
    project_version: str | None

    def is_branch_analysis(self) -> bool:
        """Whether the analysis target is a branch."""
        ...

    def is_first_analysis(self) -> bool:
        """Whether the branch has never been analyzed before."""
        ...

    def reference_override(self) -> str | None:
        """Scanner-supplied reference branch, if any."""
        ...


@dataclass(frozen=True)
class AnalysisMetadata:
    """
    Immutable metadata describing one analysis of a branch.

    Attributes
    ----------
    project_uuid : str
        Unique identifier of the analyzed project.
    branch_uuid : str
        Unique identifier of the analyzed branch (the component tree root).
    is_branch : bool
        False for the main-component-only case, which never has a period.
    first_analysis : bool
        True when no previous analysis of this branch exists.
    new_code_reference_branch : str | None
        Reference branch passed on the scanner command line.
    project_version : str | None
        Version declared by the scanner for this analysis.
    """

    project_uuid: str
    branch_uuid: str
    is_branch: bool = True
    first_analysis: bool = False
    new_code_reference_branch: str | None = None
    project_version: str | None = None

    def is_branch_analysis(self) -> bool:
        """Return whether the analysis target is a branch."""
        return self.is_branch

    def is_first_analysis(self) -> bool:
        """Return whether this is the first analysis of the branch."""
        return self.first_analysis

    def reference_override(self) -> str | None:
        """
        Return the scanner reference branch when it is non-blank.

        Returns
        -------
        str | None
            Override branch name, or ``None`` when absent or blank.
        """
        value = self.new_code_reference_branch
        if value is None or not value.strip():
            return None
        return value


__all__ = ["AnalysisContextProvider", "AnalysisMetadata"]
