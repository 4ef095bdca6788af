"""New code period setting types.

A setting describes how "new code" is bounded for an analysis. The persisted
form is a ``(type, value)`` pair; in memory each type is its own frozen
dataclass so a parameterless type cannot carry a value and a parameterised
type cannot be built without one.
"""

from __future__ import annotations

from dataclasses import dataclass
import datetime
from enum import Enum
from typing import ClassVar


class NewCodePeriodType(Enum):
    """Persisted discriminator for new code period settings."""

    PREVIOUS_VERSION = "PREVIOUS_VERSION"
    NUMBER_OF_DAYS = "NUMBER_OF_DAYS"
    DATE = "DATE"
    VERSION = "VERSION"
    SPECIFIC_ANALYSIS = "SPECIFIC_ANALYSIS"
    REFERENCE_BRANCH = "REFERENCE_BRANCH"

    @property
    def requires_value(self) -> bool:
        """Whether settings of this type carry a non-blank value."""
        return self is not NewCodePeriodType.PREVIOUS_VERSION


def _require_value(kind: NewCodePeriodType, value: str) -> None:
    if not isinstance(value, str) or not value.strip():
        message = f"New code period of type {kind.value} requires a non-blank value"
        raise ValueError(message)


@dataclass(frozen=True)
class _ValuedSetting:
    """Base for setting variants that carry a parameter."""

    type: ClassVar[NewCodePeriodType]

    value: str

    def __post_init__(self) -> None:
        """Reject blank parameters at construction time."""
        _require_value(self.type, self.value)


@dataclass(frozen=True)
class PreviousVersion:
    """Baseline is the last analysis of the previous project version."""

    type: ClassVar[NewCodePeriodType] = NewCodePeriodType.PREVIOUS_VERSION

    @property
    def value(self) -> None:
        """Previous-version settings never carry a value."""
        return None


@dataclass(frozen=True)
class NumberOfDays(_ValuedSetting):
    """Baseline is the first analysis older than ``value`` days."""

    type: ClassVar[NewCodePeriodType] = NewCodePeriodType.NUMBER_OF_DAYS

    @property
    def days(self) -> int:
        """
        Return the configured day count.

        Returns
        -------
        int
            Parsed number of days.

        Raises
        ------
        ValueError
            If the stored value is not a positive integer.
        """
        days = int(self.value)
        if days <= 0:
            message = f"Number of days must be positive, got {self.value!r}"
            raise ValueError(message)
        return days


@dataclass(frozen=True)
class Date(_ValuedSetting):
    """Baseline is the first analysis on or after an ISO date."""

    type: ClassVar[NewCodePeriodType] = NewCodePeriodType.DATE

    @property
    def date(self) -> datetime.date:
        """Parsed ISO-8601 calendar date."""
        return datetime.date.fromisoformat(self.value)


@dataclass(frozen=True)
class Version(_ValuedSetting):
    """Baseline is the first analysis of a named project version."""

    type: ClassVar[NewCodePeriodType] = NewCodePeriodType.VERSION


@dataclass(frozen=True)
class SpecificAnalysis(_ValuedSetting):
    """Baseline is a single analysis identified by its uuid."""

    type: ClassVar[NewCodePeriodType] = NewCodePeriodType.SPECIFIC_ANALYSIS


@dataclass(frozen=True)
class ReferenceBranch(_ValuedSetting):
    """Baseline is the latest analysis of another branch."""

    type: ClassVar[NewCodePeriodType] = NewCodePeriodType.REFERENCE_BRANCH


NewCodePeriodSetting = (
    PreviousVersion | NumberOfDays | Date | Version | SpecificAnalysis | ReferenceBranch
)
"""Closed union of every new code period setting variant."""

_VALUED_VARIANTS: dict[NewCodePeriodType, type[_ValuedSetting]] = {
    NewCodePeriodType.NUMBER_OF_DAYS: NumberOfDays,
    NewCodePeriodType.DATE: Date,
    NewCodePeriodType.VERSION: Version,
    NewCodePeriodType.SPECIFIC_ANALYSIS: SpecificAnalysis,
    NewCodePeriodType.REFERENCE_BRANCH: ReferenceBranch,
}


def default_setting() -> NewCodePeriodSetting:
    """
    Return the fallback used when no setting is configured anywhere.

    Returns
    -------
    NewCodePeriodSetting
        A previous-version setting.
    """
    return PreviousVersion()


def setting_from_record(
    kind: NewCodePeriodType | str,
    value: str | None,
) -> NewCodePeriodSetting:
    """
    Build a setting variant from its persisted ``(type, value)`` pair.

    Parameters
    ----------
    kind
        Enum member or its persisted string form.
    value
        Stored value; ignored for previous-version settings.

    Returns
    -------
    NewCodePeriodSetting
        Matching setting variant.

    Raises
    ------
    ValueError
        If the type is unknown or a required value is blank.
    """
    resolved = kind if isinstance(kind, NewCodePeriodType) else NewCodePeriodType(kind)
    if resolved is NewCodePeriodType.PREVIOUS_VERSION:
        return PreviousVersion()
    if value is None:
        _require_value(resolved, "")
    return _VALUED_VARIANTS[resolved](value)  # type: ignore[arg-type]


__all__ = [
    "Date",
    "NewCodePeriodSetting",
    "NewCodePeriodType",
    "NumberOfDays",
    "PreviousVersion",
    "ReferenceBranch",
    "SpecificAnalysis",
    "Version",
    "default_setting",
    "setting_from_record",
]
