"""Materialized new code period value."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from newcodeperiod.core.types import NewCodePeriodSetting


@dataclass(frozen=True)
class Period:
    """
    Concrete baseline produced by matching a setting against analysis history.

    Parameters
    ----------
    mode
        Persisted type of the setting this period was derived from.
    mode_parameter
        Setting value, or the resolved parameter (e.g. the matched version).
    date
        Epoch milliseconds of the baseline analysis, when one exists.
    """

    mode: str
    mode_parameter: str | None = None
    date: int | None = None

    @classmethod
    def from_setting(
        cls,
        setting: NewCodePeriodSetting,
        *,
        date: int | None = None,
        mode_parameter: str | None = None,
    ) -> Period:
        """
        Build a period whose mode mirrors the given setting.

        Returns
        -------
        Period
            Period tagged with the setting's type and value.
        """
        parameter = mode_parameter if mode_parameter is not None else setting.value
        return cls(mode=setting.type.value, mode_parameter=parameter, date=date)

    @property
    def baseline(self) -> datetime | None:
        """UTC timestamp of the baseline analysis, if any."""
        if self.date is None:
            return None
        return datetime.fromtimestamp(self.date / 1000, tz=UTC)

    def to_dict(self) -> dict[str, object]:
        """
        Serialize to a JSON-friendly mapping.

        Returns
        -------
        dict[str, object]
            Mode, parameter and date.
        """
        return {"mode": self.mode, "mode_parameter": self.mode_parameter, "date": self.date}


__all__ = ["Period"]
