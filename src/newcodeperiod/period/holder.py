"""Single-assignment holder for the analysis new code period."""

from __future__ import annotations

import logging
from enum import Enum

from newcodeperiod.period.period import Period

log = logging.getLogger(__name__)


class PeriodHolderStateError(RuntimeError):
    """Raised on a second write, or a read before the first write."""


class _HolderState(Enum):
    UNSET = "unset"
    SET = "set"


class PeriodHolder:
    """
    Analysis-scoped period storage accepting exactly one write.

    The stored period may be ``None``, which means "no new code period" and is
    distinct from the holder not being initialized yet.
    """

    def __init__(self) -> None:
        self._state = _HolderState.UNSET
        self._period: Period | None = None

    @property
    def is_initialized(self) -> bool:
        """Whether a value (possibly ``None``) has been published."""
        return self._state is _HolderState.SET

    def set_period(self, period: Period | None) -> None:
        """
        Publish the analysis period.

        Raises
        ------
        PeriodHolderStateError
            If a period was already published for this analysis.
        """
        if self._state is _HolderState.SET:
            message = "Period has already been set for this analysis"
            raise PeriodHolderStateError(message)
        self._period = period
        self._state = _HolderState.SET
        log.info("New code period published: %s", period)

    def has_period(self) -> bool:
        """
        Return whether a non-null period was published.

        Raises
        ------
        PeriodHolderStateError
            If the holder has not been initialized.
        """
        self._check_initialized()
        return self._period is not None

    def get_period(self) -> Period:
        """
        Return the published period.

        Raises
        ------
        PeriodHolderStateError
            If the holder is uninitialized or holds no period.
        """
        self._check_initialized()
        if self._period is None:
            message = "There is no period; use has_period() before get_period()"
            raise PeriodHolderStateError(message)
        return self._period

    def _check_initialized(self) -> None:
        if self._state is _HolderState.UNSET:
            message = "Period has not been initialized yet"
            raise PeriodHolderStateError(message)


__all__ = ["PeriodHolder", "PeriodHolderStateError"]
