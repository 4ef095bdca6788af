"""Problem Details errors raised by period resolution and the CLI."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

PROBLEM_TYPE_BASE = "https://problems.newcodeperiod.dev/"


@dataclass(frozen=True)
class ProblemDetail:
    """
    RFC 9457 payload keyed by a stable dotted code.

    Attributes
    ----------
    code : str
        Stable identifier such as ``period.unmatched`` or ``cli.storage_failure``.
    title : str
        Short summary of the problem class.
    detail : str
        Occurrence-specific message shown to the user.
    extras : dict[str, Any]
        Structured context, e.g. the setting type and value that failed.
    instance : str
        Identifier of this occurrence, used to correlate logs.
    """

    code: str
    title: str
    detail: str
    extras: dict[str, Any] = field(default_factory=dict)
    instance: str = field(default_factory=lambda: str(uuid4()))

    @property
    def type(self) -> str:
        """Type URI derived from the problem code."""
        return f"{PROBLEM_TYPE_BASE}{self.code}"

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to a JSON-friendly dict.

        Returns
        -------
        dict[str, Any]
            Problem detail payload; ``extras`` is omitted when empty.
        """
        payload: dict[str, Any] = {
            "type": self.type,
            "code": self.code,
            "title": self.title,
            "detail": self.detail,
            "instance": self.instance,
        }
        if self.extras:
            payload["extras"] = self.extras
        return payload


def problem(
    code: str,
    title: str,
    detail: str,
    *,
    extras: dict[str, Any] | None = None,
) -> ProblemDetail:
    """
    Create a ProblemDetail with a fresh instance id.

    Returns
    -------
    ProblemDetail
        Structured problem payload.
    """
    return ProblemDetail(code=code, title=title, detail=detail, extras=dict(extras or {}))


def log_problem(logger: logging.Logger | logging.LoggerAdapter, detail: ProblemDetail) -> None:
    """Emit a Problem Detail as one JSON error line."""
    logger.error(json.dumps(detail.to_dict()))


class ProblemError(Exception):
    """Exception carrying a ProblemDetail payload."""

    def __init__(self, detail: ProblemDetail) -> None:
        super().__init__(detail.detail)
        self.problem_detail = detail

    @property
    def code(self) -> str:
        """Stable code of the carried problem."""
        return self.problem_detail.code


class ValidationError(ProblemError):
    """Invalid analysis parameters supplied at the process boundary."""


__all__ = [
    "PROBLEM_TYPE_BASE",
    "ProblemDetail",
    "ProblemError",
    "ValidationError",
    "log_problem",
    "problem",
]
