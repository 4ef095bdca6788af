"""CLI entrypoint for inspecting new code period selection."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable, Iterable
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from newcodeperiod.config.models import DEFAULT_DB_PATH, AnalysisConfig, PeriodsStepConfig
from newcodeperiod.pipeline.orchestration.steps import list_steps
from newcodeperiod.pipeline.orchestration.steps_periods import CONFLICT_MESSAGE, select_setting
from newcodeperiod.services.errors import ProblemError, ValidationError, log_problem, problem
from newcodeperiod.storage.gateway import DuckDBError, open_gateway

LOG = logging.getLogger("newcodeperiod.cli")

CommandHandler = Callable[[argparse.Namespace], int]


# ---------------------------------------------------------------------------
# Argument parsing / logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure logging based on -v/--verbose count.

    0 -> WARNING, 1 -> INFO, 2+ -> DEBUG.
    """
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _add_analysis_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--db-path",
        type=Path,
        default=DEFAULT_DB_PATH,
        help=f"Path to the settings DuckDB database (default: {DEFAULT_DB_PATH})",
    )
    p.add_argument("--project", required=True, help="Project unique identifier")
    p.add_argument("--branch", required=True, help="Analyzed branch unique identifier")
    p.add_argument(
        "--not-branch",
        action="store_true",
        help="Treat the analysis as the main-component-only case (never has a period)",
    )
    p.add_argument(
        "--first-analysis",
        action="store_true",
        help="Treat the analysis as the first analysis of the branch",
    )
    p.add_argument(
        "--reference-branch",
        default=None,
        help="Scanner-supplied new code reference branch",
    )
    p.add_argument("--project-version", default=None, help="Declared project version")


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="newcodeperiod",
        description="New code period selection diagnostics",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_explain = subparsers.add_parser(
        "explain",
        help="Show which new code period setting an analysis would use (no materialization)",
    )
    _add_analysis_args(p_explain)
    p_explain.set_defaults(func=_cmd_explain)

    p_steps = subparsers.add_parser("steps", help="List registered pipeline steps")
    p_steps.add_argument("--json", dest="output_json", action="store_true", help="Emit JSON")
    p_steps.set_defaults(func=_cmd_steps)
    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _analysis_from_args(args: argparse.Namespace) -> AnalysisConfig:
    try:
        return AnalysisConfig(
            project_uuid=args.project,
            branch_uuid=args.branch,
            is_branch=not args.not_branch,
            is_first_analysis=args.first_analysis,
            reference_branch=args.reference_branch,
            project_version=args.project_version,
        )
    except PydanticValidationError as exc:
        raise ValidationError(
            problem(
                code="cli.invalid_analysis",
                title="Invalid analysis parameters",
                detail=str(exc),
            )
        ) from exc


def _cmd_explain(args: argparse.Namespace) -> int:
    """
    Print the effective setting selection as JSON.

    Returns
    -------
    int
        Exit code (0 on success).
    """
    analysis = _analysis_from_args(args)
    storage = PeriodsStepConfig(db_path=args.db_path, read_only=True)
    gateway = open_gateway(storage.storage_config())
    try:
        with gateway.session() as repository:
            selection = select_setting(analysis.to_metadata(), repository)
    finally:
        gateway.close()

    payload = selection.to_dict()
    payload["messages"] = [CONFLICT_MESSAGE] if selection.conflict else []
    sys.stdout.write(json.dumps(payload, indent=2))
    sys.stdout.write("\n")
    return 0


def _cmd_steps(args: argparse.Namespace) -> int:
    """
    List registered pipeline steps.

    Returns
    -------
    int
        Exit code (0 on success).
    """
    steps = list_steps()
    if args.output_json:
        data = [
            {
                "name": meta.name,
                "description": meta.description,
                "phase": meta.phase.value,
                "deps": list(meta.deps),
            }
            for meta in steps
        ]
        sys.stdout.write(json.dumps(data, indent=2))
        sys.stdout.write("\n")
    else:
        for meta in steps:
            deps_str = ", ".join(meta.deps) if meta.deps else "(none)"
            sys.stdout.write(f"{meta.name} [{meta.phase.value}]\n")
            sys.stdout.write(f"  {meta.description}\n")
            sys.stdout.write(f"  deps: {deps_str}\n")
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    """
    CLI entrypoint.

    Parameters
    ----------
    argv:
        Optional argument list (defaults to sys.argv).

    Returns
    -------
    int
        Exit code (0 on success).
    """
    parser = _make_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    _setup_logging(args.verbose)

    func: CommandHandler = args.func
    try:
        return int(func(args))
    except ProblemError as exc:
        log_problem(LOG, exc.problem_detail)
        return 1
    except DuckDBError as exc:
        pd = problem(
            code="cli.storage_failure",
            title="Settings store unavailable",
            detail=str(exc),
            extras={"command": args.command},
        )
        log_problem(LOG, pd)
        return 1


if __name__ == "__main__":
    sys.exit(main())
