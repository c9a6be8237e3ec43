"""Report presentation utilities.

Centralized rendering of train reports and exit code mapping.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reltrain.core.errors import ErrorCode
from reltrain.output.console import Style

if TYPE_CHECKING:
    from reltrain.output.console import ConsoleProtocol
    from reltrain.release.errors import TrainError
    from reltrain.release.orchestrator import TrainReport
    from reltrain.release.status import ReleaseStatus

__all__ = [
    "print_release_status",
    "print_train_error",
    "print_train_report",
    "train_error_exit_code",
    "train_exit_code",
]


def print_train_error(error: TrainError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def train_error_exit_code(error: TrainError) -> int:
    if error.is_config_error:
        return int(ErrorCode.CONFIG_ERROR)
    if error.kind == "gateway_failed":
        return int(ErrorCode.NETWORK_ERROR)
    return int(ErrorCode.PHASE_FAILED)


def print_train_report(report: TrainReport, console: ConsoleProtocol) -> None:
    console.header("Release train")
    for phase in report.phases:
        if phase.ok:
            console.success(f"{phase.name}: {phase.detail}")
        else:
            console.error(f"{phase.name}: {phase.detail}")

    if report.fatal is not None:
        console.print(f"run stopped: {report.fatal.kind}", Style.DIM)
    elif report.ok:
        console.print("all phases succeeded", Style.DIM)


def train_exit_code(report: TrainReport) -> int:
    if report.fatal is not None:
        # Sequential failure: nothing stable to build or merge.
        return int(ErrorCode.CONFIG_ERROR)
    if report.ok:
        return int(ErrorCode.OK)
    return int(ErrorCode.PHASE_FAILED)


def print_release_status(status: ReleaseStatus, console: ConsoleProtocol) -> None:
    console.header(f"Release {status.branch}")
    if not status.exists:
        console.print("branch: not created yet", Style.WARNING)
    else:
        head = status.head_commit_id or ""
        console.print(f"branch: {head[:8]}")
        console.print(f"version: {status.branch_version}")
    console.print(f"trunk version: {status.trunk_version}")

    if status.reset_pending:
        console.print("pending: version reset", Style.WARNING)
    if status.merge_pending:
        console.print("pending: merge back to trunk", Style.WARNING)
    if status.exists and not status.reset_pending and not status.merge_pending:
        console.print("nothing pending", Style.DIM)
