"""Run command - drive the weekly release train end to end."""

from __future__ import annotations

from pathlib import Path

import typer

from reltrain.cli.commands._helpers import (
    CONFIG_OPTION_HELP,
    DEFAULT_CONFIG,
    exit_with_code,
    parse_now,
)
from reltrain.cli.context import build_context
from reltrain.output.report import print_train_report, train_exit_code
from reltrain.release.orchestrator import Orchestrator


def run(
    config: Path = typer.Option(DEFAULT_CONFIG, "--config", "-c", help=CONFIG_OPTION_HELP),
    now: str | None = typer.Option(
        None, "--now", help="Pretend the run happens at this ISO-8601 time"
    ),
) -> None:
    """Fork, reset, build and merge this cycle's release branch."""
    at = parse_now(now)
    ctx = build_context(config)

    orchestrator = Orchestrator(config=ctx.config, connect=ctx.connect, console=ctx.console)
    report = orchestrator.run(at)
    print_train_report(report, ctx.console)

    code = train_exit_code(report)
    if code != 0:
        exit_with_code(code)
