"""Status command - show where this cycle's release stands."""

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
from reltrain.core.result import Err
from reltrain.output.report import (
    print_release_status,
    print_train_error,
    train_error_exit_code,
)
from reltrain.release.status import probe_release_status


def status(
    config: Path = typer.Option(DEFAULT_CONFIG, "--config", "-c", help=CONFIG_OPTION_HELP),
    now: str | None = typer.Option(None, "--now", help="Probe as of this ISO-8601 time"),
) -> None:
    """Show the release branch and version state without changing anything."""
    at = parse_now(now)
    ctx = build_context(config)

    result = probe_release_status(
        config=ctx.config, clients=ctx.connect(), console=ctx.console, now=at
    )
    if isinstance(result, Err):
        print_train_error(result.error, ctx.console)
        exit_with_code(train_error_exit_code(result.error))

    print_release_status(result.value, ctx.console)
