"""Branch command - print the release branch name for a day."""

from __future__ import annotations

from pathlib import Path

import typer

from reltrain.cli.commands._helpers import CONFIG_OPTION_HELP, DEFAULT_CONFIG, parse_day
from reltrain.cli.context import build_context
from reltrain.release.cycle import release_branch_name


def branch(
    config: Path = typer.Option(DEFAULT_CONFIG, "--config", "-c", help=CONFIG_OPTION_HELP),
    day: str | None = typer.Option(None, "--date", help="Day to name the branch for (YYYY-MM-DD)"),
) -> None:
    """Print the release branch name for the cycle containing a day."""
    on = parse_day(day)
    ctx = build_context(config)
    ctx.console.print(release_branch_name(ctx.config.release.branch_prefix, on))
