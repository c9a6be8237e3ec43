"""Shared helpers for CLI commands."""

from __future__ import annotations

from datetime import UTC, date, datetime
from pathlib import Path
from typing import NoReturn

import typer

from reltrain.core.errors import ErrorCode

CONFIG_OPTION_HELP = "Release train config file (TOML)"
DEFAULT_CONFIG = Path("reltrain.toml")


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)


def parse_now(value: str | None) -> datetime:
    """Parse an ISO-8601 timestamp, defaulting to the current UTC time.

    Naive timestamps are taken as UTC.
    """
    if value is None:
        return datetime.now(UTC)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        typer.echo(f"error: invalid --now timestamp: {value}", err=True)
        exit_with_code(int(ErrorCode.USER_ERROR))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_day(value: str | None) -> date:
    if value is None:
        return datetime.now(UTC).date()
    try:
        return date.fromisoformat(value)
    except ValueError:
        typer.echo(f"error: invalid --date: {value} (expected YYYY-MM-DD)", err=True)
        exit_with_code(int(ErrorCode.USER_ERROR))
