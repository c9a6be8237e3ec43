from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from reltrain.core.config import TrainConfig, load_config
from reltrain.core.errors import ErrorCode
from reltrain.core.result import Err
from reltrain.output.console import ConsoleProtocol, RichConsole
from reltrain.release.timeouts import HTTP_TIMEOUT_SECONDS
from reltrain.remote.azure import connect_azure
from reltrain.remote.gateways import Connect, RemoteClients


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: TrainConfig
    console: ConsoleProtocol
    connect: Connect


def build_context(config_path: Path) -> CLIContext:
    config_result = load_config(config_path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    config = config_result.value

    def connect() -> RemoteClients:
        return connect_azure(config.remote, timeout=HTTP_TIMEOUT_SECONDS)

    return CLIContext(config=config, console=RichConsole(), connect=connect)
