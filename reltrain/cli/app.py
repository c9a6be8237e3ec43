from __future__ import annotations

import typer

from reltrain import __version__
from reltrain.cli.commands.branch_cmd import branch
from reltrain.cli.commands.run_cmd import run
from reltrain.cli.commands.status_cmd import status


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(run)
app.command()(branch)
app.command()(status)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def main() -> None:
    app()
