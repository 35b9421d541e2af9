"""Root Typer app — global options and command group registration."""

from __future__ import annotations

import os
from typing import Optional

import typer

from studio_cli import __version__
from studio_cli.commands import config_cmd, design, lock, registry_cmd
from studio_cli.config.constants import ENV_LOG_LEVEL
from studio_cli.logging_config import configure_logging

app = typer.Typer(
    name="studio-cli",
    help="CLI for the collaborative visual app builder.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    if value:
        print(f"studio-cli {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Optional[bool] = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True, help="Show version and exit."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging on stderr."),
) -> None:
    """Studio CLI — edit designs, inspect components, and manage resource locks."""
    configure_logging("DEBUG" if verbose else os.environ.get(ENV_LOG_LEVEL, "WARNING"))


# Register command groups
app.add_typer(config_cmd.app, name="config")
app.add_typer(registry_cmd.app, name="registry")
app.add_typer(design.app, name="design")
app.add_typer(lock.app, name="lock")


def main() -> None:
    app()
