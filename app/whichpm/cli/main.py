"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from pathlib import Path
from typing import Annotated

import typer

from whichpm import __version__
from whichpm.cli.commands import config, detect, managers
from whichpm.utils.log import setup_logging

# Create main Typer app
app = typer.Typer(
    name="whichpm",
    help="Identify which package manager installed a command.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"whichpm version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output and debug logging.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to the configuration file.",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """whichpm - Identify which package manager installed a command.

    Resolves the command on PATH, follows its symlinks to the real binary
    and matches the paths against known package manager layouts.
    """
    setup_logging(verbose)
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path


# Register commands
app.command(name="detect")(detect.detect)
app.command(name="managers")(managers.managers)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
