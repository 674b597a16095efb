"""Config command implementation.

Shows and initializes the whichpm configuration file.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer

from whichpm.cli.types import get_config
from whichpm.core.config import WhichPmConfig, save_config
from whichpm.core.errors import ConfigError
from whichpm.core.paths import get_config_path
from whichpm.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or create the configuration file.",
    no_args_is_help=True,
)


def _selected_path(ctx: typer.Context) -> Path:
    return ctx.ensure_object(dict).get("config_path") or get_config_path()


@app.command()
def path(ctx: typer.Context) -> None:
    """Print the configuration file path."""
    console.print(str(_selected_path(ctx)), highlight=False, soft_wrap=True)


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the effective configuration (file values over defaults)."""
    config = get_config(ctx)
    config_path = _selected_path(ctx)
    source = str(config_path) if config_path.exists() else "defaults"
    console.print(f"[muted]# {source}[/muted]")
    console.print(tomli_w.dumps(config.model_dump(mode="json")), highlight=False, markup=False)


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing configuration file."),
    ] = False,
) -> None:
    """Write a configuration file with default settings."""
    config_path = _selected_path(ctx)
    if config_path.exists() and not force:
        print_info(f"Config already exists: {config_path} (use --force to overwrite)")
        return

    try:
        written = save_config(WhichPmConfig(), config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Config written to {written}")
