"""Shared types and helpers for CLI commands."""

from enum import Enum
from pathlib import Path

import typer

from whichpm.core.config import WhichPmConfig, load_config
from whichpm.core.errors import ConfigError
from whichpm.utils.formatting import apply_colors, print_error


class OutputFormat(str, Enum):
    """Output format options."""

    TEXT = "text"
    JSON = "json"
    SHORT = "short"


def get_config(ctx: typer.Context) -> WhichPmConfig:
    """Load the configuration selected by the global ``--config`` option.

    The loaded configuration is cached on the context and its colors are
    applied to the shared consoles.

    Raises:
        typer.Exit: With code 2 if the configuration is invalid.
    """
    obj = ctx.ensure_object(dict)
    config = obj.get("config")
    if isinstance(config, WhichPmConfig):
        return config

    config_path: Path | None = obj.get("config_path")
    try:
        config = load_config(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    apply_colors(config.colors)
    obj["config"] = config
    return config
