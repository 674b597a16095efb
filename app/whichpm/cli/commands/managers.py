"""Managers command implementation.

Lists the package manager signatures the detector knows about.
"""

from typing import Annotated

import typer

from whichpm.cli.display import create_signatures_table
from whichpm.cli.types import get_config
from whichpm.managers import DEFAULT_SIGNATURES
from whichpm.models.platform import Platform
from whichpm.utils.formatting import console


def managers(
    ctx: typer.Context,
    all_platforms: Annotated[
        bool,
        typer.Option("--all-platforms", help="Include managers for other operating systems."),
    ] = False,
) -> None:
    """List known package managers in detection precedence order."""
    config = get_config(ctx)
    platform = None if all_platforms else Platform.current()

    signatures = [
        s
        for s in DEFAULT_SIGNATURES
        if s.id not in config.disabled_managers and (platform is None or s.supports(platform))
    ]
    console.print(create_signatures_table(signatures, platform))
    if config.disabled_managers:
        console.print(f"\n[muted]Disabled in config: {', '.join(config.disabled_managers)}[/muted]")
