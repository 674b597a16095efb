"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console

from whichpm.core.config import ThemeColors
from whichpm.core.theme import get_rich_theme


def _detect_color_system() -> str | None:
    """Use truecolor on interactive terminals, let Rich decide otherwise."""
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances
console = Console(theme=get_rich_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_rich_theme(), stderr=True, color_system=_detect_color_system())

# Colors currently pushed on top of the default theme, if any
_applied_colors: ThemeColors | None = None


def apply_colors(colors: ThemeColors) -> None:
    """Switch both consoles to user-configured colors.

    At most one theme sits above the default, so repeated calls replace
    the previous colors instead of stacking.
    """
    global _applied_colors
    if colors == _applied_colors:
        return
    theme = get_rich_theme(colors)
    for target in (console, err_console):
        if _applied_colors is not None:
            target.pop_theme()
        target.push_theme(theme)
    _applied_colors = colors


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
