"""CLI module for whichpm.

This module provides the Typer-based command-line interface.
"""

from whichpm.cli.main import app

__all__ = ["app"]
