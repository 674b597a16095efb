"""whichpm - Identify which package manager installed a command."""

__version__ = "0.1.0"
