"""CLI commands for whichpm."""
