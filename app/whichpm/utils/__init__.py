"""Utility modules for whichpm."""
