"""Core detection engine: resolution, symlink analysis, matching and orchestration."""
