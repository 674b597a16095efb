"""XDG-compliant path management for whichpm.

whichpm keeps no state between runs; the only file it reads is its
configuration:

- Config: ~/.config/whichpm/config.toml
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "whichpm"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/whichpm/ (or XDG_CONFIG_HOME/whichpm/).
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/whichpm/config.toml.
    """
    return get_config_dir() / "config.toml"
