"""User configuration.

Settings are read from ``~/.config/whichpm/config.toml``. A missing file
means defaults; an invalid one is an error rather than being silently
ignored.

Example file::

    verify = true
    verify_timeout = 10
    disabled_managers = ["go"]

    [colors]
    manager = "#0ec1c8"
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from whichpm.core.errors import ConfigError, ConfigParseError
from whichpm.core.paths import get_config_path
from whichpm.core.symlinks import DEFAULT_MAX_HOPS
from whichpm.utils.shell import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

OutputFormatName = Literal["text", "json", "short"]


class ThemeColors(BaseModel):
    """Colors used by the text renderer.

    All colors must be valid hex codes (#RRGGBB or #RGB).
    """

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"
    manager: str = "#0ec1c8"
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        """Validate that all color values are valid hex codes."""
        if not isinstance(v, str):
            msg = f"{info.field_name}: color must be a string"
            raise ValueError(msg)
        color = v.strip()
        digits = color[1:]
        if not color.startswith("#") or len(digits) not in (3, 6):
            msg = f"{info.field_name}: color must be #RGB or #RRGGBB, got '{color}'"
            raise ValueError(msg)
        try:
            int(digits, 16)
        except ValueError:
            msg = f"{info.field_name}: invalid hex color '{color}'"
            raise ValueError(msg) from None
        return color


class WhichPmConfig(BaseModel):
    """Settings for detection and output.

    Attributes:
        verify: Verify matches with the package manager by default.
        verify_timeout: Seconds to wait for a package manager query.
        max_symlink_hops: Maximum number of symlinks to follow.
        disabled_managers: Signature ids to skip.
        output_format: Default output format.
        colors: Text renderer colors.
    """

    model_config = ConfigDict(extra="forbid")

    verify: bool = False
    verify_timeout: Annotated[
        float,
        Field(ge=0.5, le=120, description="Verification timeout in seconds (0.5-120)"),
    ] = DEFAULT_TIMEOUT
    max_symlink_hops: Annotated[
        int,
        Field(ge=1, le=256, description="Maximum symlinks to follow (1-256)"),
    ] = DEFAULT_MAX_HOPS
    disabled_managers: list[str] = Field(default_factory=list)
    output_format: OutputFormatName = "text"
    colors: ThemeColors = Field(default_factory=ThemeColors)

    @field_validator("disabled_managers")
    @classmethod
    def normalize_manager_ids(cls, v: list[str]) -> list[str]:
        """Signature ids are lowercase."""
        return [manager_id.strip().lower() for manager_id in v if manager_id.strip()]


def load_config(path: Path | None = None) -> WhichPmConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated configuration; defaults if the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or fails validation.
    """
    config_path = path or get_config_path()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        logger.debug("No config file at %s, using defaults", config_path)
        return WhichPmConfig()
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return WhichPmConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {config_path}: {e}") from e


def save_config(config: WhichPmConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written to a temporary file first and moved into place
    with os.replace().

    Args:
        config: Configuration to save.
        path: Destination. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    data = config.model_dump(mode="json")

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(tmp_path, config_path)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config {config_path}: {e}") from e

    return config_path
