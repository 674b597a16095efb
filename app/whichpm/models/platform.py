"""Platform identity and path conventions.

Every platform-specific decision in the detection engine (executable
lookup, path normalization, signature scoping, system directories) is
keyed on the :class:`Platform` enum defined here.
"""

import sys
from enum import Enum
from pathlib import Path


class Platform(Enum):
    """Operating systems the detection engine knows about."""

    MACOS = "macos"
    LINUX = "linux"
    WINDOWS = "windows"

    @classmethod
    def current(cls) -> "Platform":
        """Detect the platform of the running interpreter.

        Unix-like systems other than macOS are treated as Linux.
        """
        if sys.platform == "darwin":
            return cls.MACOS
        if sys.platform.startswith(("win32", "cygwin")):
            return cls.WINDOWS
        return cls.LINUX

    @property
    def display_name(self) -> str:
        """Human-readable platform name."""
        return _DISPLAY_NAMES[self]

    @property
    def case_sensitive(self) -> bool:
        """Whether path comparisons are case-sensitive on this platform."""
        return self is not Platform.WINDOWS

    def normalize(self, path: Path | str) -> str:
        """Return the path as a string suitable for signature matching.

        Windows paths are converted to forward slashes so that signature
        patterns can be written once. Case is preserved; case-insensitive
        matching is handled by the matcher flags.
        """
        text = str(path)
        if self is Platform.WINDOWS:
            text = text.replace("\\", "/")
        return text


_DISPLAY_NAMES: dict[Platform, str] = {
    Platform.MACOS: "macOS",
    Platform.LINUX: "Linux",
    Platform.WINDOWS: "Windows",
}

ALL_PLATFORMS: frozenset[Platform] = frozenset(Platform)
POSIX_PLATFORMS: frozenset[Platform] = frozenset({Platform.MACOS, Platform.LINUX})
