"""Command path resolution.

Locates the executable a command name refers to on the search path.
Executable rules differ per operating system, so they live behind the
:class:`ExecutableLookup` capability selected by :func:`lookup_for`.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from whichpm.core.errors import CommandNotFoundError
from whichpm.models.platform import Platform

logger = logging.getLogger(__name__)

# Used when PATHEXT is unset, matching cmd.exe's built-in default.
_DEFAULT_PATHEXT = ".COM;.EXE;.BAT;.CMD"


class ExecutableLookup(ABC):
    """Platform-specific rules for finding executables."""

    #: Separator between entries of the search path.
    separator: str = os.pathsep

    @property
    @abstractmethod
    def platform(self) -> Platform:
        """Return the platform these rules implement."""

    @abstractmethod
    def candidate_names(self, name: str) -> list[str]:
        """Return file names to probe for a command, in priority order."""

    @abstractmethod
    def is_executable(self, path: Path) -> bool:
        """Check if a file is something the shell would run."""

    def search_dirs(self, search_path: str | None) -> list[Path]:
        """Split a search path into directories.

        Args:
            search_path: PATH-style string. If None, uses the PATH
                environment variable (or ``os.defpath``).

        Returns:
            Directories in search order. Empty entries mean the current
            directory, as in POSIX shells.
        """
        if search_path is None:
            search_path = os.environ.get("PATH", os.defpath)
        return [Path(entry) if entry else Path.cwd() for entry in search_path.split(self.separator)]

    def has_separator(self, name: str) -> bool:
        """Check if a command name already names a path."""
        return "/" in name


class PosixExecutableLookup(ExecutableLookup):
    """Lookup rules for macOS and Linux: the executable bit decides."""

    separator = ":"

    def __init__(self, platform: Platform = Platform.LINUX) -> None:
        self._platform = platform

    @property
    def platform(self) -> Platform:
        return self._platform

    def candidate_names(self, name: str) -> list[str]:
        return [name]

    def is_executable(self, path: Path) -> bool:
        return path.is_file() and os.access(path, os.X_OK)


class WindowsExecutableLookup(ExecutableLookup):
    """Lookup rules for Windows: PATHEXT suffixes, current directory first.

    Args:
        pathext: Semicolon-separated extension list. If None, read from
            the PATHEXT environment variable.
    """

    separator = ";"

    def __init__(self, pathext: str | None = None) -> None:
        raw = pathext if pathext is not None else os.environ.get("PATHEXT", _DEFAULT_PATHEXT)
        self._extensions = [ext.lower() for ext in raw.split(";") if ext]

    @property
    def platform(self) -> Platform:
        return Platform.WINDOWS

    @property
    def extensions(self) -> list[str]:
        """Executable extensions in priority order (lowercase)."""
        return list(self._extensions)

    def candidate_names(self, name: str) -> list[str]:
        # A name that already carries an executable extension is taken as-is
        if Path(name).suffix.lower() in self._extensions:
            return [name]
        return [name + ext for ext in self._extensions]

    def is_executable(self, path: Path) -> bool:
        return path.is_file()

    def search_dirs(self, search_path: str | None) -> list[Path]:
        dirs = super().search_dirs(search_path)
        return [Path.cwd(), *dirs]

    def has_separator(self, name: str) -> bool:
        return "/" in name or "\\" in name


def lookup_for(platform: Platform) -> ExecutableLookup:
    """Return the executable lookup rules for a platform."""
    if platform is Platform.WINDOWS:
        return WindowsExecutableLookup()
    return PosixExecutableLookup(platform)


def _probe(directory: Path, name: str, lookup: ExecutableLookup) -> Path | None:
    for candidate in lookup.candidate_names(name):
        path = directory / candidate
        try:
            if lookup.is_executable(path):
                # abspath keeps symlinks intact; they are the analyzer's job
                return Path(os.path.abspath(path))
        except OSError as e:
            logger.debug("Skipping unreadable candidate %s: %s", path, e)
    return None


def resolve_all(
    name: str,
    *,
    platform: Platform | None = None,
    search_path: str | None = None,
    lookup: ExecutableLookup | None = None,
) -> list[Path]:
    """Find every executable a command name resolves to.

    Args:
        name: Command name, or a path to an executable.
        platform: Platform whose rules apply. Defaults to the current one.
        search_path: PATH-style string to search instead of ``$PATH``.
        lookup: Explicit lookup rules, overriding ``platform``.

    Returns:
        Absolute paths in search order, without duplicates. Empty if the
        command does not exist.
    """
    if not name:
        return []
    lookup = lookup or lookup_for(platform or Platform.current())

    if lookup.has_separator(name):
        target = Path(name)
        found = _probe(target.parent, target.name, lookup)
        return [found] if found is not None else []

    seen: set[str] = set()
    matches: list[Path] = []
    for directory in lookup.search_dirs(search_path):
        found = _probe(directory, name, lookup)
        if found is None:
            continue
        key = str(found) if lookup.platform.case_sensitive else str(found).casefold()
        if key in seen:
            continue
        seen.add(key)
        matches.append(found)
    return matches


def resolve_command(
    name: str,
    *,
    platform: Platform | None = None,
    search_path: str | None = None,
    lookup: ExecutableLookup | None = None,
) -> Path:
    """Resolve a command name to the executable the shell would run.

    Args:
        name: Command name, or a path to an executable.
        platform: Platform whose rules apply. Defaults to the current one.
        search_path: PATH-style string to search instead of ``$PATH``.
        lookup: Explicit lookup rules, overriding ``platform``.

    Returns:
        Absolute path of the first match.

    Raises:
        CommandNotFoundError: If no executable by that name exists.
    """
    matches = resolve_all(name, platform=platform, search_path=search_path, lookup=lookup)
    if not matches:
        raise CommandNotFoundError(name)
    logger.debug("Resolved %s to %s", name, matches[0])
    return matches[0]
