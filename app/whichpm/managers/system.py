"""OS-standard system directories.

A command found in one of these directories, and matched by no
signature, is reported as shipped with the operating system. This is a
fallback, not a signature: it never competes with a manager match.
"""

from pathlib import Path

from whichpm.models.platform import Platform

SYSTEM_DIRECTORIES: dict[Platform, tuple[str, ...]] = {
    Platform.LINUX: ("/bin", "/sbin", "/usr/bin", "/usr/sbin", "/usr/libexec", "/usr/games"),
    Platform.MACOS: (
        "/bin",
        "/sbin",
        "/usr/bin",
        "/usr/sbin",
        "/usr/libexec",
        "/System",
        "/Library/Apple",
    ),
    Platform.WINDOWS: (
        "/Windows/System32",
        "/Windows/SysWOW64",
        "/Windows",
    ),
}


def system_directory_of(path: Path, platform: Platform) -> str | None:
    """Return the OS-standard directory containing ``path``, if any.

    Windows paths are compared without their drive letter and case.

    Args:
        path: Path to classify.
        platform: Platform whose directory layout applies.

    Returns:
        The matching directory, or None.
    """
    text = platform.normalize(path)
    if platform is Platform.WINDOWS:
        _, colon, rest = text.partition(":")
        text = (rest if colon else text).casefold()

    for directory in SYSTEM_DIRECTORIES[platform]:
        prefix = directory.casefold() if platform is Platform.WINDOWS else directory
        if text.startswith(prefix + "/"):
            return directory
    return None
