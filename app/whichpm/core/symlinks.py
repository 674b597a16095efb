"""Symlink chain analysis.

Follows a resolved command path link by link until a real file is
reached, recording every hop so that managers whose signature lives on
a shim or wrapper path can still be recognized.
"""

import logging
import os
import stat
from pathlib import Path

from whichpm.core.errors import (
    ChainTooLongError,
    CycleDetectedError,
    SymlinkChainError,
    SymlinkResolutionError,
)
from whichpm.models.detection import SymlinkChain

logger = logging.getLogger(__name__)

# Same bound the Linux kernel applies to nested links (MAXSYMLINKS).
DEFAULT_MAX_HOPS = 40


def _read_link(path: Path) -> str | None:
    """Return the raw link target, or None if ``path`` is not a symlink.

    Raises:
        OSError: If the entry exists but cannot be inspected.
    """
    try:
        mode = os.lstat(path).st_mode
    except FileNotFoundError:
        # Dangling target: the chain ends here
        return None
    if not stat.S_ISLNK(mode):
        return None
    return os.readlink(path)


def follow_symlinks(path: Path, max_hops: int = DEFAULT_MAX_HOPS) -> SymlinkChain:
    """Follow the symlink chain starting at ``path``.

    Relative targets are resolved against the real directory containing
    the link, as the kernel does, so a link reached through a symlinked
    directory still lands on the right file. Each link is followed
    individually, so every intermediate hop stays visible in the chain.

    Args:
        path: Starting path (hop 0).
        max_hops: Maximum number of links to follow.

    Returns:
        SymlinkChain whose last hop is not a symlink.

    Raises:
        CycleDetectedError: If a path reappears in the chain.
        ChainTooLongError: If more than ``max_hops`` links are followed.
        SymlinkResolutionError: If a link cannot be read.
    """
    hops: list[Path] = [path]
    seen = {os.path.normcase(str(path))}
    current = path

    while True:
        try:
            target = _read_link(current)
        except OSError as e:
            raise SymlinkResolutionError(SymlinkChain(tuple(hops)), current, e) from e
        if target is None:
            break

        if len(hops) > max_hops:
            raise ChainTooLongError(SymlinkChain(tuple(hops)), max_hops)

        link_dir = os.path.realpath(current.parent)
        next_path = Path(os.path.normpath(os.path.join(link_dir, target)))
        key = os.path.normcase(str(next_path))
        if key in seen:
            raise CycleDetectedError(SymlinkChain(tuple(hops)), next_path)

        logger.debug("Symlink %s -> %s", current, next_path)
        seen.add(key)
        hops.append(next_path)
        current = next_path

    return SymlinkChain(tuple(hops))


def analyze_chain(path: Path, max_hops: int = DEFAULT_MAX_HOPS) -> SymlinkChain:
    """Follow symlinks without failing.

    Pathological or unreadable chains degrade to the hops collected so
    far, with the reason recorded on the returned chain.

    Args:
        path: Starting path (hop 0).
        max_hops: Maximum number of links to follow.

    Returns:
        Complete or partial SymlinkChain.
    """
    try:
        return follow_symlinks(path, max_hops)
    except SymlinkChainError as e:
        logger.debug("Continuing with partial symlink chain: %s", e)
        return SymlinkChain(e.chain.hops, error=str(e))
