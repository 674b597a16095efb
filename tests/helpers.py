"""Test helpers shared by several test modules."""

import sys
from pathlib import Path

import pytest
from whichpm.managers.base import MatchContext
from whichpm.models.detection import SymlinkChain
from whichpm.models.platform import Platform

posix_only = pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX symlinks and modes")


def make_context(
    *hops: str | Path,
    platform: Platform = Platform.LINUX,
    command: str | None = None,
) -> MatchContext:
    """Build a MatchContext for a chain of paths (first hop is the command path)."""
    chain = SymlinkChain(tuple(Path(hop) for hop in hops))
    return MatchContext(command=command or chain.resolved.name, platform=platform, chain=chain)
