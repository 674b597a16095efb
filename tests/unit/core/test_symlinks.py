"""Unit tests for symlink chain analysis."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest
from helpers import posix_only
from whichpm.core.detector import Detector
from whichpm.core.errors import (
    ChainTooLongError,
    CycleDetectedError,
    SymlinkResolutionError,
)
from whichpm.core.symlinks import analyze_chain, follow_symlinks
from whichpm.models.platform import Platform

pytestmark = posix_only


class TestFollowSymlinks:
    """Tests for follow_symlinks function."""

    def test_regular_file_is_single_hop(
        self, tmp_path: Path, make_executable: Callable[[Path], Path]
    ) -> None:
        """A path that is not a link yields a chain of exactly itself."""
        tool = make_executable(tmp_path / "tool")

        chain = follow_symlinks(tool)

        assert chain.hops == (tool,)
        assert chain.has_links is False

    def test_missing_path_is_single_hop(self, tmp_path: Path) -> None:
        """A path that does not exist is not a link either."""
        missing = tmp_path / "missing"

        assert follow_symlinks(missing).hops == (missing,)

    def test_relative_targets_resolved_against_link_directory(
        self,
        tmp_path: Path,
        make_executable: Callable[[Path], Path],
        make_symlink: Callable[[Path, str | Path], Path],
    ) -> None:
        """Relative targets resolve against the link's directory, '..' collapsed."""
        real = make_executable(tmp_path / "Cellar" / "git" / "2.51.2" / "bin" / "git")
        link = make_symlink(tmp_path / "bin" / "git", "../Cellar/git/2.51.2/bin/git")

        chain = follow_symlinks(link)

        assert chain.hops == (link, real)
        assert chain.terminal == real

    def test_every_intermediate_hop_recorded(
        self,
        tmp_path: Path,
        make_executable: Callable[[Path], Path],
        make_symlink: Callable[[Path, str | Path], Path],
    ) -> None:
        """Multi-link chains keep each hop in order."""
        real = make_executable(tmp_path / "real" / "tool")
        middle = make_symlink(tmp_path / "middle" / "tool", real)
        start = make_symlink(tmp_path / "bin" / "tool", "../middle/tool")

        chain = follow_symlinks(start)

        assert chain.hops == (start, middle, real)

    def test_parent_directory_target_behind_symlinked_directory(
        self,
        tmp_path: Path,
        make_executable: Callable[[Path], Path],
        make_symlink: Callable[[Path, str | Path], Path],
    ) -> None:
        """'..' in a target climbs from the link's real directory, not the alias."""
        real = make_executable(tmp_path / "real" / "lib" / "tool")
        make_symlink(tmp_path / "real" / "bin" / "tool", "../lib/tool")
        alias = make_symlink(tmp_path / "linkdir", tmp_path / "real" / "bin")

        chain = follow_symlinks(alias / "tool")

        assert chain.hops == (alias / "tool", real)
        assert chain.terminal.exists()

    def test_dangling_link(
        self,
        tmp_path: Path,
        make_symlink: Callable[[Path, str | Path], Path],
    ) -> None:
        """A link to a missing file ends the chain at the missing target."""
        link = make_symlink(tmp_path / "bin" / "tool", "../gone/tool")

        chain = follow_symlinks(link)

        assert chain.terminal == tmp_path / "gone" / "tool"

    def test_cycle_detected(
        self,
        tmp_path: Path,
        make_symlink: Callable[[Path, str | Path], Path],
    ) -> None:
        """A cycle raises CycleDetectedError with the hops collected so far."""
        a = make_symlink(tmp_path / "a", "b")
        b = make_symlink(tmp_path / "b", "a")

        with pytest.raises(CycleDetectedError) as exc_info:
            follow_symlinks(a)

        assert exc_info.value.chain.hops == (a, b)
        assert exc_info.value.repeated == a

    def test_self_loop(
        self,
        tmp_path: Path,
        make_symlink: Callable[[Path, str | Path], Path],
    ) -> None:
        """A link pointing at itself is a cycle of one."""
        loop = make_symlink(tmp_path / "loop", "loop")

        with pytest.raises(CycleDetectedError):
            follow_symlinks(loop)

    def test_chain_too_long(
        self,
        tmp_path: Path,
        make_executable: Callable[[Path], Path],
        make_symlink: Callable[[Path, str | Path], Path],
    ) -> None:
        """Following more than max_hops links raises ChainTooLongError."""
        make_executable(tmp_path / "l5")
        for index in range(5):
            make_symlink(tmp_path / f"l{index}", f"l{index + 1}")

        with pytest.raises(ChainTooLongError) as exc_info:
            follow_symlinks(tmp_path / "l0", max_hops=3)

        assert exc_info.value.max_hops == 3
        assert len(exc_info.value.chain) == 4

    def test_chain_at_limit(
        self,
        tmp_path: Path,
        make_executable: Callable[[Path], Path],
        make_symlink: Callable[[Path, str | Path], Path],
    ) -> None:
        """Exactly max_hops links is allowed."""
        make_executable(tmp_path / "l3")
        for index in range(3):
            make_symlink(tmp_path / f"l{index}", f"l{index + 1}")

        chain = follow_symlinks(tmp_path / "l0", max_hops=3)

        assert chain.terminal == tmp_path / "l3"

    def test_unreadable_link(self, tmp_path: Path) -> None:
        """A filesystem error mid-chain raises SymlinkResolutionError."""
        start = tmp_path / "tool"
        with (
            patch("whichpm.core.symlinks._read_link", side_effect=PermissionError("denied")),
            pytest.raises(SymlinkResolutionError) as exc_info,
        ):
            follow_symlinks(start)

        assert exc_info.value.failed_path == start
        assert exc_info.value.last_good is None
        assert exc_info.value.chain.hops == (start,)

    def test_unreadable_link_mid_chain(self, tmp_path: Path) -> None:
        """The error names the hop that failed and keeps the hops before it."""
        start = tmp_path / "tool"
        with (
            patch(
                "whichpm.core.symlinks._read_link",
                side_effect=["next", PermissionError("denied")],
            ),
            pytest.raises(SymlinkResolutionError) as exc_info,
        ):
            follow_symlinks(start)

        assert exc_info.value.failed_path == tmp_path / "next"
        assert exc_info.value.last_good == start
        assert exc_info.value.chain.hops == (start, tmp_path / "next")


class TestAnalyzeChain:
    """Tests for analyze_chain function."""

    def test_complete_chain(
        self,
        tmp_path: Path,
        make_executable: Callable[[Path], Path],
        make_symlink: Callable[[Path, str | Path], Path],
    ) -> None:
        """A healthy chain carries no error."""
        real = make_executable(tmp_path / "real")
        link = make_symlink(tmp_path / "link", "real")

        chain = analyze_chain(link)

        assert chain.hops == (link, real)
        assert chain.error is None

    def test_cycle_degrades_to_partial_chain(
        self,
        tmp_path: Path,
        make_symlink: Callable[[Path, str | Path], Path],
    ) -> None:
        """analyze_chain never raises; the error is recorded on the chain."""
        a = make_symlink(tmp_path / "a", "b")
        make_symlink(tmp_path / "b", "a")

        chain = analyze_chain(a)

        assert chain.is_partial is True
        assert "cycle" in (chain.error or "")
        assert chain.resolved == a


class TestKegOnlyHomebrew:
    """Chains entered through Homebrew's opt/<formula> directory links."""

    def test_opt_bin_resolves_into_cellar(
        self,
        tmp_path: Path,
        make_executable: Callable[[Path], Path],
        make_symlink: Callable[[Path, str | Path], Path],
    ) -> None:
        """opt/python@3.12/libexec/bin on PATH still reports the Cellar version."""
        prefix = tmp_path / "opt" / "homebrew"
        keg = prefix / "Cellar" / "python@3.12" / "3.12.1"
        real = make_executable(keg / "bin" / "python3.12")
        make_symlink(keg / "libexec" / "bin" / "python3", "../../bin/python3.12")
        make_symlink(prefix / "opt" / "python@3.12", "../Cellar/python@3.12/3.12.1")
        search_dir = prefix / "opt" / "python@3.12" / "libexec" / "bin"

        detector = Detector(platform=Platform.MACOS, search_path=str(search_dir))
        result = detector.detect("python3")

        assert result.chain.hops == (search_dir / "python3", real)
        assert result.manager_id == "homebrew"
        assert result.package_name == "python@3.12"
        assert result.version == "3.12.1"
