"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def make_executable() -> Callable[[Path], Path]:
    """Create an executable file (and its parent directories)."""

    def _make(path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("#!/bin/sh\nexit 0\n")
        path.chmod(0o755)
        return path

    return _make


@pytest.fixture
def make_symlink() -> Callable[[Path, str | Path], Path]:
    """Create a symlink at ``link`` pointing to ``target`` (kept verbatim)."""

    def _make(link: Path, target: str | Path) -> Path:
        link.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(target, link)
        return link

    return _make


@pytest.fixture
def homebrew_git(
    tmp_path: Path,
    make_executable: Callable[[Path], Path],
    make_symlink: Callable[[Path, str | Path], Path],
) -> Path:
    """Homebrew layout: bin/git -> ../Cellar/git/2.51.2/bin/git.

    Returns:
        The Homebrew bin directory to use as search path.
    """
    prefix = tmp_path / "opt" / "homebrew"
    make_executable(prefix / "Cellar" / "git" / "2.51.2" / "bin" / "git")
    make_symlink(prefix / "bin" / "git", "../Cellar/git/2.51.2/bin/git")
    return prefix / "bin"


@pytest.fixture
def mock_brew_output() -> str:
    """Sample 'brew list --versions git' output."""
    return "git 2.51.2 2.50.1\n"


@pytest.fixture
def mock_cargo_output() -> str:
    """Sample 'cargo install --list' output."""
    return """bat v0.24.0:
    bat
cargo-edit v0.12.2:
    cargo-add
    cargo-rm
ripgrep v14.1.0:
    rg
"""


@pytest.fixture
def mock_go_output() -> str:
    """Sample 'go version -m' output."""
    return (
        "/home/dev/go/bin/gopls: go1.22.0\n"
        "\tpath\tgolang.org/x/tools/gopls\n"
        "\tmod\tgolang.org/x/tools/gopls\tv0.15.3\th1:abc=\n"
        "\tdep\tgithub.com/google/go-cmp\tv0.6.0\th1:def=\n"
    )


@pytest.fixture
def mock_snap_output() -> str:
    """Sample 'snap list firefox' output."""
    return """Name     Version  Rev   Tracking       Publisher   Notes
firefox  128.0    4336  latest/stable  mozilla**   -
"""
