"""Unit tests for HomebrewSignature."""

from pathlib import Path
from unittest.mock import patch

import pytest
from helpers import make_context
from whichpm.core.errors import VerificationError
from whichpm.managers.homebrew import HomebrewSignature
from whichpm.models.detection import DetectionCandidate
from whichpm.models.platform import Platform
from whichpm.utils.shell import CommandResult


def _candidate(version: str | None = None) -> DetectionCandidate:
    return DetectionCandidate(
        manager_id="homebrew",
        manager_name="Homebrew",
        path=Path("/opt/homebrew/Cellar/git/2.51.2/bin/git"),
        hop=1,
        specificity=100,
        order=0,
        package_name="git",
        version=version,
    )


class TestHomebrewSignature:
    """Tests for HomebrewSignature class."""

    @pytest.fixture
    def signature(self) -> HomebrewSignature:
        """Create HomebrewSignature instance."""
        return HomebrewSignature()

    def test_platforms(self, signature: HomebrewSignature) -> None:
        """Homebrew runs on macOS and Linux only."""
        assert signature.supports(Platform.MACOS) is True
        assert signature.supports(Platform.LINUX) is True
        assert signature.supports(Platform.WINDOWS) is False

    @pytest.mark.parametrize(
        ("path", "specificity", "package", "version"),
        [
            ("/opt/homebrew/Cellar/git/2.51.2/bin/git", 100, "git", "2.51.2"),
            ("/usr/local/Cellar/wget/1.24.5/bin/wget", 100, "wget", "1.24.5"),
            ("/home/linuxbrew/.linuxbrew/Cellar/jq/1.7.1/bin/jq", 100, "jq", "1.7.1"),
            ("/opt/homebrew/Caskroom/iterm2/3.5.0/iTerm.app/bin/it2", 95, "iterm2", "3.5.0"),
            ("/opt/homebrew/opt/python@3.12/bin/python3", 70, "python@3.12", None),
            ("/opt/homebrew/bin/brew", 40, None, None),
        ],
    )
    def test_match(
        self,
        signature: HomebrewSignature,
        path: str,
        specificity: int,
        package: str | None,
        version: str | None,
    ) -> None:
        """Cellar, Caskroom, opt and prefix layouts score in that order."""
        found = signature.match(Path(path), make_context(path, platform=Platform.MACOS))

        assert found is not None
        assert found.specificity == specificity
        assert found.package_name == package
        assert found.version == version

    def test_usr_local_bin_alone_is_not_homebrew(self, signature: HomebrewSignature) -> None:
        """/usr/local/bin is shared with many installers."""
        path = "/usr/local/bin/git"

        assert signature.match(Path(path), make_context(path, platform=Platform.MACOS)) is None

    def test_verify_command(self, signature: HomebrewSignature) -> None:
        """One 'brew list --versions' query per package."""
        args = signature.verify_command(_candidate(), make_context("/x"))

        assert args == ["brew", "list", "--versions", "git"]

    def test_parse_prefers_path_version(
        self, signature: HomebrewSignature, mock_brew_output: str
    ) -> None:
        """The version from the Cellar path is kept when brew lists it."""
        verified = signature.parse_verification(
            mock_brew_output, _candidate("2.51.2"), make_context("/x")
        )

        assert (verified.name, verified.version) == ("git", "2.51.2")

    def test_parse_falls_back_to_last_listed(
        self, signature: HomebrewSignature, mock_brew_output: str
    ) -> None:
        """Without a path version the last listed version is reported."""
        verified = signature.parse_verification(mock_brew_output, _candidate(), make_context("/x"))

        assert verified.version == "2.50.1"

    def test_parse_not_installed(self, signature: HomebrewSignature) -> None:
        """Empty output means brew does not know the formula."""
        with pytest.raises(VerificationError, match="Unexpected 'brew list' output"):
            signature.parse_verification("", _candidate(), make_context("/x"))

    def test_verify_end_to_end(self, signature: HomebrewSignature, mock_brew_output: str) -> None:
        """verify runs the query and parses its output."""
        with patch("whichpm.managers.base.run_command") as mock_run:
            mock_run.return_value = CommandResult(stdout=mock_brew_output, stderr="", returncode=0)
            verified = signature.verify(_candidate("2.51.2"), make_context("/x"))

        assert verified.version == "2.51.2"
