"""Unit tests for the Signature base class."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest
from helpers import make_context
from whichpm.core.errors import VerificationError
from whichpm.managers.base import PathRule, Signature
from whichpm.models.detection import DetectionCandidate, VerifiedPackage
from whichpm.models.platform import Platform
from whichpm.utils.shell import CommandResult


class ToolboxSignature(Signature):
    id = "toolbox"
    name = "Toolbox"
    verifier = "toolbox"
    rules = (
        PathRule(r"/toolbox/", 40, "toolbox root"),
        PathRule(r"/toolbox/pkgs/(?P<package>[^/]+)/(?P<version>[^/]+)/", 90, "toolbox package"),
        PathRule(r"/toolbox/pkgs/(?P<package>[^/]+)/", 90, "toolbox package (unversioned)"),
    )

    def verify_command(self, candidate: DetectionCandidate, context: object) -> list[str]:
        return ["toolbox", "info", self.require_package(candidate)]

    def parse_verification(
        self, stdout: str, candidate: DetectionCandidate, context: object
    ) -> VerifiedPackage:
        name, version = stdout.split()
        return VerifiedPackage(name, version)


class LauncherSignature(Signature):
    id = "launcher"
    name = "Launcher"
    package_from_command = True
    rules = (PathRule(r"/Launcher/bin/", 60, "launcher bin"),)


def _candidate(package: str | None = "hammer") -> DetectionCandidate:
    return DetectionCandidate(
        manager_id="toolbox",
        manager_name="Toolbox",
        path=Path("/opt/toolbox/pkgs/hammer/1.0/bin/hammer"),
        hop=0,
        specificity=90,
        order=0,
        package_name=package,
        version="1.0",
    )


class TestSignatureMatch:
    """Tests for Signature.match default implementation."""

    def test_highest_specificity_rule(self) -> None:
        """The most specific matching rule wins over the broad one."""
        path = Path("/opt/toolbox/pkgs/hammer/1.0/bin/hammer")

        found = ToolboxSignature().match(path, make_context(path))

        assert found is not None
        assert found.specificity == 90
        assert (found.package_name, found.version) == ("hammer", "1.0")

    def test_first_rule_wins_ties(self) -> None:
        """Among equally specific rules the first declared one is kept."""
        path = Path("/opt/toolbox/pkgs/hammer/1.0/bin/hammer")

        found = ToolboxSignature().match(path, make_context(path))

        assert found is not None
        assert found.rule == "toolbox package"

    def test_no_match(self) -> None:
        """Unrelated paths return None."""
        path = Path("/usr/local/bin/hammer")

        assert ToolboxSignature().match(path, make_context(path)) is None

    def test_package_from_command(self) -> None:
        """Signatures whose launchers carry the package name fall back to it."""
        path = Path("/opt/Launcher/bin/saw")

        found = LauncherSignature().match(path, make_context(path))

        assert found is not None
        assert found.package_name == "saw"

    def test_windows_case_insensitive(self) -> None:
        """Windows paths match regardless of case and slash style."""
        path = r"C:\OPT\launcher\BIN\saw.exe"
        context = make_context(path, platform=Platform.WINDOWS)

        found = LauncherSignature().match(Path(path), context)

        assert found is not None
        assert found.package_name == "saw"

    def test_posix_case_sensitive(self) -> None:
        """POSIX paths keep their case."""
        path = Path("/opt/launcher/bin/saw")

        assert LauncherSignature().match(path, make_context(path)) is None


class TestSignatureVerify:
    """Tests for Signature.verify."""

    def test_success(self) -> None:
        """Output of the single query is parsed."""
        with patch("whichpm.managers.base.run_command") as mock_run:
            mock_run.return_value = CommandResult(stdout="hammer 1.0.1\n", stderr="", returncode=0)
            verified = ToolboxSignature().verify(_candidate(), make_context("/x"), timeout=3)

        mock_run.assert_called_once_with(["toolbox", "info", "hammer"], timeout=3)
        assert verified == VerifiedPackage("hammer", "1.0.1")

    def test_nonzero_exit(self) -> None:
        """A failing query names the command and the last stderr line."""
        with patch("whichpm.managers.base.run_command") as mock_run:
            mock_run.return_value = CommandResult(
                stdout="", stderr="warning\nno such package\n", returncode=3
            )
            with pytest.raises(VerificationError, match="exited with code 3: no such package"):
                ToolboxSignature().verify(_candidate(), make_context("/x"))

    def test_timeout(self) -> None:
        """A timeout becomes a VerificationError."""
        with (
            patch(
                "whichpm.managers.base.run_command",
                side_effect=subprocess.TimeoutExpired(cmd="toolbox", timeout=2),
            ),
            pytest.raises(VerificationError, match="did not answer within 2s"),
        ):
            ToolboxSignature().verify(_candidate(), make_context("/x"), timeout=2)

    def test_missing_executable(self) -> None:
        """A missing manager executable becomes a VerificationError."""
        with (
            patch(
                "whichpm.managers.base.run_command",
                side_effect=FileNotFoundError("toolbox"),
            ),
            pytest.raises(VerificationError, match="Failed to run 'toolbox'"),
        ):
            ToolboxSignature().verify(_candidate(), make_context("/x"))

    def test_requires_package(self) -> None:
        """A candidate without a package name cannot be queried."""
        with pytest.raises(VerificationError, match="No package name"):
            ToolboxSignature().verify(_candidate(package=None), make_context("/x"))

    def test_unsupported(self) -> None:
        """Signatures without a verifier refuse to verify."""
        signature = LauncherSignature()

        assert signature.can_verify is False
        with pytest.raises(VerificationError, match="does not support verification"):
            signature.verify(_candidate(), make_context("/x"))

    def test_repr(self) -> None:
        """repr names the class and id."""
        assert repr(ToolboxSignature()) == "ToolboxSignature(id='toolbox')"
