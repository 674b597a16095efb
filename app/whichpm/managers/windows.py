"""Signatures for Windows package managers: Chocolatey, Scoop and WinGet.

Paths are matched after normalization to forward slashes and without
regard to case.
"""

from whichpm.core.errors import VerificationError
from whichpm.managers.base import MatchContext, PathRule, Signature
from whichpm.models.detection import DetectionCandidate, VerifiedPackage
from whichpm.models.platform import Platform

WINDOWS_ONLY = frozenset({Platform.WINDOWS})


class ChocolateySignature(Signature):
    """Chocolatey packages under ``C:\\ProgramData\\chocolatey``."""

    id = "chocolatey"
    name = "Chocolatey"
    platforms = WINDOWS_ONLY
    package_from_command = True
    verifier = "choco"
    rules = (
        PathRule(r"/chocolatey/lib/(?P<package>[^/]+)/", 90, "chocolatey lib"),
        PathRule(r"/chocolatey/bin/", 80, "chocolatey shim"),
    )

    def verify_command(self, candidate: DetectionCandidate, context: MatchContext) -> list[str]:
        return ["choco", "list", "--exact", "--limit-output", self.require_package(candidate)]

    def parse_verification(
        self,
        stdout: str,
        candidate: DetectionCandidate,
        context: MatchContext,
    ) -> VerifiedPackage:
        # --limit-output prints "name|version"
        for line in stdout.splitlines():
            name, sep, version = line.strip().partition("|")
            if sep and name and version:
                return VerifiedPackage(name=name, version=version)
        msg = f"choco does not list {self.require_package(candidate)}"
        raise VerificationError(msg)


class ScoopSignature(Signature):
    """Scoop apps, per user (``~\\scoop``) or global (``C:\\ProgramData\\scoop``)."""

    id = "scoop"
    name = "Scoop"
    platforms = WINDOWS_ONLY
    package_from_command = True
    rules = (
        PathRule(
            r"/scoop/apps/(?P<package>[^/]+)/(?:current/|(?P<version>[^/]+)/)",
            90,
            "scoop app",
        ),
        PathRule(r"/scoop/shims/", 80, "scoop shim"),
    )


class WingetSignature(Signature):
    """WinGet portable packages.

    Package directories are named ``<PackageId>_<SourceId>``.
    """

    id = "winget"
    name = "WinGet"
    platforms = WINDOWS_ONLY
    package_from_command = True
    rules = (
        PathRule(r"/WinGet/Packages/(?P<package>[^/_]+)_[^/]+/", 85, "winget package"),
        PathRule(r"/WinGet/Links/", 75, "winget link"),
    )
