"""Homebrew signature (macOS and Linux)."""

from whichpm.core.errors import VerificationError
from whichpm.managers.base import MatchContext, PathRule, Signature
from whichpm.models.detection import DetectionCandidate, VerifiedPackage
from whichpm.models.platform import POSIX_PLATFORMS

# ARM Mac, Intel Mac and Linuxbrew prefixes
_PREFIX = r"(?:/opt/homebrew|/usr/local|/home/linuxbrew/\.linuxbrew|/\.linuxbrew)"


class HomebrewSignature(Signature):
    """Formulae live in the Cellar as ``{prefix}/Cellar/{formula}/{version}/``.

    Keg-only formulae are reached through ``{prefix}/opt/{formula}`` and
    casks through ``Caskroom``. Anything else below a Homebrew prefix is
    only a weak signal.
    """

    id = "homebrew"
    name = "Homebrew"
    platforms = POSIX_PLATFORMS
    verifier = "brew"
    rules = (
        PathRule(
            _PREFIX + r"/Cellar/(?P<package>[^/]+)/(?P<version>[^/]+)/",
            100,
            "Cellar formula",
        ),
        PathRule(
            r"/Caskroom/(?P<package>[^/]+)/(?P<version>[^/]+)/",
            95,
            "Caskroom cask",
        ),
        PathRule(_PREFIX + r"/opt/(?P<package>[^/]+)/", 70, "keg-only formula"),
        PathRule(
            r"^(?:/opt/homebrew/|/usr/local/Homebrew/|/home/linuxbrew/\.linuxbrew/)",
            40,
            "Homebrew prefix",
        ),
    )

    def verify_command(self, candidate: DetectionCandidate, context: MatchContext) -> list[str]:
        return ["brew", "list", "--versions", self.require_package(candidate)]

    def parse_verification(
        self,
        stdout: str,
        candidate: DetectionCandidate,
        context: MatchContext,
    ) -> VerifiedPackage:
        # Output: "git 2.51.2 2.50.1" (all installed versions)
        parts = stdout.strip().split()
        if len(parts) < 2:
            msg = f"Unexpected 'brew list' output: {stdout.strip()!r}"
            raise VerificationError(msg)
        versions = parts[1:]
        version = candidate.version if candidate.version in versions else versions[-1]
        return VerifiedPackage(name=parts[0], version=version)
