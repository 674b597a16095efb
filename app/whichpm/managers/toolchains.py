"""Signatures for language toolchain installers.

Covers ``cargo install``, ``go install``, RubyGems, pipx and mise.
"""

import json
import re
from pathlib import PurePath

from whichpm.core.errors import VerificationError
from whichpm.managers.base import MatchContext, PathRule, Signature
from whichpm.models.detection import DetectionCandidate, VerifiedPackage

# "ripgrep v14.1.0:" or "foo v0.1.0 (/src/foo):"
_CARGO_CRATE_RE = re.compile(r"^(?P<name>\S+) v(?P<version>[^\s:]+)(?: \(.*\))?:$")
# "rails (7.1.3, default: 7.0.8)"
_GEM_LINE_RE = re.compile(r"^(?P<name>\S+) \((?P<versions>[^)]*)\)$")


def _binary_name(candidate: DetectionCandidate, context: MatchContext) -> str:
    name = PurePath(context.platform.normalize(context.chain.terminal)).name
    return name.removesuffix(".exe")


class CargoSignature(Signature):
    """Binaries installed with ``cargo install`` into ``~/.cargo/bin``."""

    id = "cargo"
    name = "Cargo"
    package_from_command = True
    verifier = "cargo"
    rules = (PathRule(r"/\.cargo/bin/", 80, "~/.cargo/bin"),)

    def verify_command(self, candidate: DetectionCandidate, context: MatchContext) -> list[str]:
        return ["cargo", "install", "--list"]

    def parse_verification(
        self,
        stdout: str,
        candidate: DetectionCandidate,
        context: MatchContext,
    ) -> VerifiedPackage:
        # Crate lines are followed by indented binary names; the binary
        # (e.g. 'rg') often differs from the crate ('ripgrep').
        binary = _binary_name(candidate, context)
        crate: VerifiedPackage | None = None
        for line in stdout.splitlines():
            if not line.strip():
                continue
            if not line[0].isspace():
                found = _CARGO_CRATE_RE.match(line.strip())
                crate = VerifiedPackage(found["name"], found["version"]) if found else None
            elif crate is not None and line.strip().removesuffix(".exe") == binary:
                return crate
        msg = f"cargo does not list a crate providing '{binary}'"
        raise VerificationError(msg)


class GoSignature(Signature):
    """Binaries installed with ``go install`` into ``$GOPATH/bin``."""

    id = "go"
    name = "go install"
    package_from_command = True
    verifier = "go"
    rules = (PathRule(r"/go/bin/", 60, "GOPATH bin"),)

    def verify_command(self, candidate: DetectionCandidate, context: MatchContext) -> list[str]:
        return ["go", "version", "-m", str(context.chain.terminal)]

    def parse_verification(
        self,
        stdout: str,
        candidate: DetectionCandidate,
        context: MatchContext,
    ) -> VerifiedPackage:
        # Build info lines are tab separated: "\tmod\t<module>\t<version>\t<sum>"
        for line in stdout.splitlines():
            fields = line.strip().split("\t")
            if len(fields) >= 3 and fields[0] == "mod":
                return VerifiedPackage(name=fields[1], version=fields[2])
        msg = "No module information in 'go version -m' output"
        raise VerificationError(msg)


class GemSignature(Signature):
    """Executables installed by RubyGems."""

    id = "gem"
    name = "RubyGems"
    package_from_command = True
    verifier = "gem"
    rules = (
        PathRule(
            r"/gems/[^/]+/gems/(?P<package>[^/]+?)-(?P<version>\d[^/]*)/(?:exe|bin)/",
            85,
            "gem directory",
        ),
        PathRule(r"(?:/\.gem/ruby/|/ruby/gems/|/var/lib/gems/).*/bin/", 70, "gem bin directory"),
    )

    def verify_command(self, candidate: DetectionCandidate, context: MatchContext) -> list[str]:
        return ["gem", "list", "--local", "--exact", self.require_package(candidate)]

    def parse_verification(
        self,
        stdout: str,
        candidate: DetectionCandidate,
        context: MatchContext,
    ) -> VerifiedPackage:
        for line in stdout.splitlines():
            found = _GEM_LINE_RE.match(line.strip())
            if found is None:
                continue
            versions = [v.strip().removeprefix("default: ") for v in found["versions"].split(",")]
            return VerifiedPackage(name=found["name"], version=versions[0] or None)
        msg = f"gem does not list {self.require_package(candidate)}"
        raise VerificationError(msg)


class PipxSignature(Signature):
    """Applications installed with pipx into per-package virtualenvs.

    ``~/.local/bin`` alone is shared with ``pip install --user`` and many
    other tools, so only the venv layout counts.
    """

    id = "pipx"
    name = "pipx"
    verifier = "pipx"
    rules = (PathRule(r"/pipx/venvs/(?P<package>[^/]+)/", 90, "pipx venv"),)

    def verify_command(self, candidate: DetectionCandidate, context: MatchContext) -> list[str]:
        return ["pipx", "list", "--json"]

    def parse_verification(
        self,
        stdout: str,
        candidate: DetectionCandidate,
        context: MatchContext,
    ) -> VerifiedPackage:
        package = self.require_package(candidate)
        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as e:
            msg = f"Invalid JSON from pipx: {e}"
            raise VerificationError(msg) from e

        try:
            main_package = data["venvs"][package]["metadata"]["main_package"]
            return VerifiedPackage(
                name=main_package["package"],
                version=main_package.get("package_version"),
            )
        except (KeyError, TypeError) as e:
            msg = f"pipx does not list a venv named {package}"
            raise VerificationError(msg) from e


class MiseSignature(Signature):
    """Tools managed by mise (formerly rtx).

    Shims are symlinks to the mise executable itself, so a shim hop
    identifies mise even though the terminal path is mise's own binary.
    """

    id = "mise"
    name = "mise"
    package_from_command = True
    rules = (
        PathRule(
            r"/mise/installs/(?P<package>[^/]+)/(?P<version>[^/]+)/",
            90,
            "mise install directory",
        ),
        PathRule(r"/mise/shims/", 80, "mise shim", shim=True),
    )
