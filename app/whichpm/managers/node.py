"""Signatures for the JavaScript toolchain: npm, pnpm, Yarn, bun and n.

Global installs of all four package managers end up in a
``node_modules`` tree, so the manager-specific roots are scored above
npm's generic ``node_modules`` rule.
"""

import json
import logging
from pathlib import Path

from whichpm.core.errors import VerificationError
from whichpm.managers.base import NODE_PACKAGE, MatchContext, PathRule, Signature, SignatureMatch
from whichpm.models.detection import DetectionCandidate, VerifiedPackage
from whichpm.models.platform import POSIX_PLATFORMS

logger = logging.getLogger(__name__)


def _load_json(stdout: str, tool: str) -> object:
    try:
        return json.loads(stdout)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON from {tool}: {e}"
        raise VerificationError(msg) from e


def _dependency_version(data: object, package: str, tool: str) -> str:
    """Read ``dependencies[package].version`` from an 'ls --json' document."""
    dependencies = data.get("dependencies") if isinstance(data, dict) else None
    entry = dependencies.get(package) if isinstance(dependencies, dict) else None
    version = entry.get("version") if isinstance(entry, dict) else None
    if not isinstance(version, str) or not version:
        msg = f"{tool} does not list {package} as a global package"
        raise VerificationError(msg)
    return version


class NpmSignature(Signature):
    """npm global installs (``npm install -g``)."""

    id = "npm"
    name = "npm (global)"
    verifier = "npm"
    rules = (
        PathRule(r"/lib/node_modules/" + NODE_PACKAGE, 70, "global node_modules"),
        PathRule(
            r"/AppData/Roaming/npm/(?:node_modules/" + NODE_PACKAGE + ")?",
            65,
            "npm global prefix (Windows)",
        ),
        PathRule(r"/\.npm-global/(?:lib/node_modules/" + NODE_PACKAGE + ")?", 65, "~/.npm-global"),
        PathRule(r"/node_modules/" + NODE_PACKAGE + "/", 35, "node_modules package"),
    )

    def verify_command(self, candidate: DetectionCandidate, context: MatchContext) -> list[str]:
        return ["npm", "ls", "--global", "--depth=0", "--json", self.require_package(candidate)]

    def parse_verification(
        self,
        stdout: str,
        candidate: DetectionCandidate,
        context: MatchContext,
    ) -> VerifiedPackage:
        package = self.require_package(candidate)
        version = _dependency_version(_load_json(stdout, "npm"), package, "npm")
        return VerifiedPackage(name=package, version=version)


class PnpmSignature(Signature):
    """pnpm global installs (``pnpm add -g``)."""

    id = "pnpm"
    name = "pnpm (global)"
    package_from_command = True
    verifier = "pnpm"
    rules = (
        PathRule(
            r"/pnpm/global/[^/]+/node_modules/(?:" + NODE_PACKAGE + ")?",
            90,
            "pnpm global store",
        ),
        PathRule(r"/\.local/share/pnpm/", 75, "PNPM_HOME (Linux)"),
        PathRule(r"/Library/pnpm/", 75, "PNPM_HOME (macOS)"),
        PathRule(r"/AppData/Local/pnpm/", 75, "PNPM_HOME (Windows)"),
    )

    def verify_command(self, candidate: DetectionCandidate, context: MatchContext) -> list[str]:
        return ["pnpm", "ls", "--global", "--depth=0", "--json", self.require_package(candidate)]

    def parse_verification(
        self,
        stdout: str,
        candidate: DetectionCandidate,
        context: MatchContext,
    ) -> VerifiedPackage:
        package = self.require_package(candidate)
        data = _load_json(stdout, "pnpm")
        # pnpm prints one document per global project
        documents = data if isinstance(data, list) else [data]
        for document in documents:
            try:
                return VerifiedPackage(
                    name=package,
                    version=_dependency_version(document, package, "pnpm"),
                )
            except VerificationError:
                continue
        msg = f"pnpm does not list {package} as a global package"
        raise VerificationError(msg)


class YarnSignature(Signature):
    """Yarn classic global installs (``yarn global add``)."""

    id = "yarn"
    name = "Yarn (global)"
    package_from_command = True
    rules = (
        PathRule(r"/yarn/global/node_modules/(?:" + NODE_PACKAGE + ")?", 90, "yarn global"),
        PathRule(
            r"/Yarn/Data/global/node_modules/(?:" + NODE_PACKAGE + ")?",
            90,
            "yarn global (Windows)",
        ),
        PathRule(r"/\.yarn/bin/", 75, "~/.yarn/bin"),
        PathRule(r"/AppData/Local/Yarn/bin/", 75, "yarn bin (Windows)"),
    )


class BunSignature(Signature):
    """bun global installs (``bun add -g``)."""

    id = "bun"
    name = "bun (global)"
    package_from_command = True
    rules = (
        PathRule(
            r"/\.bun/install/global/node_modules/(?:" + NODE_PACKAGE + ")?",
            90,
            "bun global",
        ),
        PathRule(r"/\.bun/bin/", 80, "~/.bun/bin"),
    )


class NSignature(Signature):
    """Node.js installed by ``n``.

    n copies node into ``{PREFIX}/bin`` and keeps every version under
    ``{PREFIX}/n/versions/node/{version}``, so the evidence is a sibling
    directory rather than the path itself. The prefix is taken from the
    command path first (npm and npx are symlinks into lib/node_modules),
    then from the path under test.
    """

    id = "n"
    name = "n (Node version manager)"
    platforms = POSIX_PLATFORMS
    commands = frozenset({"node", "npm", "npx", "corepack"})
    specificity = 85

    def match(self, path: Path, context: MatchContext) -> SignatureMatch | None:
        command = context.command_name
        if command not in self.commands:
            return None

        for candidate in (context.chain.resolved, path):
            prefix = _bin_prefix(candidate)
            if prefix is None:
                continue
            versions_dir = prefix / "n" / "versions" / "node"
            try:
                versions = sorted(entry.name for entry in versions_dir.iterdir() if entry.is_dir())
            except OSError:
                continue
            logger.debug("Found n versions in %s: %s", versions_dir, versions)
            return SignatureMatch(
                specificity=self.specificity,
                rule="n versions directory",
                package_name=command,
                version=versions[0] if len(versions) == 1 else None,
            )
        return None


def _bin_prefix(path: Path) -> Path | None:
    """Return ``/usr/local`` for ``/usr/local/bin/node``; None if not in a bin dir."""
    if path.parent.name != "bin":
        return None
    return path.parent.parent
