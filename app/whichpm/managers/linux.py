"""Signatures for Linux distribution and system-level package managers.

Covers apt/dpkg, Snap and Nix (Nix also runs on macOS).
"""

import logging
import re
from functools import lru_cache
from pathlib import Path

from whichpm.core.errors import VerificationError
from whichpm.managers.base import MatchContext, PathRule, Signature, SignatureMatch
from whichpm.models.detection import DetectionCandidate, VerifiedPackage
from whichpm.models.platform import POSIX_PLATFORMS, Platform

logger = logging.getLogger(__name__)

# dpkg keeps one '<package>[:<arch>].list' file per installed package.
DPKG_INFO_DIR = Path("/var/lib/dpkg/info")

# Directories dpkg-owned commands are installed to.
_DPKG_BIN_DIRS = ("/usr/bin/", "/usr/sbin/", "/bin/", "/sbin/", "/usr/games/", "/usr/libexec/")

# /nix/store/<32-char hash>-<name>[-<version>]/...
_NIX_STORE_RE = re.compile(r"/nix/store/[0-9a-z]{32}-(?P<name_version>[^/]+)")


def _usrmerge_aliases(path: str) -> list[str]:
    """Return the path plus its /usr-merged twin.

    On merged-/usr systems /bin is a link to /usr/bin, and dpkg may list
    either spelling.
    """
    if path.startswith("/usr/"):
        return [path, path.removeprefix("/usr")]
    return [path, "/usr" + path]


@lru_cache(maxsize=256)
def dpkg_owner(path: str, info_dir: Path = DPKG_INFO_DIR) -> str | None:
    """Find the dpkg package that installed a file.

    Reads the dpkg file lists directly instead of running ``dpkg -S``,
    so matching never spawns a process.

    Args:
        path: Absolute file path.
        info_dir: dpkg info directory holding the '.list' files.

    Returns:
        Package name without architecture qualifier, or None.
    """
    wanted = set(_usrmerge_aliases(path))
    try:
        lists = sorted(info_dir.glob("*.list"))
    except OSError as e:
        logger.debug("Cannot read dpkg database %s: %s", info_dir, e)
        return None

    for list_file in lists:
        try:
            with open(list_file, encoding="utf-8", errors="replace") as f:
                if any(line.rstrip("\n") in wanted for line in f):
                    return list_file.stem.split(":", 1)[0]
        except OSError as e:
            logger.debug("Skipping unreadable dpkg list %s: %s", list_file, e)
    return None


class AptSignature(Signature):
    """Commands installed from .deb packages (Debian, Ubuntu, Pop!_OS).

    A system directory alone says nothing about the installer; the file
    must be listed in the dpkg database.
    """

    id = "apt"
    name = "apt"
    platforms = frozenset({Platform.LINUX})
    verifier = "dpkg-query"
    specificity = 50
    info_dir = DPKG_INFO_DIR

    def match(self, path: Path, context: MatchContext) -> SignatureMatch | None:
        text = str(path)
        if not text.startswith(_DPKG_BIN_DIRS):
            return None
        package = dpkg_owner(text, self.info_dir)
        if package is None:
            return None
        return SignatureMatch(
            specificity=self.specificity,
            rule="dpkg file list",
            package_name=package,
        )

    def verify_command(self, candidate: DetectionCandidate, context: MatchContext) -> list[str]:
        package = self.require_package(candidate)
        return ["dpkg-query", "-W", "-f=${Package}\\t${Version}\\n", package]

    def parse_verification(
        self,
        stdout: str,
        candidate: DetectionCandidate,
        context: MatchContext,
    ) -> VerifiedPackage:
        line = stdout.strip().split("\n")[0] if stdout.strip() else ""
        parts = line.split("\t")
        if len(parts) < 2 or not parts[0].strip() or not parts[1].strip():
            msg = f"Unexpected dpkg-query output: {line!r}"
            raise VerificationError(msg)
        return VerifiedPackage(name=parts[0].strip(), version=parts[1].strip())


class SnapSignature(Signature):
    """Snap packages.

    ``/snap/bin/<app>`` entries are symlinks to ``/usr/bin/snap``; the
    shim hop, not the terminal snapd binary, names the manager.
    """

    id = "snap"
    name = "Snap"
    platforms = frozenset({Platform.LINUX})
    package_from_command = True
    verifier = "snap"
    rules = (
        PathRule(r"^/snap/(?!bin/)(?P<package>[^/]+)/[^/]+/", 95, "snap mount"),
        PathRule(r"^/snap/bin/", 80, "snap launcher", shim=True),
        PathRule(r"^/var/lib/snapd/snap/bin/", 80, "snap launcher", shim=True),
    )

    def match(self, path: Path, context: MatchContext) -> SignatureMatch | None:
        found = super().match(path, context)
        if found is not None and found.shim:
            # "/snap/bin/<snap>.<app>" launches app <app> of snap <snap>
            package = path.name.split(".", 1)[0]
            return SignatureMatch(found.specificity, found.rule, package, None, True)
        return found

    def verify_command(self, candidate: DetectionCandidate, context: MatchContext) -> list[str]:
        return ["snap", "list", self.require_package(candidate)]

    def parse_verification(
        self,
        stdout: str,
        candidate: DetectionCandidate,
        context: MatchContext,
    ) -> VerifiedPackage:
        # Header "Name Version Rev Tracking Publisher Notes", then one row
        lines = [line for line in stdout.splitlines() if line.strip()]
        if len(lines) < 2:
            msg = "Unexpected 'snap list' output"
            raise VerificationError(msg)
        columns = lines[1].split()
        if len(columns) < 2:
            msg = f"Unexpected 'snap list' row: {lines[1]!r}"
            raise VerificationError(msg)
        return VerifiedPackage(name=columns[0], version=columns[1])


def split_nix_store_name(name_version: str) -> tuple[str, str | None]:
    """Split 'hello-2.12.1' into ('hello', '2.12.1').

    The version is the part after the last dash when it starts with a
    digit; otherwise the whole string is the name.
    """
    name, dash, version = name_version.rpartition("-")
    if dash and name and version[:1].isdigit():
        return name, version
    return name_version, None


class NixSignature(Signature):
    """Packages from the Nix store, reached directly or through a profile."""

    id = "nix"
    name = "Nix"
    platforms = POSIX_PLATFORMS
    package_from_command = True
    rules = (
        PathRule(r"/\.nix-profile/bin/", 70, "user Nix profile"),
        PathRule(r"^/nix/var/nix/profiles/", 70, "Nix system profile"),
        PathRule(r"^/run/current-system/sw/bin/", 70, "NixOS system profile"),
        PathRule(r"^/etc/profiles/per-user/[^/]+/bin/", 70, "NixOS user profile"),
    )
    store_specificity = 95

    def match(self, path: Path, context: MatchContext) -> SignatureMatch | None:
        found = _NIX_STORE_RE.search(str(path))
        if found is None:
            return super().match(path, context)
        name, version = split_nix_store_name(found["name_version"])
        return SignatureMatch(
            specificity=self.store_specificity,
            rule="Nix store path",
            package_name=name,
            version=version,
        )
