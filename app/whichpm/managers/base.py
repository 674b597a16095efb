"""Base class for package manager signatures.

A signature recognizes one package manager from the paths of a symlink
chain. Most signatures are purely declarative: a tuple of
:class:`PathRule` regular expressions, each with a specificity. Managers
whose evidence is not in the path string alone override
:meth:`Signature.match`.

Verification is an optional capability: a signature that names a
``verifier`` executable builds exactly one query command and parses its
output into a :class:`VerifiedPackage`.
"""

import re
import subprocess
from dataclasses import dataclass, field, replace
from functools import cache
from pathlib import Path, PurePath
from typing import ClassVar

from whichpm.core.errors import VerificationError
from whichpm.models.detection import DetectionCandidate, SymlinkChain, VerifiedPackage
from whichpm.models.platform import ALL_PLATFORMS, Platform
from whichpm.utils.shell import DEFAULT_TIMEOUT, run_command

# A node package directory name: '@scope/name' or 'name' (never '.bin' or '.pnpm').
NODE_PACKAGE = r"(?P<package>@[^/]+/[^/]+|[^/@.][^/]*)"


@cache
def _compile(pattern: str, ignore_case: bool) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE if ignore_case else 0)


@dataclass(frozen=True, slots=True)
class PathRule:
    """One path pattern of a signature.

    Patterns are searched in the platform-normalized path (forward
    slashes everywhere). Named groups ``package`` and ``version`` are
    copied into the match when present.

    Attributes:
        pattern: Regular expression source.
        specificity: Score of a match; narrower patterns score higher.
        description: Short human-readable label used in diagnostics.
        shim: The path is a launcher owned by the manager itself (its
            real binary is the manager, not the package).
    """

    pattern: str
    specificity: int
    description: str
    shim: bool = field(default=False)

    def search(self, text: str, platform: Platform) -> re.Match[str] | None:
        """Search the rule's pattern in a normalized path."""
        return _compile(self.pattern, not platform.case_sensitive).search(text)


@dataclass(frozen=True, slots=True)
class SignatureMatch:
    """Outcome of a successful signature match against one path."""

    specificity: int
    rule: str
    package_name: str | None = field(default=None)
    version: str | None = field(default=None)
    shim: bool = field(default=False)


@dataclass(frozen=True, slots=True)
class MatchContext:
    """Everything a signature may consult besides the path itself.

    Attributes:
        command: Command name as given by the caller.
        platform: Platform whose conventions apply.
        chain: Full symlink chain of the command.
    """

    command: str
    platform: Platform
    chain: SymlinkChain

    @property
    def command_name(self) -> str:
        """Bare command name: no directory, no Windows executable suffix."""
        name = PurePath(self.platform.normalize(self.command)).name
        if self.platform is Platform.WINDOWS:
            stem, dot, suffix = name.rpartition(".")
            if dot and suffix.lower() in {"exe", "cmd", "bat", "com", "ps1"}:
                return stem
        return name


class Signature:
    """A package manager identity plus the rules that recognize it.

    Subclasses set the class attributes below. Instances hold no state,
    so one shared instance per manager lives in the signature database.

    Attributes:
        id: Stable lowercase identifier (e.g. 'homebrew').
        name: Human-readable manager name.
        platforms: Platforms the signature applies to.
        rules: Declarative path rules used by the default :meth:`match`.
        package_from_command: Use the command name as package name when
            no rule captured one.
        verifier: Executable queried by :meth:`verify`, or None.
    """

    id: ClassVar[str]
    name: ClassVar[str]
    platforms: ClassVar[frozenset[Platform]] = ALL_PLATFORMS
    rules: ClassVar[tuple[PathRule, ...]] = ()
    package_from_command: ClassVar[bool] = False
    verifier: ClassVar[str | None] = None

    def supports(self, platform: Platform) -> bool:
        """Check if this signature applies to the given platform."""
        return platform in self.platforms

    @property
    def can_verify(self) -> bool:
        """Check if the manager can be queried for authoritative metadata."""
        return self.verifier is not None

    def match(self, path: Path, context: MatchContext) -> SignatureMatch | None:
        """Attempt to match one path of the chain.

        The default implementation returns the highest-specificity rule
        that matches; among equal scores the first declared rule wins.

        Args:
            path: Path under test.
            context: Command, platform and chain information.

        Returns:
            SignatureMatch if any rule matches, None otherwise.
        """
        text = context.platform.normalize(path)
        best: SignatureMatch | None = None
        for rule in self.rules:
            found = rule.search(text, context.platform)
            if found is None:
                continue
            if best is not None and rule.specificity <= best.specificity:
                continue
            groups = found.groupdict()
            best = SignatureMatch(
                specificity=rule.specificity,
                rule=rule.description,
                package_name=groups.get("package"),
                version=groups.get("version"),
                shim=rule.shim,
            )

        if best is not None and best.package_name is None and self.package_from_command:
            best = replace(best, package_name=context.command_name)
        return best

    def verify_command(
        self,
        candidate: DetectionCandidate,
        context: MatchContext,
    ) -> list[str]:
        """Build the single query command for a candidate.

        Raises:
            VerificationError: If the manager has no query interface or the
                candidate lacks the data needed to build the query.
        """
        msg = f"{self.name} does not support verification"
        raise VerificationError(msg)

    def parse_verification(
        self,
        stdout: str,
        candidate: DetectionCandidate,
        context: MatchContext,
    ) -> VerifiedPackage:
        """Parse the query output.

        Raises:
            VerificationError: If the output cannot be understood.
        """
        msg = f"{self.name} does not support verification"
        raise VerificationError(msg)

    def verify(
        self,
        candidate: DetectionCandidate,
        context: MatchContext,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> VerifiedPackage:
        """Confirm a candidate by querying the package manager.

        Args:
            candidate: The winning candidate for this signature.
            context: Command, platform and chain information.
            timeout: Maximum seconds to wait for the query.

        Returns:
            VerifiedPackage with the manager's own name and version.

        Raises:
            VerificationError: If the query cannot run, times out, exits
                non-zero or prints something unparsable.
        """
        args = self.verify_command(candidate, context)
        try:
            result = run_command(args, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            msg = f"'{args[0]}' did not answer within {timeout:g}s"
            raise VerificationError(msg) from e
        except OSError as e:
            msg = f"Failed to run '{args[0]}': {e}"
            raise VerificationError(msg) from e

        if not result.success:
            msg = f"'{' '.join(args)}' exited with code {result.returncode}: {result.error_summary}"
            raise VerificationError(msg)

        return self.parse_verification(result.stdout, candidate, context)

    def require_package(self, candidate: DetectionCandidate) -> str:
        """Return the candidate's package name or fail verification."""
        if not candidate.package_name:
            msg = f"No package name to query {self.name} with"
            raise VerificationError(msg)
        return candidate.package_name

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"
