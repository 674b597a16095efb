"""Detection models.

Immutable data structures produced by the detection pipeline: the
symlink chain, transient match candidates and the final result handed
to the renderers.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

UNKNOWN_MANAGER_ID = "unknown"
UNKNOWN_MANAGER_NAME = "Unknown"
SYSTEM_MANAGER_ID = "system"
SYSTEM_MANAGER_NAME = "System (OS standard)"


class VerificationStatus(Enum):
    """How the manager identity of a result was established."""

    VERIFIED = "verified"
    PATTERN_MATCHED = "pattern-matched"
    UNKNOWN = "unknown"


class Confidence(Enum):
    """Coarse confidence label shown to users.

    HIGH: verified by the package manager, or package and version were
    read from a manager-owned layout. MEDIUM: path pattern match.
    LOW: OS-standard system directory. UNCERTAIN: nothing matched.
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNCERTAIN = "uncertain"


class DiagnosticStage(Enum):
    """Pipeline stage a diagnostic step belongs to."""

    RESOLVE = "resolve"
    SYMLINK = "symlink"
    MATCH = "match"
    VERIFY = "verify"


@dataclass(frozen=True, slots=True)
class DiagnosticStep:
    """One entry of the verbose diagnostic trail.

    Attributes:
        stage: Pipeline stage that produced the step.
        subject: What was examined (a path, a signature id, a command).
        outcome: Short outcome keyword (e.g. 'found', 'matched', 'no-match').
        detail: Optional free-form explanation.
    """

    stage: DiagnosticStage
    subject: str
    outcome: str
    detail: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        data: dict[str, Any] = {
            "stage": self.stage.value,
            "subject": self.subject,
            "outcome": self.outcome,
        }
        if self.detail is not None:
            data["detail"] = self.detail
        return data


@dataclass(frozen=True, slots=True)
class SymlinkChain:
    """Ordered hops from a resolved command path to its terminal path.

    Hop 0 is the resolved path itself; the last hop is the terminal path.
    A chain whose analysis stopped early keeps the hops collected so far
    and describes the problem in ``error``.

    Attributes:
        hops: Paths in link order, never empty.
        error: Reason the chain is partial, if it is.
    """

    hops: tuple[Path, ...]
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate chain invariants."""
        if not self.hops:
            msg = "Symlink chain must contain at least the resolved path"
            raise ValueError(msg)

    @property
    def resolved(self) -> Path:
        """The path the chain starts from."""
        return self.hops[0]

    @property
    def terminal(self) -> Path:
        """The last path reached."""
        return self.hops[-1]

    @property
    def is_partial(self) -> bool:
        """Check if analysis stopped before reaching a real file."""
        return self.error is not None

    @property
    def has_links(self) -> bool:
        """Check if the resolved path was a symlink at all."""
        return len(self.hops) > 1

    def fallback_order(self) -> list[tuple[int, Path]]:
        """Return the non-terminal hops, closest to the command first."""
        return list(enumerate(self.hops[:-1]))

    def __len__(self) -> int:
        return len(self.hops)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.hops)


@dataclass(frozen=True, slots=True)
class DetectionCandidate:
    """A signature match against one path of the chain.

    Attributes:
        manager_id: Stable lowercase signature id.
        manager_name: Human-readable manager name.
        path: The chain path that matched.
        hop: Index of ``path`` in the chain.
        specificity: How narrowly the signature matched; higher wins.
        order: Declaration order of the signature in the database.
        package_name: Package name derived from the path, if any.
        version: Version derived from the path, if any.
        shim: Whether the match came from a launcher or shim rule.
    """

    manager_id: str
    manager_name: str
    path: Path
    hop: int
    specificity: int
    order: int
    package_name: str | None = field(default=None)
    version: str | None = field(default=None)
    shim: bool = field(default=False)

    @property
    def rank(self) -> tuple[int, int]:
        """Sort key: highest specificity first, then earliest declared."""
        return (-self.specificity, self.order)


@dataclass(frozen=True, slots=True)
class VerifiedPackage:
    """Authoritative package metadata reported by a package manager."""

    name: str
    version: str | None = field(default=None)


@dataclass(frozen=True, slots=True)
class DetectionResult:
    """Final outcome of detecting a single command.

    Attributes:
        command: Command name as given by the caller.
        manager_id: Stable manager id, 'system' or 'unknown'.
        manager_name: Human-readable manager name.
        package_name: Package name, when derivable.
        version: Package version, when derivable.
        verification: How the identity was established.
        confidence: Coarse confidence label.
        chain: Symlink chain from the resolved path to the install location.
        specificity: Specificity of the winning match (0 if none).
        verification_error: Why verification failed, if it was attempted.
        diagnostics: Ordered trail of every step, empty unless verbose.
    """

    command: str
    manager_id: str
    manager_name: str
    package_name: str | None
    version: str | None
    verification: VerificationStatus
    confidence: Confidence
    chain: SymlinkChain
    specificity: int = field(default=0)
    verification_error: str | None = field(default=None)
    diagnostics: tuple[DiagnosticStep, ...] = field(default=())

    @property
    def command_path(self) -> Path:
        """Path found on the search path."""
        return self.chain.resolved

    @property
    def resolved_path(self) -> Path:
        """Install location (terminal path of the chain)."""
        return self.chain.terminal

    @property
    def is_unknown(self) -> bool:
        """Check if no manager could be identified."""
        return self.manager_id == UNKNOWN_MANAGER_ID

    @property
    def is_system(self) -> bool:
        """Check if the command lives in an OS-standard directory."""
        return self.manager_id == SYSTEM_MANAGER_ID

    @property
    def is_verified(self) -> bool:
        """Check if the package manager confirmed the match."""
        return self.verification == VerificationStatus.VERIFIED

    def to_dict(self, include_diagnostics: bool = True) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary.

        Args:
            include_diagnostics: Include the diagnostic trail when present.

        Returns:
            Dictionary representation of the result.
        """
        data: dict[str, Any] = {
            "command": self.command,
            "manager_id": self.manager_id,
            "manager_name": self.manager_name,
            "package_name": self.package_name,
            "version": self.version,
            "confidence": self.confidence.value,
            "verification": self.verification.value,
            "command_path": str(self.command_path),
            "resolved_path": str(self.resolved_path),
            "symlink_chain": [str(hop) for hop in self.chain],
        }
        if self.chain.error is not None:
            data["symlink_error"] = self.chain.error
        if self.verification_error is not None:
            data["verification_error"] = self.verification_error
        if include_diagnostics and self.diagnostics:
            data["diagnostics"] = [step.to_dict() for step in self.diagnostics]
        return data
