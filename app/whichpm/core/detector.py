"""Detection orchestrator.

Runs the pipeline for one command: resolve the command on the search
path, analyze its symlink chain, select the best signature match and,
when requested, verify it with the package manager itself.

Only resolution can fail a detection. Symlink problems degrade to a
partial chain, an unmatched chain becomes the 'system' or 'unknown'
result, and a failed verification only lowers the confidence label.
"""

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from whichpm.core.errors import CommandNotFoundError, VerificationError
from whichpm.core.matching import DiagnosticTrail, select_candidate
from whichpm.core.resolver import resolve_all, resolve_command
from whichpm.core.symlinks import DEFAULT_MAX_HOPS, analyze_chain
from whichpm.managers import DEFAULT_SIGNATURES, system_directory_of
from whichpm.managers.base import MatchContext, Signature
from whichpm.models.detection import (
    SYSTEM_MANAGER_ID,
    SYSTEM_MANAGER_NAME,
    UNKNOWN_MANAGER_ID,
    UNKNOWN_MANAGER_NAME,
    Confidence,
    DetectionCandidate,
    DetectionResult,
    DiagnosticStage,
    SymlinkChain,
    VerificationStatus,
)
from whichpm.models.platform import Platform
from whichpm.utils.shell import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

# Path-derived package and version from a rule this narrow count as high confidence.
HIGH_CONFIDENCE_SPECIFICITY = 90


@dataclass(frozen=True, slots=True)
class DetectionOutcome:
    """Result of one command in a multi-command run.

    Exactly one of ``result`` and ``error`` is set.
    """

    command: str
    result: DetectionResult | None = field(default=None)
    error: CommandNotFoundError | None = field(default=None)

    @property
    def found(self) -> bool:
        """Check if the command was found on the search path."""
        return self.result is not None


class Detector:
    """Identifies the package manager behind a command.

    Args:
        signatures: Ordered signature database. Defaults to all known managers.
        platform: Platform conventions to apply. Defaults to the current one.
        verify: Query the matched package manager for authoritative metadata.
        verify_timeout: Seconds to wait for a verification query.
        max_hops: Maximum number of symlinks to follow.
        verbose: Record a diagnostic trail on each result.
        search_path: PATH-style string to search instead of ``$PATH``.
        disabled: Signature ids to leave out.

    Example:
        >>> detector = Detector(verify=True)
        >>> result = detector.detect("git")
        >>> print(result.manager_id, result.package_name, result.version)
    """

    def __init__(
        self,
        signatures: Sequence[Signature] = DEFAULT_SIGNATURES,
        *,
        platform: Platform | None = None,
        verify: bool = False,
        verify_timeout: float = DEFAULT_TIMEOUT,
        max_hops: int = DEFAULT_MAX_HOPS,
        verbose: bool = False,
        search_path: str | None = None,
        disabled: Iterable[str] = (),
    ) -> None:
        excluded = set(disabled)
        self._signatures = tuple(s for s in signatures if s.id not in excluded)
        self._platform = platform or Platform.current()
        self._verify = verify
        self._verify_timeout = verify_timeout
        self._max_hops = max_hops
        self._verbose = verbose
        self._search_path = search_path

    @property
    def signatures(self) -> tuple[Signature, ...]:
        """Signatures consulted by this detector, in precedence order."""
        return self._signatures

    @property
    def platform(self) -> Platform:
        """Platform whose conventions are applied."""
        return self._platform

    def detect(self, command: str) -> DetectionResult:
        """Detect which package manager installed a command.

        Args:
            command: Command name, or a path to an executable.

        Returns:
            DetectionResult, possibly 'system' or 'unknown'.

        Raises:
            CommandNotFoundError: If the command is not on the search path.
        """
        trail = DiagnosticTrail(self._verbose)
        try:
            path = resolve_command(command, platform=self._platform, search_path=self._search_path)
        except CommandNotFoundError:
            logger.debug("Command %s not found", command)
            raise
        trail.add(DiagnosticStage.RESOLVE, command, "found", str(path))
        return self._detect_resolved(command, path, trail)

    def detect_path(self, path: Path, command: str | None = None) -> DetectionResult:
        """Detect the package manager for an already resolved path.

        Args:
            path: Executable path (hop 0 of the chain).
            command: Command name for signatures that consult it.
                Defaults to the file name of ``path``.

        Returns:
            DetectionResult, possibly 'system' or 'unknown'.
        """
        trail = DiagnosticTrail(self._verbose)
        trail.add(DiagnosticStage.RESOLVE, str(path), "given")
        return self._detect_resolved(command or path.name, path, trail)

    def detect_all(self, command: str) -> list[DetectionResult]:
        """Detect every copy of a command on the search path.

        Shadowed copies (later PATH entries) are included, in PATH order.

        Raises:
            CommandNotFoundError: If the command is not on the search path.
        """
        paths = resolve_all(command, platform=self._platform, search_path=self._search_path)
        if not paths:
            raise CommandNotFoundError(command)
        results: list[DetectionResult] = []
        for path in paths:
            trail = DiagnosticTrail(self._verbose)
            trail.add(DiagnosticStage.RESOLVE, command, "found", str(path))
            results.append(self._detect_resolved(command, path, trail))
        return results

    def detect_many(self, commands: Sequence[str], max_workers: int = 4) -> list[DetectionOutcome]:
        """Detect several commands concurrently.

        Pipelines share nothing but the read-only signature database.

        Args:
            commands: Command names.
            max_workers: Maximum number of concurrent pipelines.

        Returns:
            One outcome per command, in input order.
        """
        if not commands:
            return []
        with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(commands)))) as pool:
            return list(pool.map(self._outcome, commands))

    def _outcome(self, command: str) -> DetectionOutcome:
        try:
            return DetectionOutcome(command=command, result=self.detect(command))
        except CommandNotFoundError as e:
            return DetectionOutcome(command=command, error=e)

    def _detect_resolved(self, command: str, path: Path, trail: DiagnosticTrail) -> DetectionResult:
        chain = analyze_chain(path, self._max_hops)
        for index, hop in enumerate(chain.hops[1:], start=1):
            trail.add(DiagnosticStage.SYMLINK, str(hop), "followed", f"hop {index}")
        if chain.error is not None:
            trail.add(DiagnosticStage.SYMLINK, str(chain.terminal), "partial", chain.error)
        logger.debug("Symlink chain for %s: %s", command, " -> ".join(map(str, chain)))

        context = MatchContext(command=command, platform=self._platform, chain=chain)
        candidate = select_candidate(self._signatures, context, trail)
        if candidate is None:
            return self._unmatched(command, chain, trail)

        logger.debug("Matched %s for %s", candidate.manager_id, command)
        if not self._verify:
            return self._pattern_result(command, chain, candidate, trail)
        return self._verified_result(command, chain, candidate, context, trail)

    def _pattern_result(
        self,
        command: str,
        chain: SymlinkChain,
        candidate: DetectionCandidate,
        trail: DiagnosticTrail,
        verification_error: str | None = None,
    ) -> DetectionResult:
        derived = bool(candidate.package_name and candidate.version)
        if derived and candidate.specificity >= HIGH_CONFIDENCE_SPECIFICITY:
            confidence = Confidence.HIGH
        else:
            confidence = Confidence.MEDIUM
        return DetectionResult(
            command=command,
            manager_id=candidate.manager_id,
            manager_name=candidate.manager_name,
            package_name=candidate.package_name,
            version=candidate.version,
            verification=VerificationStatus.PATTERN_MATCHED,
            confidence=confidence,
            chain=chain,
            specificity=candidate.specificity,
            verification_error=verification_error,
            diagnostics=trail.steps(),
        )

    def _verified_result(
        self,
        command: str,
        chain: SymlinkChain,
        candidate: DetectionCandidate,
        context: MatchContext,
        trail: DiagnosticTrail,
    ) -> DetectionResult:
        signature = self._signatures[candidate.order]
        if not signature.can_verify:
            trail.add(DiagnosticStage.VERIFY, signature.id, "skipped", "no query interface")
            return self._pattern_result(command, chain, candidate, trail)
        try:
            verified = signature.verify(candidate, context, timeout=self._verify_timeout)
        except VerificationError as e:
            logger.debug("Verification with %s failed: %s", signature.id, e)
            trail.add(DiagnosticStage.VERIFY, signature.id, "failed", str(e))
            return self._pattern_result(command, chain, candidate, trail, str(e))

        trail.add(
            DiagnosticStage.VERIFY,
            signature.id,
            "verified",
            f"{verified.name} {verified.version or ''}".strip(),
        )
        return DetectionResult(
            command=command,
            manager_id=candidate.manager_id,
            manager_name=candidate.manager_name,
            package_name=verified.name or candidate.package_name,
            version=verified.version or candidate.version,
            verification=VerificationStatus.VERIFIED,
            confidence=Confidence.HIGH,
            chain=chain,
            specificity=candidate.specificity,
            diagnostics=trail.steps(),
        )

    def _unmatched(
        self, command: str, chain: SymlinkChain, trail: DiagnosticTrail
    ) -> DetectionResult:
        directory = None
        for path in (chain.terminal, chain.resolved):
            directory = system_directory_of(path, self._platform)
            if directory is not None:
                break

        if directory is not None:
            trail.add(DiagnosticStage.MATCH, SYSTEM_MANAGER_ID, "matched", directory)
            return DetectionResult(
                command=command,
                manager_id=SYSTEM_MANAGER_ID,
                manager_name=SYSTEM_MANAGER_NAME,
                package_name=None,
                version=None,
                verification=VerificationStatus.PATTERN_MATCHED,
                confidence=Confidence.LOW,
                chain=chain,
                diagnostics=trail.steps(),
            )

        trail.add(DiagnosticStage.MATCH, UNKNOWN_MANAGER_ID, "no-match", str(chain.terminal))
        return DetectionResult(
            command=command,
            manager_id=UNKNOWN_MANAGER_ID,
            manager_name=UNKNOWN_MANAGER_NAME,
            package_name=None,
            version=None,
            verification=VerificationStatus.UNKNOWN,
            confidence=Confidence.UNCERTAIN,
            chain=chain,
            diagnostics=trail.steps(),
        )


def detect_command(command: str, **kwargs: object) -> DetectionResult:
    """Detect a single command with a one-off :class:`Detector`.

    Keyword arguments are passed to :class:`Detector`.
    """
    return Detector(**kwargs).detect(command)  # type: ignore[arg-type]
