"""Candidate selection over a symlink chain.

Precedence, highest first:

1. A shim rule matching a non-terminal hop (closest to the command
   first). Shims are launchers owned by a manager (``/snap/bin``, mise
   shims) whose terminal path is the manager's own executable, so the
   terminal match would name the wrong package.
2. Any match on the terminal path.
3. Any match on a non-terminal hop, closest to the command first.

Within one path the highest specificity wins, then the signature
declared first.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from whichpm.managers.base import MatchContext, Signature
from whichpm.models.detection import DetectionCandidate, DiagnosticStage, DiagnosticStep

logger = logging.getLogger(__name__)


class DiagnosticTrail:
    """Collects diagnostic steps when verbose detail was requested."""

    def __init__(self, enabled: bool = False) -> None:
        self._enabled = enabled
        self._steps: list[DiagnosticStep] = []

    @property
    def enabled(self) -> bool:
        """Check if steps are being recorded."""
        return self._enabled

    def add(
        self,
        stage: DiagnosticStage,
        subject: str,
        outcome: str,
        detail: str | None = None,
    ) -> None:
        """Record a step (no-op when disabled)."""
        if self._enabled:
            self._steps.append(DiagnosticStep(stage, subject, outcome, detail))

    def steps(self) -> tuple[DiagnosticStep, ...]:
        """Return the recorded steps in order."""
        return tuple(self._steps)


def match_path(
    signatures: Sequence[Signature],
    path: Path,
    hop: int,
    context: MatchContext,
    trail: DiagnosticTrail | None = None,
) -> list[DetectionCandidate]:
    """Try every applicable signature against one path.

    Args:
        signatures: Ordered signature database.
        path: Path under test.
        hop: Index of ``path`` in the chain.
        context: Command, platform and chain information.
        trail: Where to record each attempt.

    Returns:
        Candidates in declaration order.
    """
    candidates: list[DetectionCandidate] = []
    for order, signature in enumerate(signatures):
        if not signature.supports(context.platform):
            continue
        found = signature.match(path, context)
        if found is None:
            if trail is not None:
                trail.add(DiagnosticStage.MATCH, signature.id, "no-match", f"hop {hop}: {path}")
            continue

        if trail is not None:
            trail.add(
                DiagnosticStage.MATCH,
                signature.id,
                "matched",
                f"hop {hop}: {path} ({found.rule}, specificity {found.specificity})",
            )
        candidates.append(
            DetectionCandidate(
                manager_id=signature.id,
                manager_name=signature.name,
                path=path,
                hop=hop,
                specificity=found.specificity,
                order=order,
                package_name=found.package_name,
                version=found.version,
                shim=found.shim,
            )
        )
    return candidates


def best_candidate(candidates: Sequence[DetectionCandidate]) -> DetectionCandidate | None:
    """Pick the highest-specificity candidate; earlier declaration breaks ties."""
    if not candidates:
        return None
    return min(candidates, key=lambda c: c.rank)


def select_candidate(
    signatures: Sequence[Signature],
    context: MatchContext,
    trail: DiagnosticTrail | None = None,
) -> DetectionCandidate | None:
    """Select the winning candidate for a whole chain.

    Args:
        signatures: Ordered signature database.
        context: Command, platform and chain information.
        trail: Where to record each attempt.

    Returns:
        The winning candidate, or None if nothing matched.
    """
    chain = context.chain
    terminal = match_path(signatures, chain.terminal, len(chain) - 1, context, trail)

    fallback: list[list[DetectionCandidate]] = []
    for hop, path in chain.fallback_order():
        hop_candidates = match_path(signatures, path, hop, context, trail)
        shims = [c for c in hop_candidates if c.shim]
        if shims:
            winner = best_candidate(shims)
            logger.debug("Shim match on hop %d takes precedence: %s", hop, winner)
            return winner
        fallback.append(hop_candidates)

    winner = best_candidate(terminal)
    if winner is not None:
        return winner

    for hop_candidates in fallback:
        winner = best_candidate(hop_candidates)
        if winner is not None:
            return winner
    return None
