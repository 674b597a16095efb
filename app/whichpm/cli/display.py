"""Rendering of detection results.

Text output goes through the shared Rich console; JSON and short output
are plain so they can be piped.
"""

import json
from collections.abc import Sequence
from typing import Any

from rich.markup import escape
from rich.table import Table

from whichpm.core.detector import DetectionOutcome
from whichpm.managers.base import Signature
from whichpm.models.detection import Confidence, DetectionResult
from whichpm.models.platform import Platform
from whichpm.utils.formatting import console
from whichpm.utils.shell import command_exists

_LABELS: dict[Confidence, str] = {
    Confidence.HIGH: "likely",
    Confidence.MEDIUM: "likely",
    Confidence.LOW: "possible",
    Confidence.UNCERTAIN: "uncertain",
}


def confidence_label(result: DetectionResult) -> str:
    """Return the parenthesized label shown after the manager name."""
    if result.is_verified:
        return "verified"
    return _LABELS[result.confidence]


def create_diagnostics_table(result: DetectionResult) -> Table:
    """Create a Rich table with every step of the detection.

    Args:
        result: Result carrying a diagnostic trail.

    Returns:
        Rich Table with Stage, Subject, Outcome and Detail columns.
    """
    table = Table(
        title=f"Detection steps for {result.command}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Stage", width=8)
    table.add_column("Subject", no_wrap=True)
    table.add_column("Outcome", width=10)
    table.add_column("Detail", style="muted")

    for step in result.diagnostics:
        if step.outcome in ("matched", "verified", "found"):
            outcome = f"[success]{step.outcome}[/success]"
        elif step.outcome in ("failed", "partial"):
            outcome = f"[warning]{step.outcome}[/warning]"
        else:
            outcome = f"[muted]{step.outcome}[/muted]"
        table.add_row(step.stage.value, escape(step.subject), outcome, escape(step.detail or ""))

    return table


def print_text_result(result: DetectionResult, verbose: bool = False) -> None:
    """Print a human-readable result.

    Args:
        result: Detection result.
        verbose: Also print symlink error, verification error and the
            diagnostic trail.
    """
    label = confidence_label(result)
    console.print(
        f"[command]{escape(result.command_path.name)}[/command] was installed by: "
        f"[manager]{escape(result.manager_name)}[/manager] "
        f"[confidence.{result.confidence.value}]({label})[/]"
    )
    if result.package_name:
        console.print(f"  [muted]Package:[/muted] {escape(result.package_name)}")
    if result.version:
        console.print(f"  [muted]Version:[/muted] {escape(result.version)}")
    console.print(f"  [muted]Location:[/muted] {escape(str(result.resolved_path))}")
    if result.chain.has_links:
        hops = " -> ".join(escape(str(hop)) for hop in result.chain)
        console.print(f"  [muted]Symlinks:[/muted] {hops}")

    if not verbose:
        return
    if result.chain.error:
        console.print(
            f"  [warning]Symlink analysis stopped:[/warning] {escape(result.chain.error)}"
        )
    if result.verification_error:
        console.print(
            f"  [warning]Verification failed:[/warning] {escape(result.verification_error)}"
        )
    if result.diagnostics:
        console.print(create_diagnostics_table(result))


def outcome_to_dict(outcome: DetectionOutcome, verbose: bool) -> dict[str, Any]:
    """Convert an outcome to its JSON form; not-found commands carry an error."""
    if outcome.result is not None:
        return outcome.result.to_dict(include_diagnostics=verbose)
    return {"command": outcome.command, "error": str(outcome.error)}


def print_json(outcomes: Sequence[DetectionOutcome], verbose: bool = False) -> None:
    """Print outcomes as JSON: an object for one command, an array otherwise."""
    documents = [outcome_to_dict(outcome, verbose) for outcome in outcomes]
    payload: Any = documents[0] if len(documents) == 1 else documents
    console.print_json(json.dumps(payload))


def print_short(outcomes: Sequence[DetectionOutcome]) -> None:
    """Print only the manager id of each found command, one per line."""
    for outcome in outcomes:
        if outcome.result is not None:
            console.print(outcome.result.manager_id, highlight=False)


def create_signatures_table(signatures: Sequence[Signature], platform: Platform | None) -> Table:
    """Create a Rich table describing the signature database.

    Args:
        signatures: Signatures in precedence order.
        platform: Platform the listing is filtered for, or None for all.

    Returns:
        Rich Table with Id, Manager, Platforms and Verifier columns.
    """
    title = "Package managers"
    if platform is not None:
        title = f"{title} ({platform.display_name})"
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("#", justify="right", style="muted")
    table.add_column("Id", no_wrap=True, style="manager")
    table.add_column("Manager")
    table.add_column("Platforms", style="muted")
    table.add_column("Verifier")

    for order, signature in enumerate(signatures, start=1):
        platforms = ", ".join(
            p.display_name for p in sorted(signature.platforms, key=lambda p: p.value)
        )
        if signature.verifier is None:
            verifier = "[muted]-[/muted]"
        elif command_exists(signature.verifier):
            verifier = f"[success]{signature.verifier}[/success]"
        else:
            verifier = f"[muted]{signature.verifier} (not installed)[/muted]"
        table.add_row(str(order), signature.id, escape(signature.name), platforms, verifier)

    return table
