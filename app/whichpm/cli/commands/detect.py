"""Detect command implementation.

Identifies which package manager installed one or more commands.
"""

from typing import Annotated

import typer

from whichpm.cli.display import print_json, print_short, print_text_result
from whichpm.cli.types import OutputFormat, get_config
from whichpm.core.detector import DetectionOutcome, Detector
from whichpm.core.errors import CommandNotFoundError
from whichpm.utils.formatting import console, print_error, print_warning


def detect(
    ctx: typer.Context,
    commands: Annotated[
        list[str],
        typer.Argument(help="Command(s) to investigate.", show_default=False),
    ],
    output_format: Annotated[
        OutputFormat | None,
        typer.Option(
            "--format",
            "-f",
            help="Output format: text, json, or short.",
            case_sensitive=False,
            show_default=False,
        ),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON (shortcut for --format json)."),
    ] = False,
    verify: Annotated[
        bool | None,
        typer.Option(
            "--verify/--no-verify",
            help="Confirm the match by querying the package manager.",
            show_default=False,
        ),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option(
            "--timeout",
            "-t",
            min=0.5,
            help="Seconds to wait for a package manager query.",
            show_default=False,
        ),
    ] = None,
    all_matches: Annotated[
        bool,
        typer.Option("--all", "-a", help="Also inspect shadowed copies further down PATH."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show every detection step."),
    ] = False,
) -> None:
    """Show which package manager installed a command.

    Examples:
        whichpm detect git                  # Which manager installed git?
        whichpm detect --verify rg          # Ask the manager to confirm
        whichpm detect --json node npm      # JSON for several commands
        whichpm detect --format short tsc   # Only the manager id
        whichpm detect --all python3        # Every python3 on PATH
    """
    config = get_config(ctx)
    verbose = verbose or bool(ctx.ensure_object(dict).get("verbose"))
    fmt = OutputFormat.JSON if as_json else output_format or OutputFormat(config.output_format)

    detector = Detector(
        verify=config.verify if verify is None else verify,
        verify_timeout=timeout or config.verify_timeout,
        max_hops=config.max_symlink_hops,
        verbose=verbose,
        disabled=config.disabled_managers,
    )

    if all_matches:
        outcomes = _detect_all(detector, commands)
    else:
        outcomes = detector.detect_many(commands)

    if fmt == OutputFormat.JSON:
        print_json(outcomes, verbose=verbose)
    elif fmt == OutputFormat.SHORT:
        print_short(outcomes)
    else:
        for index, outcome in enumerate(outcomes):
            if outcome.result is None:
                continue
            if index:
                console.print()
            print_text_result(outcome.result, verbose=verbose)
            if outcome.result.verification_error and not verbose:
                print_warning(
                    f"Could not verify {outcome.command}: {outcome.result.verification_error}"
                )

    missing = [outcome for outcome in outcomes if not outcome.found]
    for outcome in missing:
        print_error(str(outcome.error))
    if missing:
        raise typer.Exit(code=1)


def _detect_all(detector: Detector, commands: list[str]) -> list[DetectionOutcome]:
    """Detect every PATH copy of each command, keeping input order."""
    outcomes: list[DetectionOutcome] = []
    for command in commands:
        try:
            results = detector.detect_all(command)
        except CommandNotFoundError as e:
            outcomes.append(DetectionOutcome(command=command, error=e))
            continue
        outcomes.extend(DetectionOutcome(command=command, result=result) for result in results)
    return outcomes
