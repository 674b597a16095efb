"""Bounded subprocess execution for package manager queries.

Verification is the only place whichpm starts processes. Every query
runs without a terminal, without stdin and under a timeout.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0

# Package managers honour these to drop colors, spinners and pagers.
_QUIET_ENV = {"TERM": "dumb", "NO_COLOR": "1", "PAGER": "cat"}


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured output of a finished query.

    Attributes:
        stdout: Text written to standard output.
        stderr: Text written to standard error.
        returncode: Process exit status.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if the query exited with status 0."""
        return self.returncode == 0

    @property
    def error_summary(self) -> str:
        """Last non-empty stderr line, which is where managers put the reason."""
        lines = [line for line in self.stderr.splitlines() if line.strip()]
        return lines[-1].strip() if lines else "no output"


def run_command(args: list[str], *, timeout: float | None = DEFAULT_TIMEOUT) -> CommandResult:
    """Run a package manager query to completion.

    Args:
        args: Executable and arguments; never passed through a shell.
        timeout: Seconds before the process is killed. None waits forever.

    Returns:
        CommandResult, whatever the exit status.

    Raises:
        subprocess.TimeoutExpired: If the query outlives ``timeout``.
        OSError: If the executable is missing or cannot be started.
    """
    logger.debug("Running %s (timeout %ss)", " ".join(args), timeout)
    completed = subprocess.run(
        args,
        capture_output=True,
        stdin=subprocess.DEVNULL,
        text=True,
        check=False,
        timeout=timeout,
        env={**os.environ, **_QUIET_ENV},
    )
    return CommandResult(
        stdout=completed.stdout,
        stderr=completed.stderr,
        returncode=completed.returncode,
    )


def command_exists(name: str) -> bool:
    """Check if a package manager executable is on PATH."""
    return shutil.which(name) is not None
