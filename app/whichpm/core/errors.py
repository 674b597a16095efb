"""Exception hierarchy for whichpm.

Only :class:`CommandNotFoundError` is fatal to a detection. Symlink and
verification errors are caught by the detector and turned into a
lower-confidence result.
"""

from pathlib import Path

from whichpm.models.detection import SymlinkChain


class WhichPmError(Exception):
    """Base exception for all whichpm errors."""


class CommandNotFoundError(WhichPmError):
    """Raised when a command cannot be found on the search path."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Command '{command}' not found in PATH")


class SymlinkChainError(WhichPmError):
    """Base class for symlink analysis failures.

    Attributes:
        chain: Hops collected before the failure, never empty.
    """

    def __init__(self, message: str, chain: SymlinkChain) -> None:
        self.chain = chain
        super().__init__(message)


class CycleDetectedError(SymlinkChainError):
    """Raised when a symlink chain revisits a path."""

    def __init__(self, chain: SymlinkChain, repeated: Path) -> None:
        self.repeated = repeated
        super().__init__(f"Symlink cycle detected at {repeated}", chain)


class ChainTooLongError(SymlinkChainError):
    """Raised when a symlink chain exceeds the hop limit."""

    def __init__(self, chain: SymlinkChain, max_hops: int) -> None:
        self.max_hops = max_hops
        super().__init__(f"Symlink chain exceeds {max_hops} hops", chain)


class SymlinkResolutionError(SymlinkChainError):
    """Raised when a link cannot be read mid-chain.

    Attributes:
        failed_path: The hop that could not be inspected.
        last_good: The last hop whose link was read successfully, or None
            if the starting path itself failed.
    """

    def __init__(self, chain: SymlinkChain, failed_path: Path, reason: OSError) -> None:
        self.failed_path = failed_path
        self.last_good = chain.hops[-2] if len(chain.hops) > 1 else None
        super().__init__(f"Failed to read symlink {failed_path}: {reason}", chain)


class VerificationError(WhichPmError):
    """Raised when a package manager query fails or cannot be parsed."""


class ConfigError(WhichPmError):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file is not valid TOML."""
