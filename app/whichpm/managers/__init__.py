"""Package manager signature database.

``DEFAULT_SIGNATURES`` is the ordered, immutable set of signatures the
detector consults. Declaration order breaks specificity ties, so more
specific managers are listed first. Supporting a new package manager
means adding a :class:`Signature` subclass and listing it here.
"""

from whichpm.managers.base import MatchContext, PathRule, Signature, SignatureMatch
from whichpm.managers.homebrew import HomebrewSignature
from whichpm.managers.linux import AptSignature, NixSignature, SnapSignature
from whichpm.managers.node import (
    BunSignature,
    NpmSignature,
    NSignature,
    PnpmSignature,
    YarnSignature,
)
from whichpm.managers.system import SYSTEM_DIRECTORIES, system_directory_of
from whichpm.managers.toolchains import (
    CargoSignature,
    GemSignature,
    GoSignature,
    MiseSignature,
    PipxSignature,
)
from whichpm.managers.windows import ChocolateySignature, ScoopSignature, WingetSignature
from whichpm.models.platform import Platform

DEFAULT_SIGNATURES: tuple[Signature, ...] = (
    HomebrewSignature(),
    BunSignature(),
    PnpmSignature(),
    YarnSignature(),
    NpmSignature(),
    NSignature(),
    MiseSignature(),
    CargoSignature(),
    GoSignature(),
    GemSignature(),
    PipxSignature(),
    NixSignature(),
    SnapSignature(),
    AptSignature(),
    ChocolateySignature(),
    ScoopSignature(),
    WingetSignature(),
)


def get_signature(manager_id: str) -> Signature | None:
    """Look up a default signature by id."""
    for signature in DEFAULT_SIGNATURES:
        if signature.id == manager_id:
            return signature
    return None


def signatures_for(platform: Platform) -> tuple[Signature, ...]:
    """Return the default signatures that apply to a platform, in order."""
    return tuple(s for s in DEFAULT_SIGNATURES if s.supports(platform))


__all__ = [
    "DEFAULT_SIGNATURES",
    "SYSTEM_DIRECTORIES",
    "AptSignature",
    "BunSignature",
    "CargoSignature",
    "ChocolateySignature",
    "GemSignature",
    "GoSignature",
    "HomebrewSignature",
    "MatchContext",
    "MiseSignature",
    "NSignature",
    "NixSignature",
    "NpmSignature",
    "PathRule",
    "PipxSignature",
    "PnpmSignature",
    "ScoopSignature",
    "Signature",
    "SignatureMatch",
    "SnapSignature",
    "WingetSignature",
    "YarnSignature",
    "get_signature",
    "signatures_for",
    "system_directory_of",
]
