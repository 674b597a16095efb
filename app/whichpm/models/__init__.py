"""Data models for whichpm.

This module exports the core data structures used throughout the application.
"""

from whichpm.models.detection import (
    SYSTEM_MANAGER_ID,
    SYSTEM_MANAGER_NAME,
    UNKNOWN_MANAGER_ID,
    UNKNOWN_MANAGER_NAME,
    Confidence,
    DetectionCandidate,
    DetectionResult,
    DiagnosticStage,
    DiagnosticStep,
    SymlinkChain,
    VerificationStatus,
    VerifiedPackage,
)
from whichpm.models.platform import ALL_PLATFORMS, POSIX_PLATFORMS, Platform

__all__ = [
    "ALL_PLATFORMS",
    "POSIX_PLATFORMS",
    "SYSTEM_MANAGER_ID",
    "SYSTEM_MANAGER_NAME",
    "UNKNOWN_MANAGER_ID",
    "UNKNOWN_MANAGER_NAME",
    "Confidence",
    "DetectionCandidate",
    "DetectionResult",
    "DiagnosticStage",
    "DiagnosticStep",
    "Platform",
    "SymlinkChain",
    "VerificationStatus",
    "VerifiedPackage",
]
