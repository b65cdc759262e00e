"""Backup health check implementations."""

from .accessibility import BackupAccessibility
from .artifact_profile import AgeValidation, SizeValidation
from .checksum import ChecksumVerification
from .compliance import BackupFrequency, EncryptionCoverage, RetentionCompliance
from .envelope import EnvelopeValidation
from .performance import ReadPerformance
from .restoration import RestorationDrill
from .storage import StorageHealth

# Per-artifact checks, in report order
ARTIFACT_CHECKS = [
    ChecksumVerification,
    SizeValidation,
    AgeValidation,
    EnvelopeValidation,
    RestorationDrill,
]

# Checks that do large-file I/O and run under the configured timeout
TIMED_CHECKS = (RestorationDrill, ReadPerformance)

__all__ = [
    "ARTIFACT_CHECKS",
    "TIMED_CHECKS",
    "AgeValidation",
    "BackupAccessibility",
    "BackupFrequency",
    "ChecksumVerification",
    "EncryptionCoverage",
    "EnvelopeValidation",
    "ReadPerformance",
    "RestorationDrill",
    "RetentionCompliance",
    "SizeValidation",
    "StorageHealth",
]
