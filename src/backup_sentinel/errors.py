#!/usr/bin/env python3
"""
Fault taxonomy for backup health checks.

Checks raise these at the point of detection. BaseCheck.execute() turns them
into CheckItems using the status and severity each error carries, so nothing
below the orchestrator ever escapes a check boundary.
"""

from typing import Optional

from .models import CheckDetails, CheckStatus, Severity


class BackupHealthError(Exception):
    """Base class for faults that map onto a reported check outcome."""

    status: CheckStatus = CheckStatus.FAIL
    severity: Severity = Severity.HIGH

    def __init__(
        self,
        message: str,
        details: Optional[CheckDetails] = None,
        severity: Optional[Severity] = None,
        status: Optional[CheckStatus] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if severity is not None:
            self.severity = severity
        if status is not None:
            self.status = status


class AccessibilityError(BackupHealthError):
    """Backup root is missing, unreadable or not a directory."""

    severity = Severity.CRITICAL


class IntegrityError(BackupHealthError):
    """Checksum mismatch, malformed envelope or drill size mismatch."""

    severity = Severity.HIGH


class ComplianceViolation(BackupHealthError):
    """Frequency, retention, age or coverage threshold breached."""

    status = CheckStatus.WARNING
    severity = Severity.MEDIUM


class PerformanceDegradation(BackupHealthError):
    """Read latency or storage headroom outside budget."""

    status = CheckStatus.WARNING
    severity = Severity.MEDIUM


class ExecutionFault(BackupHealthError):
    """Unexpected fault in the orchestration loop itself."""

    severity = Severity.CRITICAL


class ConfigurationError(ValueError):
    """Invalid HealthCheckConfig value."""
