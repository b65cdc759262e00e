"""
Backup Sentinel: integrity and restoration verification for backup artifacts.

Usage:
    runner = HealthCheckRunner(HealthCheckConfig(backup_path="/var/backups/tasks"))
    report = await runner.run_health_check()
    if report.overall_status is OverallStatus.FAIL:
        ...
"""

from .config import HealthCheckConfig
from .errors import (
    AccessibilityError,
    BackupHealthError,
    ComplianceViolation,
    ConfigurationError,
    ExecutionFault,
    IntegrityError,
    PerformanceDegradation,
)
from .models import (
    BackupArtifact,
    CheckCategory,
    CheckItem,
    CheckStatus,
    HealthReport,
    OverallStatus,
    QuickHealthStatus,
    QuickStatus,
    ReportSummary,
    Severity,
)
from .runner import HealthCheckRunner
from .store import ArtifactStore, LocalArtifactStore, discover_artifacts

__version__ = "1.0.0"

__all__ = [
    "AccessibilityError",
    "ArtifactStore",
    "BackupArtifact",
    "BackupHealthError",
    "CheckCategory",
    "CheckItem",
    "CheckStatus",
    "ComplianceViolation",
    "ConfigurationError",
    "ExecutionFault",
    "HealthCheckConfig",
    "HealthCheckRunner",
    "HealthReport",
    "IntegrityError",
    "LocalArtifactStore",
    "OverallStatus",
    "PerformanceDegradation",
    "QuickHealthStatus",
    "QuickStatus",
    "ReportSummary",
    "Severity",
    "discover_artifacts",
]
