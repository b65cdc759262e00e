#!/usr/bin/env python3
"""
Data models for the backup health checker.

Contains the artifact snapshot, the typed per-check detail records, the
check item and the aggregated report.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union


class CheckStatus(str, Enum):
    """Outcome of a single check."""
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"
    SKIP = "skip"


class CheckCategory(str, Enum):
    """What aspect of the backups a check looks at."""
    INTEGRITY = "integrity"
    PERFORMANCE = "performance"
    COMPLIANCE = "compliance"
    ACCESSIBILITY = "accessibility"
    SECURITY = "security"


class Severity(str, Enum):
    """Reporting ordinal; never used for the overall status."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class OverallStatus(str, Enum):
    """Aggregated status of a full run."""
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


class QuickStatus(str, Enum):
    """Liveness classification from the quick status reporter."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class BackupArtifact:
    """A discovered backup file, snapshotted once per run."""
    path: str
    name: str
    size_bytes: int
    modified_at: datetime

    @property
    def stem(self) -> str:
        return Path(self.name).stem

    def age_hours(self, now: datetime) -> float:
        return (now - self.modified_at).total_seconds() / 3600

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "size_bytes": self.size_bytes,
            "modified_at": self.modified_at.isoformat(),
        }


class _Details:
    """Shared serialization for detail records."""

    kind: ClassVar[str] = ""

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        for key, value in result.items():
            if isinstance(value, tuple):
                result[key] = list(value)
        result["kind"] = self.kind
        return result


@dataclass(frozen=True)
class AccessDetails(_Details):
    kind: ClassVar[str] = "access"
    path: str
    is_directory: bool


@dataclass(frozen=True)
class AvailabilityDetails(_Details):
    kind: ClassVar[str] = "availability"
    path: str
    accessible: bool


@dataclass(frozen=True)
class ChecksumDetails(_Details):
    kind: ClassVar[str] = "checksum"
    algorithm: str
    computed: str
    stored: Optional[str] = None


@dataclass(frozen=True)
class EnvelopeDetails(_Details):
    kind: ClassVar[str] = "envelope"
    claims_encryption: bool
    version: Optional[str] = None
    missing_fields: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SizeGateDetails(_Details):
    kind: ClassVar[str] = "size_gate"
    size: int
    max_size: int


@dataclass(frozen=True)
class DrillDetails(_Details):
    kind: ClassVar[str] = "drill"
    original_size: int
    restored_size: int
    duration_ms: float


@dataclass(frozen=True)
class SizeDetails(_Details):
    kind: ClassVar[str] = "size"
    size: int
    min_expected: int
    max_recommended: int


@dataclass(frozen=True)
class AgeDetails(_Details):
    kind: ClassVar[str] = "age"
    age_hours: float


@dataclass(frozen=True)
class FrequencyDetails(_Details):
    kind: ClassVar[str] = "frequency"
    total: int
    recent: int
    window_hours: float


@dataclass(frozen=True)
class RetentionDetails(_Details):
    kind: ClassVar[str] = "retention"
    total: int
    old: int
    retention_days: float


@dataclass(frozen=True)
class CoverageDetails(_Details):
    kind: ClassVar[str] = "coverage"
    encrypted_count: int
    checked_count: int
    encryption_rate: float


@dataclass(frozen=True)
class StorageDetails(_Details):
    kind: ClassVar[str] = "storage"
    path: str
    total_bytes: int
    free_bytes: int
    used_percent: float


@dataclass(frozen=True)
class PerformanceDetails(_Details):
    kind: ClassVar[str] = "performance"
    duration_ms: float
    size_bytes: int


@dataclass(frozen=True)
class ErrorDetails(_Details):
    kind: ClassVar[str] = "error"
    exception_type: str
    exception_message: str


CheckDetails = Union[
    AccessDetails,
    AvailabilityDetails,
    ChecksumDetails,
    EnvelopeDetails,
    SizeGateDetails,
    DrillDetails,
    SizeDetails,
    AgeDetails,
    FrequencyDetails,
    RetentionDetails,
    CoverageDetails,
    StorageDetails,
    PerformanceDetails,
    ErrorDetails,
]


@dataclass(frozen=True)
class CheckItem:
    """Result of a single check execution."""
    name: str
    category: CheckCategory
    status: CheckStatus
    severity: Severity
    message: str
    details: Optional[CheckDetails] = None
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "name": self.name,
            "category": self.category.value,
            "status": self.status.value,
            "severity": self.severity.value,
            "message": self.message,
            "details": self.details.to_dict() if self.details is not None else None,
            "duration_ms": self.duration_ms,
        }


@dataclass(frozen=True)
class ReportSummary:
    """Per-status counts over a report's checks."""
    total: int = 0
    passed: int = 0
    warnings: int = 0
    failed: int = 0
    skipped: int = 0

    @classmethod
    def from_checks(cls, checks: List[CheckItem]) -> "ReportSummary":
        statuses = [check.status for check in checks]
        return cls(
            total=len(statuses),
            passed=statuses.count(CheckStatus.PASS),
            warnings=statuses.count(CheckStatus.WARNING),
            failed=statuses.count(CheckStatus.FAIL),
            skipped=statuses.count(CheckStatus.SKIP),
        )

    def overall_status(self) -> OverallStatus:
        """A single failure dominates any number of passes or warnings."""
        if self.failed > 0:
            return OverallStatus.FAIL
        if self.warnings > 0:
            return OverallStatus.WARNING
        return OverallStatus.PASS

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class HealthReport:
    """Aggregate of one orchestrator run."""
    check_id: str
    timestamp: datetime
    overall_status: OverallStatus
    duration_ms: float
    checks: List[CheckItem] = field(default_factory=list)
    summary: ReportSummary = field(default_factory=ReportSummary)
    recommendations: List[str] = field(default_factory=list)

    def get_check(self, name: str) -> Optional[CheckItem]:
        """Look up a check item by name."""
        for check in self.checks:
            if check.name == name:
                return check
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "check_id": self.check_id,
            "timestamp": self.timestamp.isoformat(),
            "overall_status": self.overall_status.value,
            "duration_ms": self.duration_ms,
            "checks": [check.to_dict() for check in self.checks],
            "summary": self.summary.to_dict(),
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class QuickHealthStatus:
    """Cheap liveness answer for pollers."""
    status: QuickStatus
    last_check: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "last_check": self.last_check.isoformat() if self.last_check else None,
        }
