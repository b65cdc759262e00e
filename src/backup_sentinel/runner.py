#!/usr/bin/env python3
"""
Health check runner - orchestration, scoring and reporting.

This module contains the HealthCheckRunner class that enumerates backup
artifacts, fans out the individual checks, aggregates their items into a
HealthReport and derives remediation recommendations. It also answers the
cheap quick-status query used by liveness pollers.
"""

import asyncio
import logging
import time
import uuid
from collections import Counter, deque
from datetime import datetime, timedelta, timezone
from typing import Deque, Dict, List, Optional

from .base_check import run_blocking
from .checks import (
    ARTIFACT_CHECKS,
    TIMED_CHECKS,
    BackupAccessibility,
    BackupFrequency,
    EncryptionCoverage,
    ReadPerformance,
    RetentionCompliance,
    StorageHealth,
)
from .config import HealthCheckConfig
from .errors import ExecutionFault
from .models import (
    AvailabilityDetails,
    BackupArtifact,
    CheckCategory,
    CheckItem,
    CheckStatus,
    ErrorDetails,
    HealthReport,
    OverallStatus,
    QuickHealthStatus,
    QuickStatus,
    ReportSummary,
    Severity,
)
from .store import ArtifactStore, LocalArtifactStore, discover_artifacts

logger = logging.getLogger(__name__)

# (status, category) -> recommendation, in the order they are emitted
CATEGORY_RECOMMENDATIONS = [
    (CheckStatus.FAIL, CheckCategory.INTEGRITY,
     "Investigate backup integrity issues immediately"),
    (CheckStatus.FAIL, CheckCategory.ACCESSIBILITY,
     "Ensure backup storage is accessible and properly configured"),
    (CheckStatus.WARNING, CheckCategory.SECURITY,
     "Consider enabling encryption for all backups"),
    (CheckStatus.WARNING, CheckCategory.PERFORMANCE,
     "Monitor backup performance and consider storage optimization"),
    (CheckStatus.WARNING, CheckCategory.COMPLIANCE,
     "Review and update backup retention policies"),
]

STANDING_RECOMMENDATIONS = [
    "Schedule regular health checks to proactively identify issues",
    "Implement automated backup verification and alerting",
    "Document backup procedures and recovery processes",
]

DEGRADED_RECOMMENDATION = "Investigate health check system failures"


def assign_labels(artifacts: List[BackupArtifact]) -> Dict[str, str]:
    """
    Pick a distinct item-name label for each artifact.

    The stem is used when it is unique; artifacts sharing a stem (nightly.db
    and nightly.sql) fall back to their full name with dots replaced.

    Returns:
        Mapping of artifact path to label
    """
    stems = Counter(artifact.stem for artifact in artifacts)
    labels: Dict[str, str] = {}
    used = set()

    for artifact in artifacts:
        if stems[artifact.stem] == 1:
            base = artifact.stem
        else:
            base = artifact.name.replace(".", "_")
        label = base
        counter = 2
        while label in used:
            label = f"{base}_{counter}"
            counter += 1
        used.add(label)
        labels[artifact.path] = label

    return labels


def generate_recommendations(checks: List[CheckItem]) -> List[str]:
    """Derive de-duplicated recommendations from failing and warning categories."""
    flagged = {(check.status, check.category) for check in checks}
    recommendations = [
        text for status, category, text in CATEGORY_RECOMMENDATIONS
        if (status, category) in flagged
    ]
    recommendations.extend(STANDING_RECOMMENDATIONS)
    return list(dict.fromkeys(recommendations))


class HealthCheckRunner:
    """Runs backup health checks for one backup root."""

    def __init__(
        self,
        config: Optional[HealthCheckConfig] = None,
        store: Optional[ArtifactStore] = None,
    ) -> None:
        self.config = config or HealthCheckConfig()
        self.store = store or LocalArtifactStore()
        self.history: Deque[HealthReport] = deque(maxlen=self.config.history_size)

        logger.info(
            f"HealthCheckRunner initialized: backup_path={self.config.backup_path}, "
            f"test_directory={self.config.test_directory}, "
            f"max_test_file_size={self.config.max_test_file_size}"
        )

    async def run_health_check(self) -> HealthReport:
        """
        Run the full health check.

        Never raises: a fault in the orchestration itself yields a degraded
        report with a single critical item.

        Returns:
            HealthReport for this run
        """
        check_id = str(uuid.uuid4())
        start_time = time.monotonic()
        logger.info(f"Starting backup health check {check_id}")

        try:
            checks = await self._collect_checks()
            self._verify_unique_names(checks)
            report = self._build_report(check_id, start_time, checks)

            logger.info(
                f"Backup health check {check_id} completed: overall={report.overall_status.value}, "
                f"checks={report.summary.total}, failed={report.summary.failed}, "
                f"warnings={report.summary.warnings}, duration={report.duration_ms:.1f}ms"
            )

        except Exception as e:
            logger.error(f"Health check {check_id} failed: {e}", exc_info=True)
            report = self._degraded_report(check_id, start_time, e)

        self.history.appendleft(report)
        return report

    async def get_quick_health_status(self) -> QuickHealthStatus:
        """
        Cheap status for liveness polling: accessibility plus enumeration only.

        Never raises; any fault reports unhealthy.
        """
        try:
            if not await run_blocking(self.store.is_dir, self.config.backup_path):
                return QuickHealthStatus(status=QuickStatus.UNHEALTHY)

            artifacts = await run_blocking(
                discover_artifacts, self.store, self.config.backup_path, self.config.backup_suffixes
            )
            if not artifacts:
                return QuickHealthStatus(status=QuickStatus.UNHEALTHY)

            newest = artifacts[0]
            age_hours = newest.age_hours(datetime.now(timezone.utc))
            if age_hours > self.config.quick_status_max_age_hours:
                return QuickHealthStatus(status=QuickStatus.DEGRADED, last_check=newest.modified_at)

            return QuickHealthStatus(status=QuickStatus.HEALTHY, last_check=newest.modified_at)

        except Exception as e:
            logger.warning(f"Quick health status failed: {e}")
            return QuickHealthStatus(status=QuickStatus.UNHEALTHY)

    def get_health_check_history(self, days: float = 7) -> List[HealthReport]:
        """Reports from the last ``days`` days kept by this runner, newest first."""
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        return [report for report in self.history if report.timestamp >= cutoff]

    async def _collect_checks(self) -> List[CheckItem]:
        """Run every check for this invocation and return items in report order."""
        now = datetime.now(timezone.utc)
        access = await BackupAccessibility(self.config, self.store).execute()
        artifacts = await self._discover()

        if not artifacts:
            checks = [] if access.status == CheckStatus.PASS else [access]
            checks.append(CheckItem(
                name="backup_availability",
                category=CheckCategory.ACCESSIBILITY,
                status=CheckStatus.FAIL,
                severity=Severity.CRITICAL,
                message="No backup files found",
                details=AvailabilityDetails(
                    path=self.config.backup_path,
                    accessible=access.status == CheckStatus.PASS,
                ),
            ))
            return checks

        selected = artifacts[:self.config.artifact_cap]
        labels = assign_labels(selected)
        semaphore = asyncio.Semaphore(self.config.max_concurrency)
        timeout = self.config.io_timeout_seconds

        artifact_groups = asyncio.gather(*(
            self._check_artifact(artifact, labels[artifact.path], now, semaphore)
            for artifact in selected
        ))
        newest = artifacts[0]
        fleet_checks = asyncio.gather(
            BackupFrequency(self.config, self.store, artifacts, now).execute(),
            StorageHealth(self.config, self.store).execute(),
            RetentionCompliance(self.config, self.store, artifacts, now).execute(),
            EncryptionCoverage(self.config, self.store, artifacts, now).execute(),
            ReadPerformance(self.config, self.store, newest, labels[newest.path], now)
            .run_with_timeout(timeout),
        )
        groups, fleet_items = await asyncio.gather(artifact_groups, fleet_checks)

        checks = [access]
        for group in groups:
            checks.extend(group)
        checks.extend(fleet_items)
        return checks

    async def _check_artifact(
        self,
        artifact: BackupArtifact,
        label: str,
        now: datetime,
        semaphore: asyncio.Semaphore,
    ) -> List[CheckItem]:
        """Run the per-artifact checks for one artifact."""
        async with semaphore:
            items = []
            for check_class in ARTIFACT_CHECKS:
                check = check_class(self.config, self.store, artifact, label, now)
                if isinstance(check, TIMED_CHECKS):
                    items.append(await check.run_with_timeout(self.config.io_timeout_seconds))
                else:
                    items.append(await check.execute())
            return items

    async def _discover(self) -> List[BackupArtifact]:
        """Enumerate artifacts; enumeration faults count as no artifacts."""
        try:
            return await run_blocking(
                discover_artifacts, self.store, self.config.backup_path, self.config.backup_suffixes
            )
        except Exception as e:
            logger.error(f"Failed to get backup files from {self.config.backup_path}: {e}")
            return []

    @staticmethod
    def _verify_unique_names(checks: List[CheckItem]) -> None:
        duplicates = [name for name, count in Counter(c.name for c in checks).items() if count > 1]
        if duplicates:
            raise ExecutionFault(f"Duplicate check names in report: {', '.join(sorted(duplicates))}")

    @staticmethod
    def _build_report(check_id: str, start_time: float, checks: List[CheckItem]) -> HealthReport:
        summary = ReportSummary.from_checks(checks)
        return HealthReport(
            check_id=check_id,
            timestamp=datetime.now(timezone.utc),
            overall_status=summary.overall_status(),
            duration_ms=(time.monotonic() - start_time) * 1000,
            checks=checks,
            summary=summary,
            recommendations=generate_recommendations(checks),
        )

    @staticmethod
    def _degraded_report(check_id: str, start_time: float, error: Exception) -> HealthReport:
        duration_ms = (time.monotonic() - start_time) * 1000
        failed_check = CheckItem(
            name="health_check_execution",
            category=CheckCategory.ACCESSIBILITY,
            status=CheckStatus.FAIL,
            severity=Severity.CRITICAL,
            message=f"Health check execution failed: {error}",
            details=ErrorDetails(exception_type=type(error).__name__, exception_message=str(error)),
            duration_ms=duration_ms,
        )
        return HealthReport(
            check_id=check_id,
            timestamp=datetime.now(timezone.utc),
            overall_status=OverallStatus.FAIL,
            duration_ms=duration_ms,
            checks=[failed_check],
            summary=ReportSummary.from_checks([failed_check]),
            recommendations=[DEGRADED_RECOMMENDATION],
        )
