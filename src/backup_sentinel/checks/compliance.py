#!/usr/bin/env python3
"""
Compliance evaluators.

Each evaluator runs once per health check over the full artifact list and
produces exactly one item:

- Frequency: how many backups landed inside the recency window
- Retention: how many backups are past the retention horizon
- Encryption coverage: share of the most recent backups that are encrypted
"""

import asyncio
from datetime import timedelta

from ..base_check import FleetCheck
from ..errors import ComplianceViolation
from ..models import (
    CheckCategory,
    CheckItem,
    CheckStatus,
    CoverageDetails,
    FrequencyDetails,
    RetentionDetails,
    Severity,
)
from .envelope import is_marked_encrypted


class BackupFrequency(FleetCheck):
    """Requires at least two backups inside the recency window."""

    check_name = "backup_frequency"
    category = CheckCategory.COMPLIANCE

    async def run_check(self) -> CheckItem:
        window_hours = self.config.frequency_window_hours

        if not self.artifacts:
            raise ComplianceViolation(
                "No backups found", severity=Severity.CRITICAL, status=CheckStatus.FAIL
            )

        window = timedelta(hours=window_hours)
        recent = [a for a in self.artifacts if self.now - a.modified_at < window]
        details = FrequencyDetails(
            total=len(self.artifacts), recent=len(recent), window_hours=window_hours
        )

        if not recent:
            raise ComplianceViolation(
                f"No recent backups (within {window_hours:g} hours)",
                details,
                severity=Severity.HIGH,
                status=CheckStatus.FAIL,
            )
        if len(recent) < 2:
            raise ComplianceViolation("Low backup frequency", details)

        return self.make_item(CheckStatus.PASS, Severity.LOW, "Backup frequency is adequate", details)


class RetentionCompliance(FleetCheck):
    """Warns when too many backups are past the retention horizon."""

    check_name = "retention_compliance"
    category = CheckCategory.COMPLIANCE

    async def run_check(self) -> CheckItem:
        cutoff = self.now - timedelta(days=self.config.retention_days)
        old = [a for a in self.artifacts if a.modified_at < cutoff]
        details = RetentionDetails(
            total=len(self.artifacts), old=len(old), retention_days=self.config.retention_days
        )

        if len(old) > self.config.retention_max_old:
            raise ComplianceViolation("Many old backups found - consider cleanup", details)

        return self.make_item(CheckStatus.PASS, Severity.LOW, "Retention policy compliance good", details)


class EncryptionCoverage(FleetCheck):
    """Samples the most recent backups and measures how many are encrypted."""

    check_name = "encryption_compliance"
    category = CheckCategory.SECURITY

    async def run_check(self) -> CheckItem:
        sample = self.artifacts[:self.config.coverage_sample_size]
        flags = await asyncio.gather(*(
            self.run_blocking(is_marked_encrypted, self.store, artifact.path)
            for artifact in sample
        ))

        encrypted_count = sum(1 for flag in flags if flag)
        checked_count = len(sample)
        rate = (encrypted_count / checked_count) * 100 if checked_count > 0 else 0.0
        details = CoverageDetails(
            encrypted_count=encrypted_count,
            checked_count=checked_count,
            encryption_rate=round(rate, 1),
        )

        if rate < self.config.coverage_min_percent:
            raise ComplianceViolation("Low encryption compliance rate", details)

        return self.make_item(CheckStatus.PASS, Severity.LOW, "Good encryption compliance", details)
