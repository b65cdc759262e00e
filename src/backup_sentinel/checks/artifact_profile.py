#!/usr/bin/env python3
"""Per-artifact size and age validation."""

from ..base_check import ArtifactCheck
from ..errors import ComplianceViolation, IntegrityError
from ..models import (
    AgeDetails,
    CheckCategory,
    CheckItem,
    CheckStatus,
    Severity,
    SizeDetails,
)


class SizeValidation(ArtifactCheck):
    """Flags backups that are suspiciously small or very large."""

    name_prefix = "size_validation"
    category = CheckCategory.INTEGRITY

    async def run_check(self) -> CheckItem:
        size = self.artifact.size_bytes
        details = SizeDetails(
            size=size,
            min_expected=self.config.min_backup_size,
            max_recommended=self.config.max_backup_size,
        )

        if size < self.config.min_backup_size:
            raise IntegrityError(
                "Backup file suspiciously small", details,
                severity=Severity.MEDIUM, status=CheckStatus.WARNING,
            )
        if size > self.config.max_backup_size:
            raise IntegrityError(
                "Backup file very large - may indicate issue", details,
                severity=Severity.MEDIUM, status=CheckStatus.WARNING,
            )

        return self.make_item(CheckStatus.PASS, Severity.LOW, "File size within expected range", details)


class AgeValidation(ArtifactCheck):
    """Flags backups that are getting old (warning) or very old (failure)."""

    name_prefix = "age_validation"
    category = CheckCategory.COMPLIANCE

    async def run_check(self) -> CheckItem:
        age_hours = self.artifact.age_hours(self.now)
        details = AgeDetails(age_hours=round(age_hours, 1))

        if age_hours > self.config.age_failure_hours:
            raise ComplianceViolation(
                "Backup is very old", details, severity=Severity.HIGH, status=CheckStatus.FAIL
            )
        if age_hours > self.config.age_warning_hours:
            raise ComplianceViolation("Backup is getting old", details)

        return self.make_item(CheckStatus.PASS, Severity.LOW, "Backup age is acceptable", details)
