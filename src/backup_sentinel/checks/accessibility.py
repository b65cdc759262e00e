#!/usr/bin/env python3
"""Backup root accessibility check."""

from ..base_check import BaseCheck
from ..config import HealthCheckConfig
from ..errors import AccessibilityError
from ..models import AccessDetails, CheckCategory, CheckItem, CheckStatus, Severity
from ..store import ArtifactStore


class BackupAccessibility(BaseCheck):
    """Verifies the backup root exists and is a directory."""

    category = CheckCategory.ACCESSIBILITY
    failure_severity = Severity.CRITICAL

    def __init__(self, config: HealthCheckConfig, store: ArtifactStore) -> None:
        super().__init__(config, store, "backup_directory_access")

    def failure_message(self) -> str:
        return "Cannot access backup directory"

    async def run_check(self) -> CheckItem:
        path = self.config.backup_path
        try:
            st = await self.run_blocking(self.store.stat, path)
        except OSError as e:
            raise AccessibilityError(
                f"Cannot access backup directory: {e}",
                AccessDetails(path=path, is_directory=False),
            )

        if not st.is_dir:
            raise AccessibilityError(
                "Backup path is not a directory",
                AccessDetails(path=path, is_directory=False),
            )

        return self.make_item(
            CheckStatus.PASS,
            Severity.LOW,
            "Backup directory is accessible",
            AccessDetails(path=path, is_directory=True),
        )
