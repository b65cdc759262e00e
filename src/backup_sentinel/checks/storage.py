#!/usr/bin/env python3
"""Storage headroom check for the volume holding the backups."""

from ..base_check import BaseCheck
from ..config import HealthCheckConfig
from ..errors import PerformanceDegradation
from ..models import CheckCategory, CheckItem, CheckStatus, Severity, StorageDetails
from ..store import ArtifactStore


class StorageHealth(BaseCheck):
    """Warns when the backup volume is low on free space."""

    category = CheckCategory.PERFORMANCE
    failure_severity = Severity.HIGH

    def __init__(self, config: HealthCheckConfig, store: ArtifactStore) -> None:
        super().__init__(config, store, "storage_health")

    def failure_message(self) -> str:
        return "Storage health check failed"

    async def run_check(self) -> CheckItem:
        path = self.config.backup_path
        usage = await self.run_blocking(self.store.disk_usage, path)
        details = StorageDetails(
            path=path,
            total_bytes=usage.total,
            free_bytes=usage.free,
            used_percent=round(usage.percent, 1),
        )

        if usage.free < self.config.storage_min_free_bytes:
            free_gb = usage.free / (1024 ** 3)
            raise PerformanceDegradation(f"Low free space on backup storage: {free_gb:.1f}GB free", details)
        if usage.percent > self.config.storage_max_used_percent:
            raise PerformanceDegradation(f"Backup storage {usage.percent:.1f}% full", details)

        return self.make_item(CheckStatus.PASS, Severity.LOW, "Storage accessible", details)
