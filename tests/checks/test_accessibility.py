"""Tests for backup root accessibility check."""

import pytest

from backup_sentinel.checks.accessibility import BackupAccessibility
from backup_sentinel.config import HealthCheckConfig
from backup_sentinel.models import AccessDetails, CheckCategory, CheckStatus, Severity


class TestBackupAccessibility:
    """Tests for BackupAccessibility check."""

    @pytest.mark.asyncio
    async def test_existing_directory_passes(self, config, store):
        item = await BackupAccessibility(config, store).execute()

        assert item.name == "backup_directory_access"
        assert item.category == CheckCategory.ACCESSIBILITY
        assert item.status == CheckStatus.PASS
        assert item.message == "Backup directory is accessible"
        assert item.details == AccessDetails(path=config.backup_path, is_directory=True)

    @pytest.mark.asyncio
    async def test_missing_directory_fails_critical(self, tmp_path, store):
        config = HealthCheckConfig(backup_path=str(tmp_path / "absent"))

        item = await BackupAccessibility(config, store).execute()

        assert item.status == CheckStatus.FAIL
        assert item.severity == Severity.CRITICAL
        assert item.message.startswith("Cannot access backup directory: ")
        assert item.details.is_directory is False

    @pytest.mark.asyncio
    async def test_file_instead_of_directory_fails(self, tmp_path, store):
        path = tmp_path / "backups.db"
        path.write_bytes(b"not a directory")
        config = HealthCheckConfig(backup_path=str(path))

        item = await BackupAccessibility(config, store).execute()

        assert item.status == CheckStatus.FAIL
        assert item.severity == Severity.CRITICAL
        assert item.message == "Backup path is not a directory"
