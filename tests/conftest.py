"""Pytest configuration for backup sentinel tests.

Provides a configuration rooted in a temporary directory, a local store and
factories for writing backup artifacts with controlled age, content and
checksum sidecars.
"""

import hashlib
import json
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

import pytest

from backup_sentinel.config import HealthCheckConfig
from backup_sentinel.models import BackupArtifact
from backup_sentinel.runner import HealthCheckRunner
from backup_sentinel.store import LocalArtifactStore

SQLITE_HEADER = b"SQLite format 3\x00"


@pytest.fixture
def backup_dir(tmp_path) -> Path:
    path = tmp_path / "backups"
    path.mkdir()
    return path


@pytest.fixture
def scratch_dir(tmp_path) -> Path:
    return tmp_path / "backup-tests"


@pytest.fixture
def config(backup_dir, scratch_dir) -> HealthCheckConfig:
    """Configuration with storage thresholds that never trip on the test host."""
    return HealthCheckConfig(
        backup_path=str(backup_dir),
        test_directory=str(scratch_dir),
        storage_min_free_bytes=0,
        storage_max_used_percent=100.0,
    )


@pytest.fixture
def store() -> LocalArtifactStore:
    return LocalArtifactStore()


@pytest.fixture
def runner(config, store) -> HealthCheckRunner:
    return HealthCheckRunner(config, store)


@pytest.fixture
def sqlite_bytes() -> bytes:
    """Content shaped like a binary SQLite database file."""
    return SQLITE_HEADER + bytes(range(256)) * 8


@pytest.fixture
def envelope_bytes():
    """Build an encrypted-envelope document, optionally dropping fields."""
    def _build(drop=(), **overrides: Any) -> bytes:
        document: Dict[str, Any] = {
            "encrypted": True,
            "version": "1.0",
            "encryptedData": "q83vEjRWeJA=" * 200,
            "salt": "c2FsdHNhbHQ=",
            "iv": "aXZpdml2aXY=",
            "tag": "dGFndGFn",
            "algorithm": "aes-256-gcm",
        }
        document.update(overrides)
        for name in drop:
            document.pop(name, None)
        return json.dumps(document).encode("utf-8")
    return _build


@pytest.fixture
def make_artifact(backup_dir, sqlite_bytes):
    """Write a backup file with a given age, optionally with a checksum sidecar."""
    def _make(
        name: str,
        content: Optional[bytes] = None,
        age_hours: float = 1.0,
        checksum: Union[bool, str] = False,
        algorithm: str = "sha256",
        directory: Optional[Path] = None,
    ) -> Path:
        data = sqlite_bytes if content is None else content
        path = (directory or backup_dir) / name
        path.write_bytes(data)

        if checksum:
            digest = checksum if isinstance(checksum, str) else hashlib.new(algorithm, data).hexdigest()
            Path(f"{path}.{algorithm}").write_text(digest + "\n")

        mtime = time.time() - age_hours * 3600
        os.utime(path, (mtime, mtime))
        return path
    return _make


@pytest.fixture
def load_artifact(store):
    """Snapshot a written file as a BackupArtifact."""
    def _load(path: Path) -> BackupArtifact:
        st = store.stat(str(path))
        return BackupArtifact(
            path=str(path),
            name=path.name,
            size_bytes=st.size,
            modified_at=st.modified_at,
        )
    return _load


class SlowReadStore(LocalArtifactStore):
    """Local store whose reads stall, for timeout and latency tests."""

    def __init__(self, delay: float):
        self.delay = delay

    def open_read(self, path: str):
        return _SlowReader(super().open_read(path), self.delay)


class _SlowReader:
    def __init__(self, wrapped, delay: float):
        self._wrapped = wrapped
        self._delay = delay

    def read(self, size: int = -1) -> bytes:
        time.sleep(self._delay)
        return self._wrapped.read(size)

    def close(self) -> None:
        self._wrapped.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


@pytest.fixture
def slow_store():
    """Factory for a store whose reads sleep for ``delay`` seconds per call."""
    return SlowReadStore


class SlowOpenStore(LocalArtifactStore):
    """Local store whose opens stall, like a hung network mount."""

    def __init__(self, read_delay: float = 0.0, write_delay: float = 0.0):
        self.read_delay = read_delay
        self.write_delay = write_delay

    def open_read(self, path: str):
        time.sleep(self.read_delay)
        return super().open_read(path)

    def open_write(self, path: str):
        time.sleep(self.write_delay)
        return super().open_write(path)


@pytest.fixture
def slow_open_store():
    """Factory for a store whose opens sleep before returning a handle."""
    return SlowOpenStore


def scratch_leftovers(scratch_dir: Path):
    if not scratch_dir.exists():
        return []
    return sorted(p.name for p in scratch_dir.glob("test_restore_*"))


@pytest.fixture
def leftover_scratch_files(scratch_dir):
    """Callable listing drill scratch files still present."""
    return lambda: scratch_leftovers(scratch_dir)
