#!/usr/bin/env python3
"""
Artifact store interface and local filesystem implementation.

The health checker only reads backups and writes scratch copies, so the store
surface is small: list, stat, open, create directories, delete and report disk
usage. Every method is blocking; callers run them in an executor.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, List, Sequence

import psutil

from .models import BackupArtifact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryStat:
    """Subset of stat() the checks care about."""
    size: int
    modified_at: datetime
    is_file: bool
    is_dir: bool


@dataclass(frozen=True)
class DiskUsage:
    """Disk usage of the volume holding a path."""
    total: int
    used: int
    free: int
    percent: float


class ArtifactStore(ABC):
    """Filesystem-like surface the backups live on."""

    @abstractmethod
    def list_entries(self, root: str) -> List[str]:
        """Return entry names directly under root."""

    @abstractmethod
    def stat(self, path: str) -> EntryStat:
        """Stat a path, raising OSError if it does not exist."""

    @abstractmethod
    def open_read(self, path: str) -> BinaryIO:
        """Open a file for binary reading."""

    @abstractmethod
    def open_write(self, path: str) -> BinaryIO:
        """Open (create or truncate) a file for binary writing."""

    @abstractmethod
    def make_dirs(self, path: str) -> None:
        """Create a directory and its parents; no-op if it exists."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove a file."""

    @abstractmethod
    def disk_usage(self, path: str) -> DiskUsage:
        """Report usage of the volume holding path."""

    def join(self, root: str, name: str) -> str:
        return os.path.join(root, name)

    def exists(self, path: str) -> bool:
        try:
            self.stat(path)
            return True
        except OSError:
            return False

    def is_dir(self, path: str) -> bool:
        try:
            return self.stat(path).is_dir
        except OSError:
            return False

    def read_bytes(self, path: str) -> bytes:
        with self.open_read(path) as f:
            return f.read()

    def read_head(self, path: str, size: int) -> bytes:
        with self.open_read(path) as f:
            return f.read(size)


class LocalArtifactStore(ArtifactStore):
    """ArtifactStore backed by the local filesystem."""

    def list_entries(self, root: str) -> List[str]:
        return sorted(entry.name for entry in os.scandir(root))

    def stat(self, path: str) -> EntryStat:
        p = Path(path)
        st = p.stat()
        return EntryStat(
            size=st.st_size,
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            is_file=p.is_file(),
            is_dir=p.is_dir(),
        )

    def open_read(self, path: str) -> BinaryIO:
        return open(path, "rb")

    def open_write(self, path: str) -> BinaryIO:
        return open(path, "wb")

    def make_dirs(self, path: str) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def delete(self, path: str) -> None:
        os.unlink(path)

    def disk_usage(self, path: str) -> DiskUsage:
        usage = psutil.disk_usage(path)
        return DiskUsage(
            total=usage.total,
            used=usage.used,
            free=usage.free,
            percent=usage.percent,
        )


def discover_artifacts(
    store: ArtifactStore,
    root: str,
    suffixes: Sequence[str] = (".db", ".backup", ".sql"),
) -> List[BackupArtifact]:
    """
    Enumerate backup artifacts under root, newest first.

    Only regular files whose name ends with one of the suffixes count. Ties on
    modification time are broken by name so the order is stable for a fixed
    filesystem state.

    Args:
        store: Store to read from
        root: Directory holding the backups
        suffixes: Filename suffixes that identify a backup

    Returns:
        Artifacts sorted newest-first

    Raises:
        OSError: If root cannot be listed
    """
    artifacts = []
    for name in store.list_entries(root):
        if not name.endswith(tuple(suffixes)):
            continue
        path = store.join(root, name)
        try:
            st = store.stat(path)
        except OSError as e:
            # Entry vanished between listing and stat
            logger.debug(f"Skipping {path}: {e}")
            continue
        if not st.is_file:
            continue
        artifacts.append(BackupArtifact(
            path=path,
            name=name,
            size_bytes=st.size,
            modified_at=st.modified_at,
        ))

    artifacts.sort(key=lambda a: a.name)
    artifacts.sort(key=lambda a: a.modified_at, reverse=True)
    return artifacts
