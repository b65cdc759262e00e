#!/usr/bin/env python3
"""
Checksum verification against digest sidecar files.

A backup writer may leave ``<artifact>.<algorithm>`` next to each backup. The
sidecar holds the hex digest, optionally followed by the filename as written
by ``sha256sum`` and friends.
"""

import hashlib
import logging
from typing import Optional

from ..base_check import ArtifactCheck
from ..errors import IntegrityError
from ..models import CheckCategory, CheckItem, CheckStatus, ChecksumDetails, Severity
from ..store import ArtifactStore

logger = logging.getLogger(__name__)


def compute_digest(store: ArtifactStore, path: str, algorithm: str, chunk_size: int) -> str:
    """Hash a file's full content in chunks and return the hex digest."""
    digest = hashlib.new(algorithm)
    with store.open_read(path) as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def read_stored_digest(store: ArtifactStore, sidecar_path: str) -> Optional[str]:
    """Return the digest recorded in a sidecar, or None if there is none."""
    try:
        content = store.read_bytes(sidecar_path).decode("utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"No usable checksum sidecar at {sidecar_path}: {e}")
        return None

    if not content:
        return None
    return content.split()[0].lower()


class ChecksumVerification(ArtifactCheck):
    """Compares an artifact's digest with its stored sidecar digest."""

    name_prefix = "integrity"
    category = CheckCategory.INTEGRITY
    failure_severity = Severity.HIGH

    def failure_message(self) -> str:
        return "Cannot read backup file"

    @property
    def sidecar_path(self) -> str:
        return f"{self.artifact.path}.{self.config.checksum_algorithm}"

    async def run_check(self) -> CheckItem:
        algorithm = self.config.checksum_algorithm
        computed = await self.run_blocking(
            compute_digest, self.store, self.artifact.path, algorithm, self.config.chunk_size
        )
        stored = await self.run_blocking(read_stored_digest, self.store, self.sidecar_path)

        if stored is not None and stored != computed:
            logger.warning(
                f"Checksum mismatch for {self.artifact.name}: computed {computed}, stored {stored}"
            )
            raise IntegrityError(
                "File checksum mismatch - potential corruption",
                ChecksumDetails(algorithm=algorithm, computed=computed, stored=stored),
            )

        return self.make_item(
            CheckStatus.PASS,
            Severity.LOW,
            "File integrity verified" if stored else "File readable (no stored checksum)",
            ChecksumDetails(algorithm=algorithm, computed=computed, stored=stored),
        )
