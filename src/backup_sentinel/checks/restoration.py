#!/usr/bin/env python3
"""
Restoration drill.

Rehearses a restore by copying the artifact into the scratch directory and
comparing the restored size with the recorded one. The scratch copy only
lives for the duration of the drill: it is removed on every exit path,
including a timeout cancelling the copy halfway.
"""

import functools
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator

from ..base_check import ArtifactCheck
from ..errors import IntegrityError
from ..models import (
    CheckCategory,
    CheckItem,
    CheckStatus,
    DrillDetails,
    Severity,
    SizeGateDetails,
)

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "test_restore_"


class RestorationDrill(ArtifactCheck):
    """Copies an artifact to scratch space and verifies the copy."""

    name_prefix = "restoration_test"
    category = CheckCategory.INTEGRITY
    failure_severity = Severity.HIGH

    def failure_message(self) -> str:
        return "Restoration test failed"

    def scratch_name(self) -> str:
        millis = time.time_ns() // 1_000_000
        return f"{SCRATCH_PREFIX}{self.label}_{millis}_{uuid.uuid4().hex[:8]}.db"

    @asynccontextmanager
    async def scratch_file(self) -> AsyncIterator[str]:
        """Reserve a collision-free scratch path and remove it afterwards."""
        await self.run_blocking(self.store.make_dirs, self.config.test_directory)
        path = self.store.join(self.config.test_directory, self.scratch_name())
        try:
            yield path
        finally:
            # Synchronous so it still runs when the drill is being cancelled
            self.discard(path)

    def discard(self, path: str) -> None:
        try:
            self.store.delete(path)
        except OSError as e:
            logger.debug(f"Could not remove scratch file {path}: {e}")

    async def copy_to(self, destination: str) -> None:
        """Chunked copy so a timeout can interrupt between chunks."""
        chunk_size = self.config.chunk_size
        reader = await self.open_blocking(self.store.open_read, self.artifact.path)
        with reader:
            writer = await self.open_blocking(
                self.store.open_write, destination, functools.partial(self.discard, destination)
            )
            with writer:
                while True:
                    chunk = await self.run_blocking(reader.read, chunk_size)
                    if not chunk:
                        break
                    await self.run_blocking(writer.write, chunk)

    async def run_check(self) -> CheckItem:
        original_size = self.artifact.size_bytes
        max_size = self.config.max_test_file_size

        if original_size > max_size:
            return self.make_item(
                CheckStatus.SKIP,
                Severity.LOW,
                "File too large for restoration test",
                SizeGateDetails(size=original_size, max_size=max_size),
                duration_ms=0.0,
            )

        async with self.scratch_file() as restored_path:
            await self.copy_to(restored_path)
            restored = await self.run_blocking(self.store.stat, restored_path)

        details = DrillDetails(
            original_size=original_size,
            restored_size=restored.size,
            duration_ms=self.elapsed_ms(),
        )

        if restored.size != original_size:
            logger.warning(
                f"Restoration drill size mismatch for {self.artifact.name}: "
                f"{original_size} != {restored.size}"
            )
            raise IntegrityError("Restoration test failed - size mismatch", details)

        return self.make_item(CheckStatus.PASS, Severity.LOW, "Restoration test successful", details)
