#!/usr/bin/env python3
"""Read latency check on the most recent backup."""

import logging
import time

from ..base_check import ArtifactCheck
from ..errors import PerformanceDegradation
from ..models import (
    CheckCategory,
    CheckItem,
    CheckStatus,
    PerformanceDetails,
    Severity,
    SizeGateDetails,
)

logger = logging.getLogger(__name__)


class ReadPerformance(ArtifactCheck):
    """Times a full read of an artifact against the latency budget.

    The orchestrator points it at the most recent artifact.
    """

    name_prefix = "read_performance"
    category = CheckCategory.PERFORMANCE
    failure_severity = Severity.HIGH

    def failure_message(self) -> str:
        return "Read performance test failed"

    async def read_all(self) -> int:
        """Read the artifact in chunks, returning the byte count."""
        total = 0
        reader = await self.open_blocking(self.store.open_read, self.artifact.path)
        with reader:
            while True:
                chunk = await self.run_blocking(reader.read, self.config.chunk_size)
                if not chunk:
                    return total
                total += len(chunk)

    async def run_check(self) -> CheckItem:
        size = self.artifact.size_bytes
        if size > self.config.max_test_file_size:
            return self.make_item(
                CheckStatus.SKIP,
                Severity.LOW,
                "File too large for read performance test",
                SizeGateDetails(size=size, max_size=self.config.max_test_file_size),
                duration_ms=0.0,
            )

        started = time.monotonic()
        await self.read_all()
        duration_ms = (time.monotonic() - started) * 1000
        details = PerformanceDetails(duration_ms=round(duration_ms, 3), size_bytes=size)

        if duration_ms > self.config.read_latency_budget_ms:
            logger.warning(f"Slow backup read: {self.artifact.name} took {duration_ms:.0f}ms")
            raise PerformanceDegradation("Backup read performance is slow", details)

        return self.make_item(
            CheckStatus.PASS, Severity.LOW, "Backup read performance is good", details,
            duration_ms=duration_ms,
        )
