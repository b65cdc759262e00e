#!/usr/bin/env python3
"""
Base check interface for backup health checks.

Provides the common interface and utilities that all check classes implement:
timing, conversion of faults into CheckItems, timeouts and executor offloading
of blocking store calls.
"""

import asyncio
import functools
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, BinaryIO, Callable, List, Optional

from .config import HealthCheckConfig
from .errors import BackupHealthError
from .models import (
    BackupArtifact,
    CheckCategory,
    CheckDetails,
    CheckItem,
    CheckStatus,
    ErrorDetails,
    Severity,
)
from .store import ArtifactStore

logger = logging.getLogger(__name__)


async def run_blocking(func: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking store call in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args))


def _release_abandoned(
    future: "asyncio.Future[BinaryIO]",
    on_abandon: Optional[Callable[[], None]] = None,
) -> None:
    """Close a handle whose opener finished after the caller gave up on it."""
    if future.cancelled() or future.exception() is not None:
        return
    future.result().close()
    if on_abandon is not None:
        on_abandon()


async def open_blocking(
    opener: Callable[[str], BinaryIO],
    path: str,
    on_abandon: Optional[Callable[[], None]] = None,
) -> BinaryIO:
    """
    Open a store handle in the default executor.

    If the caller is cancelled while the open is still running, the handle
    is closed as soon as it arrives and ``on_abandon`` is called.
    """
    loop = asyncio.get_running_loop()
    future = loop.run_in_executor(None, opener, path)
    try:
        return await asyncio.shield(future)
    except asyncio.CancelledError:
        future.add_done_callback(functools.partial(_release_abandoned, on_abandon=on_abandon))
        raise


class BaseCheck(ABC):
    """Abstract base class for all backup checks."""

    category: CheckCategory = CheckCategory.INTEGRITY
    # Severity used when an unexpected exception escapes run_check()
    failure_severity: Severity = Severity.HIGH

    def __init__(self, config: HealthCheckConfig, store: ArtifactStore, name: str):
        """
        Initialize base check.

        Args:
            config: Health check configuration
            store: Store the backups live on
            name: Item name, unique within one report (e.g. "integrity_nightly")
        """
        self.config = config
        self.store = store
        self.name = name
        self._start_time = time.monotonic()

    @abstractmethod
    async def run_check(self) -> CheckItem:
        """
        Execute the check and return its item.

        Implementations return an item for the healthy outcome and raise a
        BackupHealthError subclass for everything else.
        """

    async def execute(self) -> CheckItem:
        """
        Execute the check with timing and error handling.

        Never raises for check-level faults: taxonomy errors keep their status
        and severity, any other exception becomes a failure at
        ``failure_severity``.
        """
        self._start_time = time.monotonic()

        try:
            return await self.run_check()

        except BackupHealthError as e:
            return self.make_item(e.status, e.severity, e.message, e.details)

        except Exception as e:
            logger.warning(f"Check {self.name} failed: {type(e).__name__}: {e}")
            return self.make_item(
                CheckStatus.FAIL,
                self.failure_severity,
                f"{self.failure_message()}: {e}",
                ErrorDetails(exception_type=type(e).__name__, exception_message=str(e)),
            )

    async def run_with_timeout(self, timeout_seconds: Optional[float]) -> CheckItem:
        """
        Execute the check with a timeout.

        Args:
            timeout_seconds: Maximum time to allow, or None for no limit

        Returns:
            CheckItem, with a timeout failure if the check takes too long
        """
        if timeout_seconds is None:
            return await self.execute()

        try:
            return await asyncio.wait_for(self.execute(), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"Check {self.name} timed out after {timeout_seconds}s")
            return self.make_item(
                CheckStatus.FAIL,
                self.failure_severity,
                f"{self.failure_message()}: timed out after {timeout_seconds} seconds",
                ErrorDetails(
                    exception_type="TimeoutError",
                    exception_message=f"timed out after {timeout_seconds} seconds",
                ),
            )

    def failure_message(self) -> str:
        """Prefix for messages describing an unexpected failure."""
        return "Check execution failed"

    def elapsed_ms(self) -> float:
        return (time.monotonic() - self._start_time) * 1000

    def make_item(
        self,
        status: CheckStatus,
        severity: Severity,
        message: str,
        details: Optional[CheckDetails] = None,
        duration_ms: Optional[float] = None,
    ) -> CheckItem:
        """Build this check's item, timing it from the start of execute()."""
        return CheckItem(
            name=self.name,
            category=self.category,
            status=status,
            severity=severity,
            message=message,
            details=details,
            duration_ms=self.elapsed_ms() if duration_ms is None else duration_ms,
        )

    async def run_blocking(self, func: Callable[..., Any], *args: Any) -> Any:
        return await run_blocking(func, *args)

    async def open_blocking(
        self,
        opener: Callable[[str], BinaryIO],
        path: str,
        on_abandon: Optional[Callable[[], None]] = None,
    ) -> BinaryIO:
        return await open_blocking(opener, path, on_abandon)


class ArtifactCheck(BaseCheck):
    """Base class for checks that look at a single backup artifact."""

    name_prefix: str = ""

    def __init__(
        self,
        config: HealthCheckConfig,
        store: ArtifactStore,
        artifact: BackupArtifact,
        label: Optional[str] = None,
        now: Optional[datetime] = None,
    ):
        """
        Args:
            config: Health check configuration
            store: Store the artifact lives on
            artifact: Artifact under check
            label: Suffix for the item name, defaults to the artifact's stem
            now: Reference time for age computations
        """
        self.artifact = artifact
        self.label = label or artifact.stem
        self.now = now or datetime.now(timezone.utc)
        super().__init__(config, store, f"{self.name_prefix}_{self.label}")


class FleetCheck(BaseCheck):
    """Base class for checks over the whole artifact list."""

    check_name: str = ""

    def __init__(
        self,
        config: HealthCheckConfig,
        store: ArtifactStore,
        artifacts: List[BackupArtifact],
        now: Optional[datetime] = None,
    ):
        """
        Args:
            config: Health check configuration
            store: Store the artifacts live on
            artifacts: All discovered artifacts, newest first
            now: Reference time for age computations
        """
        super().__init__(config, store, self.check_name)
        self.artifacts = artifacts
        self.now = now or datetime.now(timezone.utc)
