#!/usr/bin/env python3
"""
Configuration for the backup health checker.

A HealthCheckConfig is passed explicitly to each HealthCheckRunner; callers own
one instance per backup root. Values can come from keyword arguments, a plain
dict, environment variables or a YAML file.
"""

import hashlib
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

MIB = 1024 * 1024
GIB = 1024 * MIB

INTEGER_FIELDS = (
    "max_test_file_size", "artifact_cap", "max_concurrency", "coverage_sample_size", "chunk_size",
    "retention_max_old", "min_backup_size", "max_backup_size", "storage_min_free_bytes", "history_size",
)
NUMERIC_FIELDS = (
    "frequency_window_hours", "retention_days", "coverage_min_percent", "read_latency_budget_ms",
    "quick_status_max_age_hours", "age_warning_hours", "age_failure_hours", "storage_max_used_percent",
)


def _check_digest_algorithm(name: str) -> None:
    """Reject algorithms hashlib cannot build or whose digest length is not fixed."""
    if name not in hashlib.algorithms_available:
        raise ConfigurationError(f"Unsupported checksum algorithm: {name}")
    try:
        digest_size = hashlib.new(name).digest_size
    except ValueError as e:
        raise ConfigurationError(f"Unsupported checksum algorithm: {name} ({e})") from e
    if digest_size <= 0:
        raise ConfigurationError(f"Unsupported checksum algorithm: {name} has a variable-length digest")


def _env_number(name: str, convert: Callable[[str], Any]) -> Any:
    raw = os.getenv(name)
    try:
        return convert(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


@dataclass
class HealthCheckConfig:
    """Settings and thresholds for one backup root."""

    backup_path: str = "./backups"
    test_directory: str = "./backup-tests"
    max_test_file_size: int = 100 * MIB
    checksum_algorithm: str = "sha256"

    artifact_cap: int = 5
    max_concurrency: int = 5
    coverage_sample_size: int = 10
    io_timeout_seconds: Optional[float] = 30.0
    backup_suffixes: Tuple[str, ...] = (".db", ".backup", ".sql")
    chunk_size: int = MIB

    frequency_window_hours: float = 24
    retention_days: float = 30
    retention_max_old: int = 10
    coverage_min_percent: float = 50.0
    read_latency_budget_ms: float = 5000
    quick_status_max_age_hours: float = 48

    min_backup_size: int = 1024
    max_backup_size: int = 10 * GIB
    age_warning_hours: float = 48
    age_failure_hours: float = 168

    storage_min_free_bytes: int = GIB
    storage_max_used_percent: float = 90.0

    history_size: int = 50

    def __post_init__(self):
        """Normalize and validate values."""
        self.backup_path = str(self.backup_path)
        self.test_directory = str(self.test_directory)

        if not isinstance(self.checksum_algorithm, str):
            raise ConfigurationError(f"checksum_algorithm must be a string, got {self.checksum_algorithm!r}")
        self.checksum_algorithm = self.checksum_algorithm.lower()
        _check_digest_algorithm(self.checksum_algorithm)

        if isinstance(self.backup_suffixes, str):
            raise ConfigurationError("backup_suffixes must be a list of suffixes, not a string")
        self.backup_suffixes = tuple(self.backup_suffixes)

        for name in INTEGER_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")

        for name in NUMERIC_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")

        io_timeout = self.io_timeout_seconds
        if io_timeout is not None and (isinstance(io_timeout, bool) or not isinstance(io_timeout, (int, float))):
            raise ConfigurationError(f"io_timeout_seconds must be a number or None, got {io_timeout!r}")

        for name in ("max_test_file_size", "artifact_cap", "max_concurrency", "coverage_sample_size",
                     "chunk_size", "history_size"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")

        if self.io_timeout_seconds is not None and self.io_timeout_seconds <= 0:
            raise ConfigurationError("io_timeout_seconds must be positive or None")

        if not self.backup_suffixes:
            raise ConfigurationError("backup_suffixes must not be empty")

        if self.min_backup_size > self.max_backup_size:
            raise ConfigurationError("min_backup_size must not exceed max_backup_size")

        if self.age_warning_hours > self.age_failure_hours:
            raise ConfigurationError("age_warning_hours must not exceed age_failure_hours")

        if not 0 <= self.coverage_min_percent <= 100:
            raise ConfigurationError("coverage_min_percent must be between 0 and 100")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        result = asdict(self)
        result["backup_suffixes"] = list(self.backup_suffixes)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HealthCheckConfig":
        """Create from dictionary format, ignoring unknown keys."""
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_env(cls) -> "HealthCheckConfig":
        """Create configuration from environment variables."""
        data: Dict[str, Any] = {}
        if os.getenv("BACKUP_HEALTH_PATH"):
            data["backup_path"] = os.getenv("BACKUP_HEALTH_PATH")
        if os.getenv("BACKUP_HEALTH_TEST_DIR"):
            data["test_directory"] = os.getenv("BACKUP_HEALTH_TEST_DIR")
        if os.getenv("BACKUP_HEALTH_MAX_TEST_SIZE"):
            data["max_test_file_size"] = _env_number("BACKUP_HEALTH_MAX_TEST_SIZE", int)
        if os.getenv("BACKUP_HEALTH_CHECKSUM_ALGORITHM"):
            data["checksum_algorithm"] = os.getenv("BACKUP_HEALTH_CHECKSUM_ALGORITHM")
        if os.getenv("BACKUP_HEALTH_IO_TIMEOUT"):
            data["io_timeout_seconds"] = _env_number("BACKUP_HEALTH_IO_TIMEOUT", float)
        return cls(**data)

    @classmethod
    def from_yaml(cls, config_path: Union[str, Path]) -> "HealthCheckConfig":
        """
        Load configuration from a YAML file.

        A missing file yields the defaults. The file may either hold the
        settings at the top level or under a ``backup_health`` key.

        Args:
            config_path: Path to the YAML file

        Returns:
            HealthCheckConfig built from the file contents
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning(f"Config file not found: {path}, using defaults")
            return cls()

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        section = data.get("backup_health", data)
        logger.info(f"Loaded backup health config from {path}")
        return cls.from_dict(section)
