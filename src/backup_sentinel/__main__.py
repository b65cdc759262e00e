#!/usr/bin/env python3
"""
Backup Sentinel entry point.

Runs a single health check (or quick status) and prints it as JSON. The exit
code reflects the outcome so schedulers can alert on it.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Optional

from .config import HealthCheckConfig
from .models import OverallStatus, QuickStatus
from .runner import HealthCheckRunner

EXIT_CODES = {
    OverallStatus.PASS: 0,
    OverallStatus.WARNING: 1,
    OverallStatus.FAIL: 2,
    QuickStatus.HEALTHY: 0,
    QuickStatus.DEGRADED: 1,
    QuickStatus.UNHEALTHY: 2,
}


def setup_logging():
    """Configure logging for Backup Sentinel."""
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    return logging.getLogger(__name__)


def build_config(args: argparse.Namespace) -> HealthCheckConfig:
    """Resolve configuration from file/env, then apply command-line overrides."""
    config = HealthCheckConfig.from_yaml(args.config) if args.config else HealthCheckConfig.from_env()
    if args.backup_path:
        config.backup_path = args.backup_path
    if args.test_directory:
        config.test_directory = args.test_directory
    return config


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for a one-shot backup health check."""
    parser = argparse.ArgumentParser(description="Backup integrity and restoration verification")
    parser.add_argument("--quick", action="store_true", help="Only report quick liveness status")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--backup-path", help="Directory holding the backups")
    parser.add_argument("--test-directory", help="Scratch directory for restoration drills")

    args = parser.parse_args(argv)

    logger = setup_logging()
    runner = HealthCheckRunner(build_config(args))

    if args.quick:
        status = await runner.get_quick_health_status()
        print(json.dumps(status.to_dict(), indent=2))
        return EXIT_CODES[status.status]

    logger.info(f"Checking backups in {runner.config.backup_path}")
    report = await runner.run_health_check()
    print(json.dumps(report.to_dict(), indent=2))
    return EXIT_CODES[report.overall_status]


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
