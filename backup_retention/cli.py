"""CLI workflow for backup retention cleanup."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from datetime import timedelta
from pathlib import Path
from typing import Optional, Sequence

from .config import CleanupConfig, ConfigError, load_config
from .executor import cleanup_old_backups
from .policy import RetentionPolicy
from .reports import print_summary

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments controlling configuration source and policy overrides."""
    parser = argparse.ArgumentParser(
        description=(
            "Delete timestamp-named backup archives from S3 that exceed the configured "
            "MAX_BACKUP_COUNT and/or MAX_BACKUP_AGE_DAYS retention bounds."
        ),
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Read configuration from this .env file (default: ./.env when present).",
    )
    parser.add_argument(
        "--max-count",
        type=_positive_int,
        default=None,
        help="Override MAX_BACKUP_COUNT for this run.",
    )
    parser.add_argument(
        "--max-age-days",
        type=_positive_int,
        default=None,
        help="Override MAX_BACKUP_AGE_DAYS for this run.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report which backups would be deleted without deleting them.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log skipped objects and other debug detail.",
    )
    return parser.parse_args(argv)


def apply_overrides(config: CleanupConfig, max_count: Optional[int], max_age_days: Optional[int]) -> CleanupConfig:
    """Replace configured retention bounds with any values given on the command line."""
    if max_count is None and max_age_days is None:
        return config
    count = config.policy.max_count
    if max_count is not None:
        count = max_count
    max_age = config.policy.max_age
    if max_age_days is not None:
        max_age = timedelta(days=max_age_days)
    return dataclasses.replace(config, policy=RetentionPolicy(max_count=count, max_age=max_age))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run a single cleanup pass and print its summary."""
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    try:
        config = load_config(env_file=args.env_file)
    except ConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    config = apply_overrides(config, args.max_count, args.max_age_days)

    summary = cleanup_old_backups(config, dry_run=args.dry_run)
    if summary is None:
        print("Cleanup aborted by an unexpected error; see the log for details", file=sys.stderr)
        return 0
    print_summary(summary)
    return 0


if __name__ == "__main__":  # pragma: no cover - script entry point
    raise SystemExit(main())
