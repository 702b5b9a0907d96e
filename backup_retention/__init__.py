"""
Backup retention package.

Find timestamp-named backup archives in an S3 bucket and delete those that
exceed the configured count and/or age bounds.
"""

from . import cli, config, executor, filename_timestamp, policy, reports, s3_client
from .config import CleanupConfig, ConfigError, load_config
from .executor import (
    BackupListingError,
    CleanupOutcome,
    CleanupPhase,
    CleanupSummary,
    cleanup_old_backups,
    run_cleanup,
)
from .filename_timestamp import format_backup_filename, parse_backup_timestamp
from .policy import (
    BackupRecord,
    DeletionDecision,
    RetentionPlan,
    RetentionPolicy,
    RetentionReason,
    evaluate_retention,
)

__all__ = [
    "BackupListingError",
    "BackupRecord",
    "CleanupConfig",
    "CleanupOutcome",
    "CleanupPhase",
    "CleanupSummary",
    "ConfigError",
    "DeletionDecision",
    "RetentionPlan",
    "RetentionPolicy",
    "RetentionReason",
    "cleanup_old_backups",
    "cli",
    "config",
    "evaluate_retention",
    "executor",
    "filename_timestamp",
    "format_backup_filename",
    "load_config",
    "parse_backup_timestamp",
    "policy",
    "reports",
    "run_cleanup",
    "s3_client",
]
