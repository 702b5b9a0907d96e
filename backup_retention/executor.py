"""
Backup cleanup run: list, parse, evaluate, delete.

Listing failures abort the run; each deletion is isolated so one failing object
never stops the others. Nothing here should make the surrounding backup job fail.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .config import CleanupConfig
from .filename_timestamp import parse_backup_timestamp
from .policy import BackupRecord, DeletionDecision, RetentionPolicy, evaluate_retention
from .reports import format_reasons, format_summary
from .s3_client import create_s3_client


class BackupListingError(RuntimeError):
    """Raised when the backup scope cannot be listed; fatal to the run."""


class CleanupPhase(Enum):
    """Stages of a cleanup run"""

    IDLE = "idle"
    CHECK_POLICY = "check_policy"
    LISTING = "listing"
    PARSING = "parsing"
    EVALUATING = "evaluating"
    DELETING = "deleting"
    DONE = "done"


class CleanupOutcome(Enum):
    """How a cleanup run ended"""

    DISABLED = "disabled"
    LISTING_FAILED = "listing_failed"
    NO_BACKUPS = "no_backups"
    NO_VALID_BACKUPS = "no_valid_backups"
    NOTHING_TO_DELETE = "nothing_to_delete"
    DRY_RUN = "dry_run"
    COMPLETED = "completed"


@dataclass
class CleanupSummary:
    """Result of one cleanup run."""

    outcome: CleanupOutcome
    phase: CleanupPhase
    policy: RetentionPolicy
    considered: int = 0
    deleted: int = 0
    retained: int = 0
    failed: list[tuple[str, Exception]] = field(default_factory=list)
    decisions: list[DeletionDecision] = field(default_factory=list)


def build_search_prefix(prefix: str, subfolder: Optional[str] = None) -> str:
    """Return the listing prefix, nested under ``subfolder`` when one is configured."""
    if subfolder:
        folder = subfolder.strip("/")
        if folder:
            return f"{folder}/{prefix}"
    return prefix


def _get_page_contents(bucket: str, page: dict) -> list[dict]:
    """Extract object listings from a paginator page, validating key counts."""
    contents = page.get("Contents")
    key_count = page.get("KeyCount")
    if contents is None:
        if key_count not in (None, 0):
            raise BackupListingError(f"list_objects_v2 missing Contents while reporting {key_count} keys for bucket {bucket}")
        return []
    return contents


def list_backup_objects(s3, bucket: str, search_prefix: str) -> list[dict]:
    """
    List every object under ``search_prefix``, following pagination.

    Raises:
        BackupListingError: If S3 cannot be reached, denies access, the bucket
            is missing, or a page is malformed
    """
    objects: list[dict] = []
    try:
        paginator = s3.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket, Prefix=search_prefix):
            objects.extend(_get_page_contents(bucket, page))
    except (ClientError, BotoCoreError) as exc:
        raise BackupListingError(f"Failed to list s3://{bucket}/{search_prefix}: {exc}") from exc
    return objects


def base_filename(key: str) -> str:
    """Final path segment of an object key."""
    return key.rsplit("/", 1)[-1]


def collect_backup_records(objects: Iterable[dict], prefix: str) -> list[BackupRecord]:
    """Parse listed objects into records, skipping keys that are not backups for ``prefix``."""
    records = []
    for obj in objects:
        key = obj.get("Key")
        if not key:
            continue
        filename = base_filename(key)
        if not filename:
            continue
        timestamp = parse_backup_timestamp(filename, prefix)
        if timestamp is None:
            logging.debug("Skipping %s: not a %s backup filename", key, prefix)
            continue
        records.append(BackupRecord(key=key, timestamp=timestamp))
    return records


def delete_backups(s3, bucket: str, decisions: Iterable[DeletionDecision]) -> tuple[int, list[tuple[str, Exception]]]:
    """
    Delete each chosen backup, continuing past individual failures.

    Returns:
        tuple: (number deleted, list of (key, error) for failed deletions)
    """
    deleted = 0
    failures: list[tuple[str, Exception]] = []
    for decision in decisions:
        key = decision.record.key
        try:
            s3.delete_object(Bucket=bucket, Key=key)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logging.exception("Failed to delete %s", key)
            failures.append((key, exc))
        else:
            deleted += 1
            logging.info("Deleted: %s", key)
    return deleted, failures


def _finish(summary: CleanupSummary, outcome: CleanupOutcome, message: str) -> CleanupSummary:
    logging.info(message)
    summary.outcome = outcome
    return summary


def run_cleanup(s3, config: CleanupConfig, now: Optional[datetime] = None, dry_run: bool = False) -> CleanupSummary:
    """
    Run one cleanup pass over the configured backup scope.

    Args:
        s3: S3 client exposing ``get_paginator`` and ``delete_object``
        config: Bucket, scope and retention policy
        now: Reference instant for age checks; defaults to the current UTC time
        dry_run: Report decisions without deleting anything

    Returns:
        CleanupSummary describing where the run stopped and what it did
    """
    policy = config.policy
    summary = CleanupSummary(outcome=CleanupOutcome.COMPLETED, phase=CleanupPhase.IDLE, policy=policy)

    summary.phase = CleanupPhase.CHECK_POLICY
    if not policy.enabled:
        return _finish(
            summary,
            CleanupOutcome.DISABLED,
            "Backup cleanup is disabled (no MAX_BACKUP_COUNT or MAX_BACKUP_AGE_DAYS configured)",
        )

    logging.info("Starting backup cleanup...")
    summary.phase = CleanupPhase.LISTING
    search_prefix = build_search_prefix(config.prefix, config.subfolder)
    try:
        objects = list_backup_objects(s3, config.bucket, search_prefix)
    except BackupListingError as exc:
        logging.error("Error during backup cleanup: %s", exc)
        summary.outcome = CleanupOutcome.LISTING_FAILED
        return summary
    if not objects:
        return _finish(summary, CleanupOutcome.NO_BACKUPS, "No backups found to clean up")

    summary.phase = CleanupPhase.PARSING
    records = collect_backup_records(objects, config.prefix)
    if not records:
        return _finish(summary, CleanupOutcome.NO_VALID_BACKUPS, "No valid backup files found to clean up")
    summary.considered = len(records)
    logging.info("Found %d backup(s)", len(records))

    summary.phase = CleanupPhase.EVALUATING
    if now is None:
        now = datetime.now(timezone.utc)
    plan = evaluate_retention(records, policy, now)
    summary.retained = len(plan.keep)
    summary.decisions = plan.delete
    for decision in plan.delete:
        logging.info("Marking for deletion: %s (%s)", decision.record.key, format_reasons(decision.reasons, policy))
    if not plan.delete:
        return _finish(summary, CleanupOutcome.NOTHING_TO_DELETE, "No backups need to be deleted")

    if dry_run:
        return _finish(summary, CleanupOutcome.DRY_RUN, f"Dry run: {len(plan.delete)} backup(s) would be deleted")

    summary.phase = CleanupPhase.DELETING
    logging.info("Deleting %d old backup(s)...", len(plan.delete))
    summary.deleted, summary.failed = delete_backups(s3, config.bucket, plan.delete)

    summary.phase = CleanupPhase.DONE
    return _finish(summary, CleanupOutcome.COMPLETED, format_summary(summary))


def cleanup_old_backups(
    config: CleanupConfig, s3=None, now: Optional[datetime] = None, dry_run: bool = False
) -> Optional[CleanupSummary]:
    """
    Scheduler hook run after each successful backup, and the CLI entry into a run.

    Cleanup is best-effort: unexpected errors are logged and swallowed so the
    backup job itself never fails because of them.

    Returns:
        CleanupSummary, or None if the run hit an unexpected error
    """
    if not config.policy.enabled:
        return run_cleanup(s3, config, now=now, dry_run=dry_run)
    try:
        if s3 is None:
            s3 = create_s3_client(config)
        return run_cleanup(s3, config, now=now, dry_run=dry_run)
    except Exception:  # pylint: disable=broad-exception-caught
        logging.exception("Unexpected error during backup cleanup")
        return None


__all__ = [
    "BackupListingError",
    "CleanupOutcome",
    "CleanupPhase",
    "CleanupSummary",
    "base_filename",
    "build_search_prefix",
    "cleanup_old_backups",
    "collect_backup_records",
    "delete_backups",
    "list_backup_objects",
    "run_cleanup",
]
