"""Retention policy evaluation for parsed backup records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional


class RetentionReason(Enum):
    """Why a backup was selected for deletion"""

    EXCEEDS_COUNT = "exceeds_count"
    EXCEEDS_AGE = "exceeds_age"


@dataclass(frozen=True)
class BackupRecord:
    """A stored backup object whose filename carried a valid timestamp."""

    key: str
    timestamp: datetime


@dataclass(frozen=True)
class RetentionPolicy:
    """Optional count and age bounds; a backup violating either one is deleted."""

    max_count: Optional[int] = None
    max_age: Optional[timedelta] = None

    def __post_init__(self):
        if self.max_count is not None and self.max_count < 0:
            raise ValueError(f"max_count must be non-negative, got {self.max_count}")
        if self.max_age is not None and self.max_age < timedelta(0):
            raise ValueError(f"max_age must be non-negative, got {self.max_age}")

    @classmethod
    def from_days(cls, max_count: Optional[int] = None, max_age_days: Optional[int] = None) -> "RetentionPolicy":
        """Build a policy from the whole-day age bound used in configuration."""
        max_age = None
        if max_age_days is not None:
            max_age = timedelta(days=max_age_days)
        return cls(max_count=max_count, max_age=max_age)

    @property
    def enabled(self) -> bool:
        """False when neither bound is configured (cleanup is switched off)."""
        return self.max_count is not None or self.max_age is not None

    @property
    def max_age_days(self) -> Optional[float]:
        if self.max_age is None:
            return None
        return self.max_age / timedelta(days=1)


@dataclass(frozen=True)
class DeletionDecision:
    """A record chosen for deletion together with every rule it violated."""

    record: BackupRecord
    reasons: frozenset[RetentionReason]


@dataclass
class RetentionPlan:
    """Partition of records into kept and deleted, both newest-first."""

    keep: list[BackupRecord] = field(default_factory=list)
    delete: list[DeletionDecision] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.keep) + len(self.delete)


def sort_newest_first(records: Iterable[BackupRecord]) -> list[BackupRecord]:
    """Return a new list ordered newest-first; equal timestamps keep their listing order."""
    return sorted(records, key=lambda record: record.timestamp, reverse=True)


def _reasons_for(position: int, record: BackupRecord, policy: RetentionPolicy, now: datetime) -> frozenset[RetentionReason]:
    reasons = set()
    if policy.max_count is not None and position >= policy.max_count:
        reasons.add(RetentionReason.EXCEEDS_COUNT)
    if policy.max_age is not None and now - record.timestamp > policy.max_age:
        reasons.add(RetentionReason.EXCEEDS_AGE)
    return frozenset(reasons)


def evaluate_retention(records: Iterable[BackupRecord], policy: RetentionPolicy, now: datetime) -> RetentionPlan:
    """
    Split backups into those to keep and those to delete.

    Records are ranked newest-first. A record at position ``i`` exceeds the
    count bound when ``i >= max_count``, and exceeds the age bound when its age
    is strictly greater than ``max_age``. Either violation alone is enough to
    delete it.

    Args:
        records: Parsed backups for one scope; the input is not modified
        policy: Retention bounds
        now: Reference instant for age calculations (timezone-aware)

    Returns:
        RetentionPlan with newest-first keep and delete lists
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")

    plan = RetentionPlan()
    for position, record in enumerate(sort_newest_first(records)):
        reasons = _reasons_for(position, record, policy, now)
        if reasons:
            plan.delete.append(DeletionDecision(record=record, reasons=reasons))
        else:
            plan.keep.append(record)
    return plan


__all__ = [
    "BackupRecord",
    "DeletionDecision",
    "RetentionPlan",
    "RetentionPolicy",
    "RetentionReason",
    "evaluate_retention",
    "sort_newest_first",
]
