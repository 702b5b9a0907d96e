"""
Human-readable rendering of retention decisions and cleanup summaries.

Decisions carry reason codes only; the text operators see is produced here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from .policy import RetentionPolicy, RetentionReason

if TYPE_CHECKING:
    from .executor import CleanupSummary

# Count before age, so combined reasons read the same on every run.
_REASON_ORDER = (RetentionReason.EXCEEDS_COUNT, RetentionReason.EXCEEDS_AGE)


def _format_days(days: float) -> str:
    if float(days).is_integer():
        return str(int(days))
    return f"{days:g}"


def describe_reason(reason: RetentionReason, policy: RetentionPolicy) -> str:
    """Render a single reason code with the bound that triggered it."""
    if reason is RetentionReason.EXCEEDS_COUNT:
        return f"exceeds max count (keeping {policy.max_count} backups)"
    if reason is RetentionReason.EXCEEDS_AGE:
        return f"exceeds max age ({_format_days(policy.max_age_days)} days)"
    raise ValueError(f"Unknown retention reason: {reason!r}")


def format_reasons(reasons: Iterable[RetentionReason], policy: RetentionPolicy) -> str:
    """Join reasons as ``exceeds max count (...) and exceeds max age (...)``."""
    present = set(reasons)
    parts = [describe_reason(reason, policy) for reason in _REASON_ORDER if reason in present]
    return " and ".join(parts)


def format_summary(summary: "CleanupSummary") -> str:
    """One-line summary of a completed run."""
    line = f"Backup cleanup complete. Deleted {summary.deleted} backup(s), kept {summary.retained} backup(s)"
    if summary.failed:
        line += f", {len(summary.failed)} deletion(s) failed"
    return line


def print_summary(summary: "CleanupSummary") -> None:
    """Print the outcome and per-backup decisions of a run."""
    print(f"Cleanup outcome: {summary.outcome.value}")
    print(f"  Backups considered: {summary.considered}")
    print(f"  Deleted:            {summary.deleted}")
    print(f"  Retained:           {summary.retained}")
    if summary.failed:
        print(f"  Failed deletions:   {len(summary.failed)}")
        for key, error in summary.failed:
            print(f"    - {key}: {error}")
    if summary.decisions:
        print()
        print("Deletion decisions:")
        for decision in summary.decisions:
            print(f"  - {decision.record.key} ({format_reasons(decision.reasons, summary.policy)})")


__all__ = ["describe_reason", "format_reasons", "format_summary", "print_summary"]
