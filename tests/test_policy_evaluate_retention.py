"""Unit tests for evaluate_retention from backup_retention/policy.py"""

from datetime import datetime, timedelta

import pytest

from backup_retention.policy import (
    BackupRecord,
    RetentionPolicy,
    RetentionReason,
    evaluate_retention,
    sort_newest_first,
)
from tests.assertions import assert_equal

COUNT = RetentionReason.EXCEEDS_COUNT
AGE = RetentionReason.EXCEEDS_AGE


def _deleted_ages(plan, now):
    return [round((now - decision.record.timestamp) / timedelta(days=1)) for decision in plan.delete]


def _kept_ages(plan, now):
    return [round((now - record.timestamp) / timedelta(days=1)) for record in plan.keep]


def test_evaluate_retention_combined_policy_example(make_record, now):
    """Test ages [1, 5, 10, 40, 100] with max_count=3 and 30 days"""
    records = [make_record(age) for age in (1, 5, 10, 40, 100)]
    policy = RetentionPolicy.from_days(max_count=3, max_age_days=30)

    plan = evaluate_retention(records, policy, now)

    assert_equal(_kept_ages(plan, now), [1, 5, 10])
    assert_equal(_deleted_ages(plan, now), [40, 100])
    for decision in plan.delete:
        assert_equal(decision.reasons, frozenset({COUNT, AGE}))


def test_evaluate_retention_with_no_records(now):
    """Test that an empty input gives an empty plan"""
    plan = evaluate_retention([], RetentionPolicy(max_count=1), now)

    assert_equal(plan.keep, [])
    assert_equal(plan.delete, [])
    assert_equal(plan.total, 0)


@pytest.mark.parametrize("max_count", [0, 1, 3, 5, 7])
def test_evaluate_retention_count_keeps_newest(make_record, now, max_count):
    """Test that count-only retention keeps exactly the N newest backups"""
    ages = [12, 3, 40, 1, 7]
    records = [make_record(age) for age in ages]

    plan = evaluate_retention(records, RetentionPolicy(max_count=max_count), now)

    newest = sorted(ages)
    assert_equal(_kept_ages(plan, now), newest[:max_count])
    assert_equal(_deleted_ages(plan, now), newest[max_count:])
    for decision in plan.delete:
        assert_equal(decision.reasons, frozenset({COUNT}))


def test_evaluate_retention_zero_count_deletes_everything(make_record, now):
    """Test that max_count=0 marks every record"""
    records = [make_record(age) for age in (1, 2)]

    plan = evaluate_retention(records, RetentionPolicy(max_count=0), now)

    assert_equal(plan.keep, [])
    assert_equal(len(plan.delete), 2)


def test_evaluate_retention_age_deletes_strictly_older(make_record, now):
    """Test that age-only retention deletes ages strictly greater than the bound"""
    records = [make_record(age) for age in (29, 30, 30.001, 31, 365)]

    plan = evaluate_retention(records, RetentionPolicy.from_days(max_age_days=30), now)

    assert_equal(len(plan.keep), 2)
    assert_equal([decision.record for decision in plan.delete], records[2:])
    for decision in plan.delete:
        assert_equal(decision.reasons, frozenset({AGE}))


def test_evaluate_retention_age_larger_than_all_records(make_record, now):
    """Test that a generous age bound deletes nothing"""
    records = [make_record(age) for age in (1, 50, 200)]

    plan = evaluate_retention(records, RetentionPolicy.from_days(max_age_days=1000), now)

    assert_equal(len(plan.keep), 3)
    assert_equal(plan.delete, [])


def test_evaluate_retention_or_semantics_disjoint_rules(make_record, now):
    """Test rules selecting disjoint subsets: each alone is enough to delete"""
    records = [make_record(age) for age in (1, 2, 3)]
    policy = RetentionPolicy(max_count=2, max_age=timedelta(days=100))
    plan = evaluate_retention(records, policy, now)
    assert_equal(_deleted_ages(plan, now), [3])
    assert_equal(plan.delete[0].reasons, frozenset({COUNT}))

    records = [make_record(age) for age in (1, 50)]
    policy = RetentionPolicy(max_count=5, max_age=timedelta(days=10))
    plan = evaluate_retention(records, policy, now)
    assert_equal(_deleted_ages(plan, now), [50])
    assert_equal(plan.delete[0].reasons, frozenset({AGE}))


def test_evaluate_retention_or_semantics_overlapping_rules(make_record, now):
    """Test rules selecting overlapping subsets"""
    records = [make_record(age) for age in (1, 20, 40, 60)]
    policy = RetentionPolicy(max_count=3, max_age=timedelta(days=30))

    plan = evaluate_retention(records, policy, now)

    assert_equal(_kept_ages(plan, now), [1, 20])
    reasons_by_age = dict(zip(_deleted_ages(plan, now), [d.reasons for d in plan.delete]))
    assert_equal(reasons_by_age, {40: frozenset({AGE}), 60: frozenset({COUNT, AGE})})


def test_evaluate_retention_or_semantics_identical_rules(make_record, now):
    """Test rules selecting the same subset"""
    records = [make_record(age) for age in (1, 2, 90, 91)]
    policy = RetentionPolicy(max_count=2, max_age=timedelta(days=30))

    plan = evaluate_retention(records, policy, now)

    assert_equal(_deleted_ages(plan, now), [90, 91])
    assert all(decision.reasons == frozenset({COUNT, AGE}) for decision in plan.delete)


def test_evaluate_retention_does_not_mutate_input(make_record, now):
    """Test that the caller's list keeps its order"""
    records = [make_record(age) for age in (5, 1, 9)]
    original = list(records)

    evaluate_retention(records, RetentionPolicy(max_count=1), now)

    assert_equal(records, original)


def test_evaluate_retention_is_stable_for_equal_timestamps(now):
    """Test that ties keep their listing order"""
    stamp = now - timedelta(days=1)
    records = [BackupRecord(key=f"backup-{idx}", timestamp=stamp) for idx in range(4)]

    plan = evaluate_retention(records, RetentionPolicy(max_count=2), now)

    assert_equal([record.key for record in plan.keep], ["backup-0", "backup-1"])
    assert_equal([d.record.key for d in plan.delete], ["backup-2", "backup-3"])


def test_evaluate_retention_disabled_policy_keeps_everything(make_record, now):
    """Test that no bounds means no deletions"""
    records = [make_record(age) for age in (1, 1000)]

    plan = evaluate_retention(records, RetentionPolicy(), now)

    assert_equal(len(plan.keep), 2)
    assert_equal(plan.delete, [])


def test_evaluate_retention_requires_aware_now(make_record):
    """Test that a naive reference instant is rejected"""
    with pytest.raises(ValueError):
        evaluate_retention([make_record(1)], RetentionPolicy(max_count=1), datetime(2024, 1, 1))


def test_sort_newest_first(make_record):
    """Test newest-first ordering"""
    records = [make_record(age) for age in (3, 1, 2)]

    ordered = sort_newest_first(records)

    assert_equal(ordered, [records[1], records[2], records[0]])


def test_retention_policy_enabled_flags():
    """Test the enabled property"""
    assert RetentionPolicy().enabled is False
    assert RetentionPolicy(max_count=1).enabled is True
    assert RetentionPolicy.from_days(max_age_days=7).enabled is True
    assert_equal(RetentionPolicy.from_days(max_age_days=7).max_age_days, 7)


def test_retention_policy_rejects_negative_bounds():
    """Test validation of negative bounds"""
    with pytest.raises(ValueError):
        RetentionPolicy(max_count=-1)
    with pytest.raises(ValueError):
        RetentionPolicy(max_age=timedelta(days=-1))
