"""Pytest configuration and shared fixtures for backup retention tests."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest import mock

PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest
from botocore.exceptions import ClientError

from backup_retention.config import CleanupConfig
from backup_retention.filename_timestamp import format_backup_filename
from backup_retention.policy import BackupRecord, RetentionPolicy

FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)

_ENV_VARIABLES = (
    "AWS_S3_BUCKET",
    "AWS_S3_REGION",
    "AWS_S3_ENDPOINT",
    "AWS_S3_FORCE_PATH_STYLE",
    "BACKUP_FILE_PREFIX",
    "BUCKET_SUBFOLDER",
    "MAX_BACKUP_COUNT",
    "MAX_BACKUP_AGE_DAYS",
)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep host configuration and any ./.env file out of the tests."""
    for name in _ENV_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(name="now")
def fixture_now():
    """Fixed reference instant for age calculations."""
    return FIXED_NOW


@pytest.fixture
def s3_mock():
    """Create mock S3 client"""
    return mock.Mock()


@pytest.fixture
def make_record():
    """Factory for BackupRecords aged a number of days before FIXED_NOW."""

    def _make_record(age_days: float, prefix: str = "backup", folder: str = "") -> BackupRecord:
        timestamp = FIXED_NOW - timedelta(days=age_days)
        key = folder + format_backup_filename(prefix, timestamp)
        return BackupRecord(key=key, timestamp=timestamp)

    return _make_record


@pytest.fixture
def backup_key():
    """Factory for backup object keys created a number of days before FIXED_NOW."""

    def _backup_key(age_days: float, prefix: str = "backup", folder: str = "") -> str:
        return folder + format_backup_filename(prefix, FIXED_NOW - timedelta(days=age_days))

    return _backup_key


@pytest.fixture
def s3_paginator_response():
    """Factory for creating S3 paginator responses with given keys."""

    def _create_response(*keys):
        return [{"Contents": [{"Key": key, "Size": 1024} for key in keys], "KeyCount": len(keys)}]

    return _create_response


@pytest.fixture
def make_config():
    """Factory for CleanupConfig with retention bounds."""

    def _make_config(max_count=None, max_age_days=None, **overrides):
        values = {
            "bucket": "backup-bucket",
            "region": "us-east-1",
            "prefix": "backup",
            "policy": RetentionPolicy.from_days(max_count=max_count, max_age_days=max_age_days),
        }
        values.update(overrides)
        return CleanupConfig(**values)

    return _make_config


@pytest.fixture
def client_error():
    """Factory for botocore ClientError instances."""

    def _client_error(code: str = "AccessDenied", operation: str = "DeleteObject") -> ClientError:
        return ClientError({"Error": {"Code": code, "Message": f"{code} error"}}, operation)

    return _client_error
