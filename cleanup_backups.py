#!/usr/bin/env python3
"""
Delete backup archives from S3 that exceed the retention policy.

Reads AWS_S3_BUCKET, AWS_S3_REGION, BACKUP_FILE_PREFIX, BUCKET_SUBFOLDER,
MAX_BACKUP_COUNT and MAX_BACKUP_AGE_DAYS from the environment or a .env file.

This is a thin wrapper around the backup_retention package.
"""
from __future__ import annotations

from backup_retention.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
