"""S3 client construction for the configured backup bucket."""

from __future__ import annotations

from typing import TYPE_CHECKING

import boto3
from botocore.config import Config

if TYPE_CHECKING:
    from .config import CleanupConfig


def build_client_config(force_path_style: bool) -> Config:
    """Return botocore settings; path-style addressing is needed by most S3-compatible servers."""
    if force_path_style:
        return Config(s3={"addressing_style": "path"})
    return Config()


def create_s3_client(config: "CleanupConfig"):
    """
    Create a boto3 S3 client for the backup bucket.

    Credentials come from the standard boto3 chain (environment, shared
    credentials file, instance role).

    Args:
        config: Cleanup configuration providing region, endpoint and addressing style

    Returns:
        boto3 S3 client
    """
    kwargs = {
        "region_name": config.region,
        "config": build_client_config(config.force_path_style),
    }
    if config.endpoint:
        kwargs["endpoint_url"] = config.endpoint
    return boto3.client("s3", **kwargs)


__all__ = ["build_client_config", "create_s3_client"]
