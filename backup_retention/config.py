"""
Cleanup configuration loaded from the environment.

Values come from process environment variables, optionally seeded from a
``.env`` file. Environment variables already set take precedence over the file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

from .policy import RetentionPolicy

DEFAULT_BACKUP_FILE_PREFIX = "backup"
DEFAULT_ENV_FILE = ".env"

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


class ConfigError(ValueError):
    """Raised when a configuration variable is missing or malformed."""


@dataclass(frozen=True)
class CleanupConfig:
    """Storage identity, backup scope and retention bounds for one cleanup run."""

    bucket: str
    region: str
    endpoint: Optional[str] = None
    force_path_style: bool = False
    prefix: str = DEFAULT_BACKUP_FILE_PREFIX
    subfolder: Optional[str] = None
    policy: RetentionPolicy = field(default_factory=RetentionPolicy)


def _optional(env: Mapping[str, str], name: str) -> Optional[str]:
    if name not in env:
        return None
    value = env[name].strip()
    if not value:
        return None
    return value


def _required(env: Mapping[str, str], name: str) -> str:
    value = _optional(env, name)
    if value is None:
        raise ConfigError(f"{name} is required")
    return value


def _positive_int(env: Mapping[str, str], name: str) -> Optional[int]:
    value = _optional(env, name)
    if value is None:
        return None
    try:
        number = int(value)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}") from exc
    if number <= 0:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")
    return number


def _flag(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    value = _optional(env, name)
    if value is None:
        return default
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean (true/false), got {value!r}")


def read_environment(env_file: Optional[Path] = None) -> dict[str, str]:
    """
    Merge a .env file under the current process environment.

    The default ``.env`` in the working directory is optional. An explicitly
    named ``env_file`` must exist.

    Raises:
        ConfigError: If ``env_file`` is given but is not a file
    """
    if env_file is not None:
        path = Path(env_file)
        if not path.is_file():
            raise ConfigError(f"Env file not found: {path}")
    else:
        path = Path(DEFAULT_ENV_FILE)
    merged: dict[str, str] = {}
    if path.is_file():
        for name, value in dotenv_values(path).items():
            if value is not None:
                merged[name] = value
    merged.update(os.environ)
    return merged


def load_config(env: Optional[Mapping[str, str]] = None, env_file: Optional[Path] = None) -> CleanupConfig:
    """
    Build a CleanupConfig from environment variables.

    Args:
        env: Variables to read; defaults to the process environment merged over ``env_file``
        env_file: Optional .env path used when ``env`` is not given

    Returns:
        CleanupConfig

    Raises:
        ConfigError: If a required variable is missing or a value is malformed
    """
    if env is None:
        env = read_environment(env_file)

    prefix = _optional(env, "BACKUP_FILE_PREFIX")
    if prefix is None:
        prefix = DEFAULT_BACKUP_FILE_PREFIX

    policy = RetentionPolicy.from_days(
        max_count=_positive_int(env, "MAX_BACKUP_COUNT"),
        max_age_days=_positive_int(env, "MAX_BACKUP_AGE_DAYS"),
    )

    return CleanupConfig(
        bucket=_required(env, "AWS_S3_BUCKET"),
        region=_required(env, "AWS_S3_REGION"),
        endpoint=_optional(env, "AWS_S3_ENDPOINT"),
        force_path_style=_flag(env, "AWS_S3_FORCE_PATH_STYLE"),
        prefix=prefix,
        subfolder=_optional(env, "BUCKET_SUBFOLDER"),
        policy=policy,
    )


__all__ = [
    "CleanupConfig",
    "ConfigError",
    "DEFAULT_BACKUP_FILE_PREFIX",
    "load_config",
    "read_environment",
]
