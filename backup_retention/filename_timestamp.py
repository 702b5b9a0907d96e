"""
Backup filename timestamp encoding.

Backup archives are named ``{prefix}-YYYY-MM-DDTHH-MM-SS-mmmZ.zip``: an ISO-8601
UTC timestamp with the colons and the fractional-second dot replaced by dashes,
since colons are unsafe in many object keys and filenames.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

ARCHIVE_SUFFIX = ".zip"

_DATE_WIDTHS = (4, 2, 2)
_TIME_WIDTHS = (2, 2, 2, 3)
# YYYY-MM-DD + T + HH-MM-SS-mmm + Z
_STAMP_LENGTH = 10 + 1 + 12 + 1


def _split_fields(text: str, widths: tuple[int, ...]) -> Optional[list[int]]:
    """Split dash-separated digit groups, requiring each to have the exact width."""
    parts = text.split("-")
    if len(parts) != len(widths):
        return None
    values = []
    for part, width in zip(parts, widths):
        if len(part) != width or not (part.isascii() and part.isdigit()):
            return None
        values.append(int(part))
    return values


def _decode_stamp(stamp: str) -> Optional[tuple[list[int], list[int]]]:
    """Return (date_fields, time_fields) for a dashed stamp, or None."""
    if len(stamp) != _STAMP_LENGTH or not stamp.endswith("Z"):
        return None
    date_text, separator, time_text = stamp[:-1].partition("T")
    if not separator:
        return None
    date_fields = _split_fields(date_text, _DATE_WIDTHS)
    time_fields = _split_fields(time_text, _TIME_WIDTHS)
    if date_fields is None or time_fields is None:
        return None
    return date_fields, time_fields


def extract_stamp(filename: str, prefix: str) -> Optional[str]:
    """Return the timestamp portion of ``filename`` when it has the literal prefix and suffix."""
    head = f"{prefix}-"
    if not filename.startswith(head) or not filename.endswith(ARCHIVE_SUFFIX):
        return None
    return filename[len(head) : len(filename) - len(ARCHIVE_SUFFIX)]


def to_iso_timestamp(stamp: str) -> Optional[str]:
    """
    Convert a dashed stamp back into ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    The two date dashes are kept, the next two become colons and the last one
    becomes the fractional-second dot.

    Args:
        stamp: Encoded timestamp, e.g. ``2024-01-15T10-30-45-123Z``

    Returns:
        The standard representation, or None if the stamp is not structurally valid
    """
    decoded = _decode_stamp(stamp)
    if decoded is None:
        return None
    (year, month, day), (hour, minute, second, millis) = decoded
    return f"{year:04d}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:{second:02d}.{millis:03d}Z"


def parse_backup_timestamp(filename: str, prefix: str) -> Optional[datetime]:
    """
    Recover the creation time encoded in a backup filename.

    Malformed names are an expected case (unrelated files share the bucket), so
    this never raises for bad input.

    Args:
        filename: Final path segment of the object key
        prefix: Configured backup file prefix, matched literally

    Returns:
        A UTC-aware datetime, or None when the name does not match or the
        encoded date is not a real calendar instant
    """
    stamp = extract_stamp(filename, prefix)
    if stamp is None:
        return None
    decoded = _decode_stamp(stamp)
    if decoded is None:
        return None
    (year, month, day), (hour, minute, second, millis) = decoded
    try:
        return datetime(year, month, day, hour, minute, second, millis * 1000, tzinfo=timezone.utc)
    except ValueError:
        return None


def format_backup_filename(prefix: str, when: datetime) -> str:
    """Build the archive filename for a backup created at ``when`` (must be timezone-aware)."""
    if when.tzinfo is None:
        raise ValueError("Backup timestamps must be timezone-aware")
    when = when.astimezone(timezone.utc)
    millis = when.microsecond // 1000
    stamp = f"{when.year:04d}-{when.month:02d}-{when.day:02d}T" f"{when.hour:02d}-{when.minute:02d}-{when.second:02d}-{millis:03d}Z"
    return f"{prefix}-{stamp}{ARCHIVE_SUFFIX}"


__all__ = [
    "ARCHIVE_SUFFIX",
    "extract_stamp",
    "format_backup_filename",
    "parse_backup_timestamp",
    "to_iso_timestamp",
]
