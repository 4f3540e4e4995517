"""Output file naming."""

from __future__ import annotations

import re
from datetime import UTC, datetime

# Characters rejected by common filesystems
_INVALID_CHARS = re.compile(r'[/\\:*?"<>|]')
_TIMESTAMP_SEPARATORS = re.compile(r"[:.]")


def sanitize_file_name(name: str) -> str:
    """Strip characters that are invalid in file names."""
    return _INVALID_CHARS.sub("", name)


def file_timestamp(timestamp: datetime) -> str:
    """ISO 8601 UTC timestamp (millisecond precision) safe for file names."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    iso = timestamp.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return _TIMESTAMP_SEPARATORS.sub("-", iso)


def generate_file_name(
    zone_name: str,
    timestamp: datetime | None = None,
    prefix: str = "cloudflare-analytics",
    extension: str = "pdf",
) -> str:
    """Build ``{prefix}-{zone}-{timestamp}.{ext}``.

    Example:
        cloudflare-analytics-example.com-2026-01-05T10-30-00-000Z.pdf
    """
    stamp = file_timestamp(timestamp or datetime.now(UTC))
    return f"{prefix}-{sanitize_file_name(zone_name)}-{stamp}.{extension.lstrip('.')}"
