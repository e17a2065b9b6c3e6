"""UTC timestamp helpers."""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return a timezone aware UTC timestamp."""

    return datetime.now(timezone.utc)


def now_iso() -> str:
    """Current instant as an ISO 8601 string with millisecond precision and ``Z`` suffix."""

    return utcnow().isoformat(timespec="milliseconds").replace("+00:00", "Z")
