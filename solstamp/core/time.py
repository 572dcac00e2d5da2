"""solstamp.core.time

Block times are Unix seconds. This module is the only place they become datetimes.
"""

from __future__ import annotations

from datetime import UTC, datetime


def from_unix(ts: int) -> datetime:
    """Return an aware UTC datetime for a Unix timestamp in seconds."""

    return datetime.fromtimestamp(int(ts), tz=UTC)


def format_unix(ts: int) -> str:
    """ISO-8601 with a `Z` suffix, e.g. ``2025-04-09T20:13:40Z``."""

    return from_unix(ts).isoformat().replace("+00:00", "Z")
