from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime.

    Returns:
        datetime: timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """ISO-8601 string of `utc_now()`, the format stored in documents."""
    return utc_now().isoformat()


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 timestamp into UTC. Naive values are treated as UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
