"""UTC timestamp helpers shared by the response envelope and DTOs."""
from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utc_isoformat(value: datetime) -> str:
    """ISO8601 in UTC with a `Z` suffix; naive datetimes are taken as UTC."""
    ts = value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)
    return ts.isoformat().replace("+00:00", "Z")
