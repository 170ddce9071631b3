from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """Render a document timestamp as "YYYY-MM-DDTHH:MM:SSZ" (naive means UTC)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def parse_utc_z(value: str) -> Optional[datetime]:
    """
    Inverse of to_utc_z. Returns None for strings that are not "...Z" timestamps,
    so free-text fields such as stall names pass through untouched.
    """
    if not value.endswith("Z") or "T" not in value:
        return None
    try:
        dt = datetime.fromisoformat(value[:-1] + "+00:00")
    except ValueError:
        return None
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def to_json_safe(value: Any) -> Any:
    """Recursively convert datetimes inside document data to "...Z" strings."""
    if isinstance(value, datetime):
        return to_utc_z(value)
    if isinstance(value, dict):
        return {k: to_json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_safe(v) for v in value]
    return value


def from_json_safe(value: Any) -> Any:
    """Recursively turn "...Z" strings in JSON document data back into datetimes."""
    if isinstance(value, dict):
        return {k: from_json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_json_safe(v) for v in value]
    if isinstance(value, str):
        parsed = parse_utc_z(value)
        return value if parsed is None else parsed
    return value
