"""General utility functions."""
import uuid
from datetime import datetime, timezone
from typing import Optional


def new_record_id() -> str:
    """Generate a roster identifier for a QR badge (uuid4, never reused)."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC timezone."""
    if dt.tzinfo is None:
        # Assume UTC if no timezone
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_utc_or_none(dt: Optional[datetime]) -> Optional[datetime]:
    return to_utc(dt) if dt is not None else None


def isoformat_utc(dt: Optional[datetime]) -> str:
    """Render a timestamp the way the scanner app expects (``...Z``), or ''."""
    if dt is None:
        return ""
    return to_utc(dt).isoformat().replace("+00:00", "Z")
