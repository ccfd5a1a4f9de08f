from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str, field_name: str = "date") -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid {field_name} (expected YYYY-MM-DD)")


def parse_clock(value: str, field_name: str = "time") -> time:
    """Parse ``HH:MM`` (24h), ``HH:MM:SS`` or ``h:MM AM``/``PM`` into a time."""
    text = (value or "").strip().upper()
    for fmt in ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"Invalid {field_name} (expected HH:MM)")


def parse_datetime(value: str, field_name: str = "datetime") -> datetime:
    """Parse an ISO datetime string; aware values are converted to naive UTC."""
    text = (value or "").strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}")
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def format_clock_12h(t: time) -> str:
    """``9:00 AM`` style label."""
    hour = t.hour % 12 or 12
    suffix = "AM" if t.hour < 12 else "PM"
    return f"{hour}:{t.minute:02d} {suffix}"


def utc_now() -> datetime:
    """Current UTC time as a naive datetime (how DATETIME columns are stored).

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso_utc(dt: Optional[datetime]) -> Optional[str]:
    """Naive-UTC datetime to ``2025-01-02T15:00:00.000Z``."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"
