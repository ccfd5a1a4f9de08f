"""Two-week reporting periods.

A reporting period is a fixed 14-day window that starts at local midnight of
an anchor weekday (Thursday) in the portal's civil time zone. Every period is
identified by an integer key; ``period_key`` is the single function that maps
an instant to that key and every caller (hour logs, the admin report, the
dashboards) goes through it.

Inputs are normalized to epoch milliseconds first. Naive datetimes and
offset-less strings are read as UTC, and anything unparseable falls back to
"now".
"""
from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import DEFAULT_ANCHOR_WEEKDAY, DEFAULT_TIMEZONE, PERIOD_DAYS, PERIOD_MS
from ..core.logger import get_logger

logger = get_logger(__name__)

DAY_MS = 24 * 60 * 60 * 1000
HOUR_MS = 60 * 60 * 1000

# Standard-time offset of the default zone, used when nothing better is known
FALLBACK_OFFSET_MS = -6 * HOUR_MS
ABBREVIATION_OFFSETS_MS = {
    "CDT": -5 * HOUR_MS,
    "CST": -6 * HOUR_MS,
}

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
# Representable by datetime with a day of margin for zone conversion
_MIN_MS = (datetime(1, 1, 2, tzinfo=timezone.utc) - _EPOCH) // timedelta(milliseconds=1)
_MAX_MS = (datetime(9999, 12, 30, tzinfo=timezone.utc) - _EPOCH) // timedelta(milliseconds=1)
_OFFSET_LABEL = re.compile(r"(?:GMT|UTC)\s*(?:([+-])\s*(\d{1,2})(?::?(\d{2}))?)?$", re.IGNORECASE)

Instant = Union[None, int, float, str, date, datetime]


def parse_offset_label(label: Optional[str]) -> int:
    """Turn a zone label such as ``GMT-5``, ``UTC-06:00`` or ``CDT`` into an offset in ms."""
    text = (label or "").strip()
    m = _OFFSET_LABEL.search(text)
    if m:
        if not m.group(1):
            return 0
        sign = -1 if m.group(1) == "-" else 1
        hours = int(m.group(2))
        minutes = int(m.group(3) or 0)
        return sign * (hours * 60 + minutes) * 60 * 1000

    upper = text.upper()
    for abbrev, offset in ABBREVIATION_OFFSETS_MS.items():
        if abbrev in upper:
            return offset
    return FALLBACK_OFFSET_MS


def get_zone(tz: Union[str, tzinfo, None] = None) -> tzinfo:
    if isinstance(tz, tzinfo):
        return tz
    name = tz or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Time zone {} not available, using fixed UTC-6", name)
        return timezone(timedelta(milliseconds=FALLBACK_OFFSET_MS), "CST")


def now_ms() -> int:
    return to_epoch_ms(datetime.now(timezone.utc))


def from_epoch_ms(ms: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=int(ms))


def to_epoch_ms(value: Instant, *, now: Optional[int] = None) -> int:
    """Normalize an instant to epoch milliseconds, defaulting to now when invalid."""

    if isinstance(value, datetime):
        dt = value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
        return (dt - _EPOCH) // timedelta(milliseconds=1)

    if isinstance(value, date):
        return (value - _EPOCH.date()).days * DAY_MS

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if math.isfinite(value) and _MIN_MS <= value <= _MAX_MS:
            return math.floor(value)
        logger.debug("Out of range instant {!r}, using now", value)

    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return to_epoch_ms(datetime.fromisoformat(text))
        except ValueError:
            logger.debug("Unparseable instant {!r}, using now", value)

    return now if now is not None else now_ms()


def _offset_ms(local: datetime) -> int:
    offset = local.utcoffset()
    if offset is not None:
        return offset // timedelta(milliseconds=1)
    return parse_offset_label(local.tzname())


def local_midnight_utc_ms(day: date, zone: tzinfo) -> int:
    """UTC ms of 00:00 local time on ``day``.

    The zone offset is taken at noon UTC of the civil date, which keeps the
    lookup away from the overnight DST transitions.
    """
    civil_ms = (day - _EPOCH.date()).days * DAY_MS
    noon = from_epoch_ms(civil_ms + 12 * HOUR_MS).astimezone(zone)
    return civil_ms - _offset_ms(noon)


def _anchor_date(day: date, anchor_weekday: int) -> date:
    return day - timedelta(days=(day.weekday() - anchor_weekday) % 7)


def _key_for_civil_date(day: date, zone: tzinfo, anchor_weekday: int) -> int:
    anchor = _anchor_date(day, anchor_weekday)
    days_since_anchor = (day - anchor).days
    anchor_ms = local_midnight_utc_ms(day, zone) - days_since_anchor * DAY_MS
    return anchor_ms // PERIOD_MS


def period_key(
    value: Instant = None,
    *,
    tz: Union[str, tzinfo, None] = None,
    anchor_weekday: int = DEFAULT_ANCHOR_WEEKDAY,
    now: Optional[int] = None,
) -> int:
    """Return the reporting-period key of an instant."""
    zone = get_zone(tz)
    ms = to_epoch_ms(value, now=now)
    local_day = from_epoch_ms(ms).astimezone(zone).date()
    return _key_for_civil_date(local_day, zone, anchor_weekday)


def period_start(
    key: int,
    *,
    tz: Union[str, tzinfo, None] = None,
    anchor_weekday: int = DEFAULT_ANCHOR_WEEKDAY,
) -> datetime:
    """Local midnight (aware, in the portal zone) of the first day of period ``key``."""
    zone = get_zone(tz)
    base = _EPOCH.date() + timedelta(days=int(key) * PERIOD_DAYS)
    for shift in range(-7, PERIOD_DAYS + 7):
        day = base + timedelta(days=shift)
        if day.weekday() != anchor_weekday:
            continue
        if _key_for_civil_date(day, zone, anchor_weekday) == key:
            return from_epoch_ms(local_midnight_utc_ms(day, zone)).astimezone(zone)
    raise ValueError(f"No anchor day found for period {key}")


def period_bounds(
    key: int,
    *,
    tz: Union[str, tzinfo, None] = None,
    anchor_weekday: int = DEFAULT_ANCHOR_WEEKDAY,
) -> Tuple[datetime, datetime]:
    """Half-open ``[start, end)`` window of period ``key``.

    ``end`` is the next period's start, so a DST change inside the window is
    absorbed here instead of assuming exactly 14 * 24 hours.
    """
    start = period_start(key, tz=tz, anchor_weekday=anchor_weekday)
    end = period_start(key + 1, tz=tz, anchor_weekday=anchor_weekday)
    return start, end


def _fmt_day(d: date) -> str:
    return f"{d:%b} {d.day}, {d.year}"


def format_period(
    key: int,
    *,
    tz: Union[str, tzinfo, None] = None,
    anchor_weekday: int = DEFAULT_ANCHOR_WEEKDAY,
) -> str:
    """Human label, e.g. ``Jan 2, 2025 - Jan 15, 2025``."""
    start, end = period_bounds(key, tz=tz, anchor_weekday=anchor_weekday)
    last_day = end.date() - timedelta(days=1)
    return f"{_fmt_day(start.date())} - {_fmt_day(last_day)}"
