from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional

from ..core.constants import SLOT_MINUTES

DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def split_window(start: time, end: time, *, minutes: int = SLOT_MINUTES) -> list[tuple[time, time]]:
    """Cut ``[start, end)`` into consecutive slots; a trailing partial slot is dropped."""
    anchor = date(2000, 1, 1)
    cursor = datetime.combine(anchor, start)
    stop = datetime.combine(anchor, end)
    step = timedelta(minutes=minutes)

    out: list[tuple[time, time]] = []
    while cursor + step <= stop:
        out.append((cursor.time(), (cursor + step).time()))
        cursor += step
    return out


def week_bounds(week_start: Optional[date], today: date) -> tuple[date, date]:
    """Monday..Sunday of the current week, or seven days from an explicit start."""
    start = week_start or (today - timedelta(days=today.weekday()))
    return start, start + timedelta(days=6)
