from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cur)`` for one unit of work.

    Statements run on the cursor are committed when the block finishes and
    rolled back if it raises. Cursor and connection are always released.
    """
    conn = conn_factory.connect()
    cur = conn.cursor(dictionary=dictionary)
    try:
        yield conn, cur
    except Exception:
        conn.rollback()
        raise
    else:
        conn.commit()
    finally:
        cur.close()
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    # The C and pure connectors disagree: TIME arrives as timedelta, time or str.
    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, seconds % 3600 // 60, seconds % 60)
    if isinstance(value, str):
        hh, sep, rest = value.strip().partition(":")
        if not sep:
            raise ValueError(f"Invalid time string: {value!r}")
        mm, _, ss = rest.partition(":")
        return time(int(hh), int(mm), int(float(ss)) if ss else 0)
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def normalize_mysql_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise TypeError(f"Unsupported MySQL DATE value type: {type(value)!r}")


def as_bool(value: Any) -> bool:
    # TINYINT(1)
    return value is not None and bool(int(value))
