from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import Event, NewEvent
from .repository import EventRepository

_COLUMNS = "id, created_by, title, description, location, start_time, end_time, is_all_day, event_type, color, created_at"

# Columns a partial update may touch
UPDATABLE_COLUMNS = ("title", "description", "start_time", "end_time", "location", "is_all_day", "event_type", "color")


def _row_to_event(r: dict) -> Event:
    return Event(
        id=int(r["id"]),
        created_by=str(r["created_by"]),
        title=r["title"],
        description=r.get("description"),
        location=r.get("location"),
        start_time=r["start_time"],
        end_time=r.get("end_time"),
        is_all_day=as_bool(r.get("is_all_day")),
        event_type=r.get("event_type"),
        color=r.get("color") or "",
        created_at=r.get("created_at"),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, event: NewEvent) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO Events(created_by, title, description, location, start_time, end_time,
                                   is_all_day, event_type, color)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    event.created_by,
                    event.title,
                    event.description,
                    event.location,
                    event.start_time,
                    event.end_time,
                    int(event.is_all_day),
                    event.event_type,
                    event.color,
                ),
            )
            return int(cur.lastrowid)

    def get(self, event_id: int) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM Events WHERE id=%s", (int(event_id),))
            r = fetchone(cur)
            return _row_to_event(r) if r else None

    def list_between(self, *, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Sequence[Event]:
        clauses = ["1=1"]
        params: list[object] = []
        if start is not None:
            clauses.append("start_time >= %s")
            params.append(start)
        if end is not None:
            clauses.append("start_time <= %s")
            params.append(end)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM Events WHERE {where} ORDER BY start_time ASC", tuple(params))
            return [_row_to_event(r) for r in fetchall(cur)]

    def update_fields(self, event_id: int, fields: dict[str, Any]) -> bool:
        unknown = set(fields) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Unsupported event columns: {sorted(unknown)}")
        if not fields:
            return False

        assignments = ", ".join(f"{col}=%s" for col in fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE Events SET {assignments} WHERE id=%s",
                tuple(fields.values()) + (int(event_id),),
            )
            return cur.rowcount > 0

    def delete(self, event_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM Events WHERE id=%s", (int(event_id),))
            return cur.rowcount > 0
