from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import HourRow, Span
from .repository import HourRepository


def _row_to_hour(r: dict) -> HourRow:
    return HourRow(
        id=int(r["id"]),
        user_id=str(r["user_id"]),
        activity=r.get("activity") or "",
        comments=r.get("comments"),
        start_time=r["start_time"],
        end_time=r["end_time"],
        created_at=r["created_at"],
        username=r.get("username"),
    )


class MySQLHourRepository(HourRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert_many(
        self,
        *,
        user_id: str,
        activity: str,
        comments: str,
        created_at: datetime,
        spans: Sequence[Span],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO Hours(user_id, activity, comments, start_time, end_time, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                [(user_id, activity, comments, s.start_time, s.end_time, created_at) for s in spans],
            )
            return len(spans)

    def list_for_user(self, user_id: str) -> Sequence[HourRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, activity, comments, start_time, end_time, created_at
                FROM Hours
                WHERE user_id=%s
                ORDER BY created_at DESC, start_time ASC
                """,
                (user_id,),
            )
            return [_row_to_hour(r) for r in fetchall(cur)]

    def list_all(self, *, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Sequence[HourRow]:
        clauses = []
        params: list[object] = []
        if start is not None:
            clauses.append("h.start_time >= %s")
            params.append(start)
        if end is not None:
            clauses.append("h.start_time < %s")
            params.append(end)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT h.id, h.user_id, h.activity, h.comments, h.start_time, h.end_time, h.created_at,
                       u.username
                FROM Hours h
                LEFT JOIN Users u ON u.id = h.user_id
                {where}
                ORDER BY h.start_time ASC, h.id ASC
                """,
                tuple(params),
            )
            return [_row_to_hour(r) for r in fetchall(cur)]

    def delete_submission(self, *, user_id: str, created_from: datetime, created_to: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM Hours WHERE user_id=%s AND created_at BETWEEN %s AND %s",
                (user_id, created_from, created_to),
            )
            return max(cur.rowcount, 0)
