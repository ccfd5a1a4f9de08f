from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PortalUser
from .repository import UserRepository


def _row_to_user(r: dict) -> PortalUser:
    return PortalUser(
        id=str(r["id"]),
        username=r["username"],
        role=r.get("role"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, user_id: str) -> Optional[PortalUser]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, username, role, created_at, updated_at FROM Users WHERE id=%s",
                (str(user_id),),
            )
            r = fetchone(cur)
            return _row_to_user(r) if r else None

    def list_all(self) -> Sequence[PortalUser]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, username, role, created_at, updated_at FROM Users ORDER BY username")
            return [_row_to_user(r) for r in fetchall(cur)]

    def list_by_role(self, role: str, *, limit: Optional[int] = None) -> Sequence[PortalUser]:
        sql = "SELECT id, username, role, created_at, updated_at FROM Users WHERE role=%s ORDER BY created_at"
        params: list[object] = [role]
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_user(r) for r in fetchall(cur)]

    def insert(self, *, user_id: str, username: str, role: Optional[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO Users(id, username, role, created_at, updated_at)
                VALUES(%s,%s,%s,CURRENT_TIMESTAMP,CURRENT_TIMESTAMP)
                """,
                (str(user_id), username, role),
            )

    def update_role(self, *, user_id: str, role: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE Users SET role=%s, updated_at=CURRENT_TIMESTAMP WHERE id=%s",
                (role, str(user_id)),
            )
            if cur.rowcount > 0:
                return True
            # rowcount is 0 when the role was already equal; tell that apart from a missing row
            cur.execute("SELECT 1 AS found FROM Users WHERE id=%s", (str(user_id),))
            return fetchone(cur) is not None

    def delete(self, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM Users WHERE id=%s", (str(user_id),))
            return cur.rowcount > 0

    def count_by_role(self) -> dict[str, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COALESCE(role, 'none') AS role, COUNT(*) AS total FROM Users GROUP BY role")
            return {r["role"]: int(r["total"]) for r in fetchall(cur)}
