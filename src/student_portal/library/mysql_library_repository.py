from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LibraryInput, LibraryItem, LibraryKind
from .repository import LibraryRepository

_TABLES = {
    LibraryKind.ARCHIVE: "Archives",
    LibraryKind.RESOURCE: "Resources",
}


def _select(kind: LibraryKind) -> str:
    extra = ", t.archive_type" if kind is LibraryKind.ARCHIVE else ""
    return f"""
        SELECT t.id, t.created_by, t.title, t.description, t.link, t.image_url{extra},
               t.created_at, t.updated_at, u.username AS creator_username
        FROM {_TABLES[kind]} t
        LEFT JOIN Users u ON u.id = t.created_by
    """


def _row_to_item(kind: LibraryKind, r: dict) -> LibraryItem:
    return LibraryItem(
        id=int(r["id"]),
        kind=kind,
        created_by=str(r["created_by"]),
        title=r["title"],
        description=r.get("description"),
        link=r["link"],
        image_url=r.get("image_url"),
        archive_type=r.get("archive_type"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        creator_username=r.get("creator_username"),
    )


class MySQLLibraryRepository(LibraryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, kind: LibraryKind, *, created_by: str, item: LibraryInput) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if kind is LibraryKind.ARCHIVE:
                cur.execute(
                    """
                    INSERT INTO Archives(created_by, title, description, link, image_url, archive_type)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (created_by, item.title, item.description, item.link, item.image_url, item.archive_type),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO Resources(created_by, title, description, link, image_url)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (created_by, item.title, item.description, item.link, item.image_url),
                )
            return int(cur.lastrowid)

    def get(self, kind: LibraryKind, item_id: int) -> Optional[LibraryItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_select(kind) + " WHERE t.id=%s", (int(item_id),))
            r = fetchone(cur)
            return _row_to_item(kind, r) if r else None

    def list(self, kind: LibraryKind, *, archive_type: Optional[str] = None) -> Sequence[LibraryItem]:
        sql = _select(kind)
        params: tuple = ()
        if kind is LibraryKind.ARCHIVE and archive_type:
            sql += " WHERE t.archive_type=%s"
            params = (archive_type,)
        sql += " ORDER BY t.created_at DESC, t.id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_row_to_item(kind, r) for r in fetchall(cur)]

    def update(self, kind: LibraryKind, item_id: int, item: LibraryInput) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if kind is LibraryKind.ARCHIVE:
                cur.execute(
                    """
                    UPDATE Archives
                    SET title=%s, description=%s, link=%s, image_url=%s, archive_type=%s,
                        updated_at=CURRENT_TIMESTAMP
                    WHERE id=%s
                    """,
                    (item.title, item.description, item.link, item.image_url, item.archive_type, int(item_id)),
                )
            else:
                cur.execute(
                    """
                    UPDATE Resources
                    SET title=%s, description=%s, link=%s, image_url=%s, updated_at=CURRENT_TIMESTAMP
                    WHERE id=%s
                    """,
                    (item.title, item.description, item.link, item.image_url, int(item_id)),
                )
            return cur.rowcount > 0

    def delete(self, kind: LibraryKind, item_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM {_TABLES[kind]} WHERE id=%s", (int(item_id),))
            return cur.rowcount > 0

    def clear_all(self) -> tuple[int, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM Archives")
            archives = int(cur.rowcount)
            cur.execute("DELETE FROM Resources")
            resources = int(cur.rowcount)
            return archives, resources
