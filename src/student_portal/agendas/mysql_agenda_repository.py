from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import Agenda, AgendaOption, Ballot, OptionCount
from .repository import AgendaRepository


def _row_to_option(r: dict) -> AgendaOption:
    return AgendaOption(id=int(r["id"]), agenda_id=int(r["agenda_id"]), option_text=r["option_text"])


def _row_to_agenda(r: dict, options: Sequence[AgendaOption] = ()) -> Agenda:
    return Agenda(
        id=int(r["id"]),
        speaker_id=str(r["speaker_id"]),
        title=r["title"],
        description=r.get("description"),
        is_visible=as_bool(r.get("is_visible")),
        is_open=as_bool(r.get("is_open")),
        created_at=r.get("created_at"),
        options=tuple(options),
    )


def _row_to_ballot(r: dict) -> Ballot:
    return Ballot(
        voter_id=str(r["voter_id"]),
        voter_name=r.get("voter_name"),
        option_id=int(r["option_id"]),
        option_text=r.get("option_text") or "",
    )


class MySQLAgendaRepository(AgendaRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, speaker_id: str, title: str, description: str, options: Sequence[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO Agendas(speaker_id, title, description, is_visible, is_open, created_at)
                VALUES(%s,%s,%s,1,1,CURRENT_TIMESTAMP)
                """,
                (speaker_id, title, description),
            )
            agenda_id = int(cur.lastrowid)
            cur.executemany(
                "INSERT INTO Options(agenda_id, option_text) VALUES(%s,%s)",
                [(agenda_id, text) for text in options],
            )
            return agenda_id

    def list(self, *, is_open: Optional[bool] = None) -> Sequence[Agenda]:
        sql = "SELECT id, speaker_id, title, description, is_visible, is_open, created_at FROM Agendas"
        params: tuple = ()
        if is_open is not None:
            sql += " WHERE is_open=%s"
            params = (1 if is_open else 0,)
        sql += " ORDER BY created_at DESC, id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            rows = fetchall(cur)
            if not rows:
                return []

            ids = [int(r["id"]) for r in rows]
            placeholders = ",".join(["%s"] * len(ids))
            cur.execute(
                f"SELECT id, agenda_id, option_text FROM Options WHERE agenda_id IN ({placeholders}) ORDER BY id ASC",
                tuple(ids),
            )
            by_agenda: dict[int, list[AgendaOption]] = {}
            for o in fetchall(cur):
                opt = _row_to_option(o)
                by_agenda.setdefault(opt.agenda_id, []).append(opt)

        return [_row_to_agenda(r, by_agenda.get(int(r["id"]), [])) for r in rows]

    def get(self, agenda_id: int) -> Optional[Agenda]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, speaker_id, title, description, is_visible, is_open, created_at FROM Agendas WHERE id=%s",
                (int(agenda_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            cur.execute(
                "SELECT id, agenda_id, option_text FROM Options WHERE agenda_id=%s ORDER BY id ASC",
                (int(agenda_id),),
            )
            return _row_to_agenda(r, [_row_to_option(o) for o in fetchall(cur)])

    def _update_existing(self, sql: str, params: tuple, agenda_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            if cur.rowcount > 0:
                return True
            # rowcount only counts changed rows; a no-op update still means the agenda exists
            cur.execute("SELECT 1 AS found FROM Agendas WHERE id=%s", (int(agenda_id),))
            return fetchone(cur) is not None

    def set_visibility(self, agenda_id: int, is_visible: bool) -> bool:
        return self._update_existing(
            "UPDATE Agendas SET is_visible=%s WHERE id=%s",
            (1 if is_visible else 0, int(agenda_id)),
            agenda_id,
        )

    def close(self, agenda_id: int) -> bool:
        return self._update_existing("UPDATE Agendas SET is_open=0 WHERE id=%s", (int(agenda_id),), agenda_id)

    def get_option(self, option_id: int) -> Optional[AgendaOption]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, agenda_id, option_text FROM Options WHERE id=%s", (int(option_id),))
            r = fetchone(cur)
            return _row_to_option(r) if r else None

    def upsert_vote(self, *, agenda_id: int, voter_id: str, voter_name: str, option_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO Votes(agenda_id, voter_id, voter_name, option_id, created_at)
                VALUES(%s,%s,%s,%s,CURRENT_TIMESTAMP)
                ON DUPLICATE KEY UPDATE option_id=VALUES(option_id), voter_name=VALUES(voter_name)
                """,
                (int(agenda_id), voter_id, voter_name, int(option_id)),
            )

    def get_vote(self, *, agenda_id: int, voter_id: str) -> Optional[Ballot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT v.voter_id, v.voter_name, v.option_id, o.option_text
                FROM Votes v
                JOIN Options o ON o.id = v.option_id
                WHERE v.agenda_id=%s AND v.voter_id=%s
                """,
                (int(agenda_id), voter_id),
            )
            r = fetchone(cur)
            return _row_to_ballot(r) if r else None

    def counts(self, agenda_id: int) -> Sequence[OptionCount]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT o.id, o.option_text, COUNT(v.id) AS votes
                FROM Options o
                LEFT JOIN Votes v ON v.option_id = o.id AND v.agenda_id = o.agenda_id
                WHERE o.agenda_id=%s
                GROUP BY o.id, o.option_text
                ORDER BY o.id ASC
                """,
                (int(agenda_id),),
            )
            return [
                OptionCount(option_id=int(r["id"]), label=r["option_text"], value=int(r["votes"] or 0))
                for r in fetchall(cur)
            ]

    def ballots(self, agenda_id: int) -> Sequence[Ballot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT v.voter_id, v.voter_name, v.option_id, o.option_text
                FROM Votes v
                JOIN Options o ON o.id = v.option_id
                WHERE v.agenda_id=%s
                ORDER BY v.created_at ASC, v.id ASC
                """,
                (int(agenda_id),),
            )
            return [_row_to_ballot(r) for r in fetchall(cur)]
