from __future__ import annotations

from student_portal.agendas.mysql_agenda_repository import MySQLAgendaRepository


class _ScriptedCursor:
    """Answers UPDATEs with a fixed rowcount and SELECTs with ``found_row``."""

    def __init__(self, update_rowcount: int, found_row):
        self.update_rowcount = update_rowcount
        self.found_row = found_row
        self.statements: list[str] = []
        self.rowcount = -1
        self._next = None

    def execute(self, sql, params=()):
        self.statements.append(sql.split()[0].upper())
        if sql.lstrip().upper().startswith("UPDATE"):
            self.rowcount = self.update_rowcount
            self._next = None
        else:
            self._next = self.found_row

    def fetchone(self):
        return self._next

    def close(self):
        pass


class _Conn:
    def __init__(self, cur):
        self.cur = cur

    def cursor(self, dictionary=True):
        return self.cur

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        pass


class _Factory:
    def __init__(self, cur):
        self.cur = cur

    def connect(self):
        return _Conn(self.cur)


def test_unchanged_visibility_on_existing_agenda_counts_as_found():
    cur = _ScriptedCursor(update_rowcount=0, found_row={"found": 1})
    repo = MySQLAgendaRepository(_Factory(cur))

    assert repo.set_visibility(1, True) is True
    assert cur.statements == ["UPDATE", "SELECT"]


def test_closing_an_already_closed_agenda_counts_as_found():
    cur = _ScriptedCursor(update_rowcount=0, found_row={"found": 1})
    assert MySQLAgendaRepository(_Factory(cur)).close(1) is True


def test_missing_agenda_is_not_found():
    cur = _ScriptedCursor(update_rowcount=0, found_row=None)
    repo = MySQLAgendaRepository(_Factory(cur))

    assert repo.set_visibility(99, False) is False
    assert repo.close(99) is False


def test_changed_row_skips_existence_check():
    cur = _ScriptedCursor(update_rowcount=1, found_row=None)
    assert MySQLAgendaRepository(_Factory(cur)).close(1) is True
    assert cur.statements == ["UPDATE"]
