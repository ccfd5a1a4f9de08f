from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone, normalize_mysql_date, normalize_mysql_time
from .model import AvailabilitySlot, BookedAppointment, NewAppointment, SlotWindow
from .repository import AppointmentRepository

_SLOT_COLUMNS = "id, attorney_id, attorney_name, date, start_time, end_time, is_booked, booked_by_student_id"

_BOOKED_SELECT = """
    SELECT ap.id AS appointment_id, a.id AS slot_id, a.attorney_id, a.attorney_name,
           a.date, a.start_time, a.end_time,
           ap.student_id, ap.student_name, ap.student_email, ap.star_id, ap.tech_id, ap.description
    FROM Availability a
    JOIN Appointments ap ON ap.slot_id = a.id
"""


def _row_to_slot(r: dict) -> AvailabilitySlot:
    return AvailabilitySlot(
        id=int(r["id"]),
        attorney_id=str(r.get("attorney_id") or ""),
        attorney_name=r.get("attorney_name") or "",
        date=normalize_mysql_date(r["date"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        is_booked=as_bool(r.get("is_booked")),
        booked_by_student_id=r.get("booked_by_student_id"),
    )


def _row_to_booked(r: dict) -> BookedAppointment:
    return BookedAppointment(
        appointment_id=int(r["appointment_id"]),
        slot_id=int(r["slot_id"]),
        attorney_id=str(r["attorney_id"]),
        attorney_name=r.get("attorney_name") or "",
        date=normalize_mysql_date(r["date"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        student_id=str(r["student_id"]),
        student_name=r.get("student_name") or "",
        student_email=r.get("student_email") or "",
        star_id=r.get("star_id") or "",
        tech_id=r.get("tech_id") or "",
        description=r.get("description") or "",
    )


class MySQLAppointmentRepository(AppointmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Availability --------
    def add_slots(
        self,
        *,
        attorney_id: str,
        attorney_name: str,
        day: date,
        windows: Sequence[tuple[time, time]],
    ) -> int:
        inserted = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for start, end in windows:
                cur.execute(
                    """
                    INSERT IGNORE INTO Availability(attorney_id, attorney_name, date, start_time, end_time, created_at)
                    VALUES(%s,%s,%s,%s,%s,CURRENT_TIMESTAMP)
                    """,
                    (attorney_id, attorney_name, day, start, end),
                )
                inserted += max(cur.rowcount, 0)
        return inserted

    def list_slots(self) -> Sequence[AvailabilitySlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SLOT_COLUMNS} FROM Availability ORDER BY date ASC, start_time ASC")
            return [_row_to_slot(r) for r in fetchall(cur)]

    def list_open_slots(self) -> Sequence[AvailabilitySlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT MIN(id) AS id, date, start_time, end_time
                FROM Availability
                WHERE is_booked = 0
                GROUP BY date, start_time, end_time
                ORDER BY date ASC, start_time ASC
                """
            )
            return [_row_to_slot(r) for r in fetchall(cur)]

    def list_attorney_slots(self, attorney_id: str, *, start: date, end: date) -> Sequence[AvailabilitySlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SLOT_COLUMNS}
                FROM Availability
                WHERE attorney_id=%s AND date >= %s AND date <= %s
                ORDER BY date ASC, start_time ASC
                """,
                (attorney_id, start, end),
            )
            return [_row_to_slot(r) for r in fetchall(cur)]

    def get_slot(self, slot_id: int) -> Optional[AvailabilitySlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SLOT_COLUMNS} FROM Availability WHERE id=%s", (int(slot_id),))
            r = fetchone(cur)
            return _row_to_slot(r) if r else None

    def delete_slots(self, *, attorney_id: str, windows: Sequence[SlotWindow]) -> int:
        deleted = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for w in windows:
                cur.execute(
                    """
                    DELETE FROM Availability
                    WHERE attorney_id=%s AND date=%s AND start_time=%s AND end_time=%s
                    """,
                    (attorney_id, w.date, w.start_time, w.end_time),
                )
                deleted += max(cur.rowcount, 0)
        return deleted

    # -------- Appointments --------
    def book(self, appointment: NewAppointment) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # Conditional claim: only one concurrent request can flip is_booked.
            cur.execute(
                """
                UPDATE Availability
                SET is_booked=1, booked_by_student_id=%s
                WHERE id=%s AND is_booked=0
                """,
                (appointment.student_id, int(appointment.slot_id)),
            )
            if cur.rowcount == 0:
                return False

            cur.execute(
                """
                INSERT INTO Appointments(slot_id, student_id, student_name, student_email,
                                         star_id, tech_id, description, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,CURRENT_TIMESTAMP)
                """,
                (
                    int(appointment.slot_id),
                    appointment.student_id,
                    appointment.student_name,
                    appointment.student_email,
                    appointment.star_id,
                    appointment.tech_id,
                    appointment.description,
                ),
            )
            return True

    def list_booked(
        self,
        *,
        attorney_id: Optional[str] = None,
        student_id: Optional[str] = None,
    ) -> Sequence[BookedAppointment]:
        clauses = ["a.is_booked = 1"]
        params: list[object] = []
        if attorney_id is not None:
            clauses.append("a.attorney_id=%s")
            params.append(attorney_id)
        if student_id is not None:
            clauses.append("ap.student_id=%s")
            params.append(student_id)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _BOOKED_SELECT + f" WHERE {where} ORDER BY a.date ASC, a.start_time ASC",
                tuple(params),
            )
            return [_row_to_booked(r) for r in fetchall(cur)]

    def get_appointment(self, appointment_id: int) -> Optional[BookedAppointment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_BOOKED_SELECT + " WHERE ap.id=%s", (int(appointment_id),))
            r = fetchone(cur)
            return _row_to_booked(r) if r else None

    def cancel(self, *, appointment_id: int, slot_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM Appointments WHERE id=%s", (int(appointment_id),))
            cur.execute(
                "UPDATE Availability SET is_booked=0, booked_by_student_id=NULL WHERE id=%s",
                (int(slot_id),),
            )
