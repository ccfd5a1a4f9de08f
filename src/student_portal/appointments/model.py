from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional


@dataclass(frozen=True)
class AvailabilitySlot:
    id: int
    attorney_id: str
    attorney_name: str
    date: date
    start_time: time
    end_time: time
    is_booked: bool = False
    booked_by_student_id: Optional[str] = None

    @property
    def duration_minutes(self) -> int:
        return (self.end_time.hour * 60 + self.end_time.minute) - (self.start_time.hour * 60 + self.start_time.minute)

    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.start_time)


@dataclass(frozen=True)
class SlotWindow:
    """A (date, start, end) triple used to address slots without ids."""

    date: date
    start_time: time
    end_time: time


@dataclass(frozen=True)
class NewAppointment:
    slot_id: int
    student_id: str
    student_name: str
    student_email: str
    star_id: str
    tech_id: str
    description: str


@dataclass(frozen=True)
class BookedAppointment:
    appointment_id: int
    slot_id: int
    attorney_id: str
    attorney_name: str
    date: date
    start_time: time
    end_time: time
    student_id: str
    student_name: str
    student_email: str
    star_id: str
    tech_id: str
    description: str
