from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from .model import AvailabilitySlot, BookedAppointment, NewAppointment, SlotWindow


class AppointmentRepository(Protocol):
    # Availability
    def add_slots(
        self,
        *,
        attorney_id: str,
        attorney_name: str,
        day: date,
        windows: Sequence[tuple[time, time]],
    ) -> int:
        """Insert all slots in one transaction, skipping ones that already exist. Return inserted count."""

        raise NotImplementedError

    def list_slots(self) -> Sequence[AvailabilitySlot]:
        raise NotImplementedError

    def list_open_slots(self) -> Sequence[AvailabilitySlot]:
        """Unbooked slots, one per (date, start, end) keeping the smallest id."""

        raise NotImplementedError

    def list_attorney_slots(self, attorney_id: str, *, start: date, end: date) -> Sequence[AvailabilitySlot]:
        raise NotImplementedError

    def get_slot(self, slot_id: int) -> Optional[AvailabilitySlot]:
        raise NotImplementedError

    def delete_slots(self, *, attorney_id: str, windows: Sequence[SlotWindow]) -> int:
        """Delete matching slots in one transaction and return the number removed."""

        raise NotImplementedError

    # Appointments
    def book(self, appointment: NewAppointment) -> bool:
        """Claim the slot and record the appointment atomically.

        Returns False when the slot was already booked.
        """

        raise NotImplementedError

    def list_booked(
        self,
        *,
        attorney_id: Optional[str] = None,
        student_id: Optional[str] = None,
    ) -> Sequence[BookedAppointment]:
        raise NotImplementedError

    def get_appointment(self, appointment_id: int) -> Optional[BookedAppointment]:
        raise NotImplementedError

    def cancel(self, *, appointment_id: int, slot_id: int) -> None:
        """Delete the appointment and free its slot in one transaction."""

        raise NotImplementedError
