from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from ..common.datetime_utils import format_clock_12h, parse_clock, parse_iso_date
from ..common.periods import get_zone
from ..common.validators import require_int, require_non_empty
from ..core.constants import ADMIN_ROLES, MAX_LISTED_ATTORNEYS, SLOT_MINUTES
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError, DomainError, NotFoundError, ValidationError
from ..core.logger import get_logger
from ..identity.provider import IdentityProvider
from ..users.repository import UserRepository
from .model import AvailabilitySlot, BookedAppointment, NewAppointment, SlotWindow
from .repository import AppointmentRepository
from .slots import DAY_NAMES, split_window, week_bounds

logger = get_logger(__name__)


def _slot_to_dict(s: AvailabilitySlot) -> dict:
    return {
        "id": s.id,
        "date": s.date.isoformat(),
        "start_time": s.start_time.strftime("%H:%M"),
        "end_time": s.end_time.strftime("%H:%M"),
    }


def _booked_to_dict(b: BookedAppointment) -> dict:
    return {
        "id": b.slot_id,
        "appointmentId": b.appointment_id,
        "attorney_id": b.attorney_id,
        "attorney_name": b.attorney_name,
        "date": b.date.isoformat(),
        "start_time": b.start_time.strftime("%H:%M"),
        "end_time": b.end_time.strftime("%H:%M"),
        "student_name": b.student_name,
        "student_email": b.student_email,
        "star_id": b.star_id,
        "tech_id": b.tech_id,
        "description": b.description,
    }


class AppointmentService:
    """Attorney availability and student bookings.

    Slot dates and times are civil times in the portal zone.
    """

    def __init__(
        self,
        appointments: AppointmentRepository,
        users: UserRepository,
        identity: IdentityProvider,
        *,
        tz: str,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._appointments = appointments
        self._users = users
        self._identity = identity
        self._zone = get_zone(tz)
        self._clock = clock or (lambda: datetime.now(self._zone).replace(tzinfo=None))

    def _parse_window(self, item: dict) -> SlotWindow:
        """Accept ``{date, start_time, end_time}`` or calendar ``{start, end}`` ISO instants."""
        if item.get("start") and item.get("end"):
            start = self._local(item["start"])
            end = self._local(item["end"])
            return SlotWindow(date=start.date(), start_time=start.time(), end_time=end.time())

        return SlotWindow(
            date=parse_iso_date(item.get("date") or ""),
            start_time=parse_clock(item.get("start_time") or "", "start_time"),
            end_time=parse_clock(item.get("end_time") or "", "end_time"),
        )

    def _local(self, value: str) -> datetime:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError("Invalid slot time")
        if dt.tzinfo is not None:
            dt = dt.astimezone(self._zone).replace(tzinfo=None)
        return dt.replace(second=0, microsecond=0)

    # -------- Availability --------
    def add_availability(self, *, attorney_id: str, data: dict) -> int:
        window = self._parse_window(data)
        if window.end_time <= window.start_time:
            raise ValidationError("end_time must be after start_time")

        slots = split_window(window.start_time, window.end_time)
        if not slots:
            raise ValidationError(f"Availability must cover at least {SLOT_MINUTES} minutes")

        attorney_name = "Unknown Attorney"
        try:
            user = self._identity.get_user(attorney_id)
            if user and user.full_name:
                attorney_name = user.full_name
        except DomainError as e:
            logger.warning("Attorney lookup failed for {}: {}", attorney_id, e)

        inserted = self._appointments.add_slots(
            attorney_id=attorney_id,
            attorney_name=attorney_name,
            day=window.date,
            windows=slots,
        )
        logger.info("Attorney {} added {} slot(s) on {}", attorney_id, inserted, window.date)
        return inserted

    def list_sessions(self) -> list[dict]:
        """Every stored window expanded into 30-minute "Available" calendar sessions."""
        sessions: list[dict] = []
        for slot in self._appointments.list_slots():
            for start, end in split_window(slot.start_time, slot.end_time):
                sessions.append(
                    {
                        "title": "Available",
                        "start": datetime.combine(slot.date, start).isoformat(),
                        "end": datetime.combine(slot.date, end).isoformat(),
                        "allDay": False,
                    }
                )
        return sessions

    def list_open_slots(self) -> list[dict]:
        return [_slot_to_dict(s) for s in self._appointments.list_open_slots()]

    def list_attorneys_with_availability(self, *, week_start: Optional[str] = None) -> list[dict]:
        now = self._clock()
        start, end = week_bounds(parse_iso_date(week_start, "weekStart") if week_start else None, now.date())

        attorneys = self._users.list_by_role(Role.ATTORNEY.value, limit=MAX_LISTED_ATTORNEYS)
        if len(attorneys) != MAX_LISTED_ATTORNEYS:
            logger.warning("Expected {} attorneys, found {}", MAX_LISTED_ATTORNEYS, len(attorneys))

        out: list[dict] = []
        for attorney in attorneys:
            try:
                user = self._identity.get_user(attorney.id)
            except DomainError as e:
                logger.error("Skipping attorney {}: {}", attorney.id, e)
                continue

            first = (user.first_name if user else "") or ""
            last = (user.last_name if user else "") or ""
            name = f"{first} {last}".strip() or "Unknown Attorney"
            initials = f"{first[:1]}{last[:1]}".upper() or "UA"

            time_slots = []
            for slot in self._appointments.list_attorney_slots(attorney.id, start=start, end=end):
                if slot.duration_minutes != SLOT_MINUTES:
                    logger.warning("Slot {} is {} minutes, skipping", slot.id, slot.duration_minutes)
                    continue
                is_past = slot.starts_at() < now
                time_slots.append(
                    {
                        "id": f"{attorney.id}-{slot.id}",
                        "slotId": slot.id,
                        "time": f"{DAY_NAMES[slot.date.weekday()]} {format_clock_12h(slot.start_time)}",
                        "duration": f"{SLOT_MINUTES} minutes",
                        "date": slot.date.isoformat(),
                        "isAvailable": not slot.is_booked and not is_past,
                    }
                )

            out.append(
                {
                    "id": attorney.id,
                    "name": name,
                    "initials": initials,
                    "title": "Student Attorney",
                    "timeSlots": time_slots,
                }
            )
        return out

    def delete_availability(self, *, attorney_id: str, data: dict) -> int:
        deleted = self._appointments.delete_slots(attorney_id=attorney_id, windows=[self._parse_window(data)])
        if deleted == 0:
            raise NotFoundError("Availability slot not found")
        return deleted

    def bulk_delete_availability(self, *, attorney_id: str, slots: Any) -> dict:
        if not isinstance(slots, list) or not slots:
            raise ValidationError("Missing or empty slots array")
        windows = [self._parse_window(s if isinstance(s, dict) else {}) for s in slots]
        deleted = self._appointments.delete_slots(attorney_id=attorney_id, windows=windows)
        logger.info("Bulk deleted {} availability slot(s) for {}", deleted, attorney_id)
        return {"success": True, "deleted": deleted, "total": len(slots)}

    # -------- Appointments --------
    def book_appointment(self, *, student_id: str, data: dict) -> None:
        slot_id = data.get("slotId")
        star_id = data.get("starId")
        tech_id = data.get("techId")
        description = data.get("description")
        if not slot_id or not star_id or not tech_id or not description:
            raise ValidationError("Missing fields")

        slot = self._appointments.get_slot(require_int(slot_id, "slotId"))
        if slot is None:
            raise NotFoundError("Slot not found")

        student = self._identity.get_user(student_id)
        if student is None:
            raise NotFoundError("User not found")

        booked = self._appointments.book(
            NewAppointment(
                slot_id=slot.id,
                student_id=student_id,
                student_name=student.full_name,
                student_email=student.email or "",
                star_id=require_non_empty(str(star_id), "starId"),
                tech_id=require_non_empty(str(tech_id), "techId"),
                description=require_non_empty(str(description), "description"),
            )
        )
        if not booked:
            raise ConflictError("This slot has already been booked")
        logger.info("Slot {} booked by {}", slot.id, student_id)

    def list_booked(self, *, user_id: str, current_role: Optional[Role]) -> list[dict]:
        if current_role in ADMIN_ROLES:
            rows = self._appointments.list_booked()
        elif current_role == Role.ATTORNEY:
            rows = self._appointments.list_booked(attorney_id=user_id)
        else:
            rows = self._appointments.list_booked(student_id=user_id)
        return [_booked_to_dict(b) for b in rows]

    def delete_appointment(self, *, user_id: str, current_role: Optional[Role], appointment_id: Any) -> None:
        if current_role != Role.ATTORNEY and current_role not in ADMIN_ROLES:
            raise AuthorizationError("Forbidden - Only attorneys can delete appointments")
        if not appointment_id:
            raise ValidationError("Missing appointmentId")

        appointment = self._appointments.get_appointment(require_int(appointment_id, "appointmentId"))
        if appointment is None:
            raise NotFoundError("Appointment not found")
        if current_role not in ADMIN_ROLES and appointment.attorney_id != user_id:
            raise AuthorizationError("Forbidden - You can only delete your own appointments")

        self._appointments.cancel(appointment_id=appointment.appointment_id, slot_id=appointment.slot_id)
        logger.info("Appointment {} deleted by {}", appointment.appointment_id, user_id)

    # -------- Dashboard helpers --------
    def upcoming_for_attorney(self, attorney_id: str) -> list[dict]:
        today = self._clock().date()
        return [_booked_to_dict(b) for b in self._appointments.list_booked(attorney_id=attorney_id) if b.date >= today]

    def open_slot_count(self, attorney_id: str) -> int:
        now = self._clock()
        start, end = now.date(), now.date() + timedelta(days=365)
        return sum(
            1
            for s in self._appointments.list_attorney_slots(attorney_id, start=start, end=end)
            if not s.is_booked and s.starts_at() >= now
        )
