from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from typing import Any, Optional, Sequence

import pytest

from student_portal.agendas.model import Agenda, AgendaOption, Ballot, OptionCount
from student_portal.appointments.model import AvailabilitySlot, BookedAppointment, NewAppointment, SlotWindow
from student_portal.core.exceptions import AuthenticationError, ConflictError, IdentityProviderError
from student_portal.events.model import Event, NewEvent
from student_portal.hours.model import HourRow, Span
from student_portal.identity.model import IdentityUser, SessionClaims
from student_portal.library.model import LibraryInput, LibraryItem, LibraryKind
from student_portal.users.model import PortalUser


class FakeIdentity:
    """Identity provider backed by dicts. Tokens are ``token-<user id>``."""

    def __init__(self, users: Sequence[IdentityUser] = ()):
        self.users: dict[str, IdentityUser] = {u.id: u for u in users}
        self.claim_roles: dict[str, Optional[str]] = {}
        self.failing: set[str] = set()
        self.set_role_calls: list[tuple[str, str]] = []
        self._next_id = 0

    def add(self, user_id: str, *, first: str = "", last: str = "", email: str = "", role: Optional[str] = None):
        self.users[user_id] = IdentityUser(
            id=user_id,
            email=email or f"{user_id}@mnsu.edu",
            first_name=first or None,
            last_name=last or None,
            role=role,
        )
        return self.users[user_id]

    def verify_session(self, token: str) -> SessionClaims:
        if not token.startswith("token-"):
            raise AuthenticationError("Unauthorized")
        user_id = token[len("token-"):]
        user = self.users.get(user_id)
        role = self.claim_roles.get(user_id, user.role if user else None)
        return SessionClaims(user_id=user_id, role=role)

    def get_user(self, user_id: str) -> Optional[IdentityUser]:
        if user_id in self.failing:
            raise IdentityProviderError("provider down", status_code=503)
        return self.users.get(user_id)

    def list_users(self, *, limit: int, offset: int) -> Sequence[IdentityUser]:
        return list(self.users.values())[offset : offset + limit]

    def create_user(self, *, email, first_name, last_name, role, password=None) -> IdentityUser:
        if any(u.email == email for u in self.users.values()):
            raise ConflictError("User already exists")
        self._next_id += 1
        user = IdentityUser(id=f"user_new{self._next_id}", email=email, first_name=first_name, last_name=last_name, role=role)
        self.users[user.id] = user
        return user

    def delete_user(self, user_id: str) -> None:
        self.users.pop(user_id, None)

    def set_role(self, user_id: str, role: str) -> None:
        if user_id in self.failing:
            raise IdentityProviderError("provider down", status_code=503)
        self.set_role_calls.append((user_id, role))
        if user_id in self.users:
            self.users[user_id] = replace(self.users[user_id], role=role)


class InMemoryUsers:
    def __init__(self, users: Sequence[PortalUser] = ()):
        self.rows: dict[str, PortalUser] = {u.id: u for u in users}

    def get(self, user_id: str) -> Optional[PortalUser]:
        return self.rows.get(user_id)

    def list_all(self):
        return list(self.rows.values())

    def list_by_role(self, role: str, *, limit: Optional[int] = None):
        rows = [u for u in self.rows.values() if u.role == role]
        return rows[:limit] if limit is not None else rows

    def insert(self, *, user_id: str, username: str, role: Optional[str]) -> None:
        self.rows[user_id] = PortalUser(id=user_id, username=username, role=role)

    def update_role(self, *, user_id: str, role: str) -> bool:
        if user_id not in self.rows:
            return False
        self.rows[user_id] = replace(self.rows[user_id], role=role)
        return True

    def delete(self, user_id: str) -> bool:
        return self.rows.pop(user_id, None) is not None

    def count_by_role(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for u in self.rows.values():
            counts[u.role or "none"] = counts.get(u.role or "none", 0) + 1
        return counts


class InMemoryEvents:
    def __init__(self):
        self.rows: dict[int, Event] = {}
        self._id = 0

    def create(self, event: NewEvent) -> int:
        self._id += 1
        self.rows[self._id] = Event(
            id=self._id,
            created_by=event.created_by,
            title=event.title,
            description=event.description,
            location=event.location,
            start_time=event.start_time,
            end_time=event.end_time,
            is_all_day=bool(event.is_all_day),
            event_type=event.event_type,
            color=event.color,
        )
        return self._id

    def get(self, event_id: int) -> Optional[Event]:
        return self.rows.get(event_id)

    def list_between(self, *, start=None, end=None):
        out = [
            e
            for e in self.rows.values()
            if (start is None or e.start_time >= start) and (end is None or e.start_time <= end)
        ]
        return sorted(out, key=lambda e: e.start_time)

    def update_fields(self, event_id: int, fields: dict[str, Any]) -> bool:
        if "is_all_day" in fields:
            fields = {**fields, "is_all_day": bool(fields["is_all_day"])}
        self.rows[event_id] = replace(self.rows[event_id], **fields)
        return True

    def delete(self, event_id: int) -> bool:
        return self.rows.pop(event_id, None) is not None


class InMemoryLibrary:
    def __init__(self):
        self.rows: dict[tuple[LibraryKind, int], LibraryItem] = {}
        self._id = 0

    def create(self, kind: LibraryKind, *, created_by: str, item: LibraryInput) -> int:
        self._id += 1
        self.rows[(kind, self._id)] = LibraryItem(
            id=self._id,
            kind=kind,
            created_by=created_by,
            title=item.title,
            description=item.description,
            link=item.link,
            image_url=item.image_url,
            archive_type=item.archive_type,
            created_at=datetime(2025, 1, 1, 12, 0, self._id),
        )
        return self._id

    def get(self, kind: LibraryKind, item_id: int) -> Optional[LibraryItem]:
        return self.rows.get((kind, item_id))

    def list(self, kind: LibraryKind, *, archive_type: Optional[str] = None):
        items = [i for (k, _), i in self.rows.items() if k is kind]
        if archive_type:
            items = [i for i in items if i.archive_type == archive_type]
        return sorted(items, key=lambda i: i.id, reverse=True)

    def update(self, kind: LibraryKind, item_id: int, item: LibraryInput) -> bool:
        current = self.rows[(kind, item_id)]
        self.rows[(kind, item_id)] = replace(
            current,
            title=item.title,
            description=item.description,
            link=item.link,
            image_url=item.image_url,
            archive_type=item.archive_type,
        )
        return True

    def delete(self, kind: LibraryKind, item_id: int) -> bool:
        return self.rows.pop((kind, item_id), None) is not None

    def clear_all(self) -> tuple[int, int]:
        archives = sum(1 for k, _ in self.rows if k is LibraryKind.ARCHIVE)
        resources = len(self.rows) - archives
        self.rows.clear()
        return archives, resources


class InMemoryAppointments:
    def __init__(self):
        self.slots: dict[int, AvailabilitySlot] = {}
        self.appointments: dict[int, NewAppointment] = {}
        self._slot_id = 0
        self._appt_id = 0

    def add_slots(self, *, attorney_id, attorney_name, day, windows) -> int:
        inserted = 0
        for start, end in windows:
            exists = any(
                s.attorney_id == attorney_id and s.date == day and s.start_time == start and s.end_time == end
                for s in self.slots.values()
            )
            if exists:
                continue
            self._slot_id += 1
            self.slots[self._slot_id] = AvailabilitySlot(
                id=self._slot_id,
                attorney_id=attorney_id,
                attorney_name=attorney_name,
                date=day,
                start_time=start,
                end_time=end,
            )
            inserted += 1
        return inserted

    def list_slots(self):
        return sorted(self.slots.values(), key=lambda s: (s.date, s.start_time))

    def list_open_slots(self):
        seen: dict[tuple[date, time, time], AvailabilitySlot] = {}
        for s in sorted(self.slots.values(), key=lambda s: s.id):
            if not s.is_booked:
                seen.setdefault((s.date, s.start_time, s.end_time), s)
        return sorted(seen.values(), key=lambda s: (s.date, s.start_time))

    def list_attorney_slots(self, attorney_id, *, start, end):
        return [s for s in self.list_slots() if s.attorney_id == attorney_id and start <= s.date <= end]

    def get_slot(self, slot_id: int):
        return self.slots.get(slot_id)

    def delete_slots(self, *, attorney_id: str, windows: Sequence[SlotWindow]) -> int:
        doomed = [
            s.id
            for s in self.slots.values()
            for w in windows
            if s.attorney_id == attorney_id
            and (s.date, s.start_time, s.end_time) == (w.date, w.start_time, w.end_time)
        ]
        for sid in doomed:
            del self.slots[sid]
        return len(doomed)

    def book(self, appointment: NewAppointment) -> bool:
        slot = self.slots[appointment.slot_id]
        if slot.is_booked:
            return False
        self.slots[slot.id] = replace(slot, is_booked=True, booked_by_student_id=appointment.student_id)
        self._appt_id += 1
        self.appointments[self._appt_id] = appointment
        return True

    def _booked(self, appt_id: int, a: NewAppointment) -> BookedAppointment:
        s = self.slots[a.slot_id]
        return BookedAppointment(
            appointment_id=appt_id,
            slot_id=s.id,
            attorney_id=s.attorney_id,
            attorney_name=s.attorney_name,
            date=s.date,
            start_time=s.start_time,
            end_time=s.end_time,
            student_id=a.student_id,
            student_name=a.student_name,
            student_email=a.student_email,
            star_id=a.star_id,
            tech_id=a.tech_id,
            description=a.description,
        )

    def list_booked(self, *, attorney_id=None, student_id=None):
        out = [self._booked(i, a) for i, a in self.appointments.items()]
        if attorney_id is not None:
            out = [b for b in out if b.attorney_id == attorney_id]
        if student_id is not None:
            out = [b for b in out if b.student_id == student_id]
        return sorted(out, key=lambda b: (b.date, b.start_time))

    def get_appointment(self, appointment_id: int):
        a = self.appointments.get(appointment_id)
        return self._booked(appointment_id, a) if a else None

    def cancel(self, *, appointment_id: int, slot_id: int) -> None:
        del self.appointments[appointment_id]
        self.slots[slot_id] = replace(self.slots[slot_id], is_booked=False, booked_by_student_id=None)


class InMemoryAgendas:
    def __init__(self):
        self.agendas: dict[int, Agenda] = {}
        self.options: dict[int, AgendaOption] = {}
        self.votes: dict[tuple[int, str], tuple[str, int]] = {}
        self._agenda_id = 0
        self._option_id = 0

    def create(self, *, speaker_id, title, description, options) -> int:
        self._agenda_id += 1
        for text in options:
            self._option_id += 1
            self.options[self._option_id] = AgendaOption(id=self._option_id, agenda_id=self._agenda_id, option_text=text)
        self.agendas[self._agenda_id] = Agenda(
            id=self._agenda_id,
            speaker_id=speaker_id,
            title=title,
            description=description,
            is_visible=True,
            is_open=True,
        )
        return self._agenda_id

    def _with_options(self, a: Agenda) -> Agenda:
        return replace(a, options=tuple(o for o in self.options.values() if o.agenda_id == a.id))

    def list(self, *, is_open=None):
        return [self._with_options(a) for a in self.agendas.values() if is_open is None or a.is_open == is_open]

    def get(self, agenda_id: int):
        a = self.agendas.get(agenda_id)
        return self._with_options(a) if a else None

    def set_visibility(self, agenda_id: int, is_visible: bool) -> bool:
        if agenda_id not in self.agendas:
            return False
        self.agendas[agenda_id] = replace(self.agendas[agenda_id], is_visible=is_visible)
        return True

    def close(self, agenda_id: int) -> bool:
        if agenda_id not in self.agendas:
            return False
        self.agendas[agenda_id] = replace(self.agendas[agenda_id], is_open=False)
        return True

    def get_option(self, option_id: int):
        return self.options.get(option_id)

    def upsert_vote(self, *, agenda_id, voter_id, voter_name, option_id) -> None:
        self.votes[(agenda_id, voter_id)] = (voter_name, option_id)

    def get_vote(self, *, agenda_id, voter_id):
        hit = self.votes.get((agenda_id, voter_id))
        if hit is None:
            return None
        name, option_id = hit
        return Ballot(voter_id=voter_id, voter_name=name, option_id=option_id, option_text=self.options[option_id].option_text)

    def counts(self, agenda_id: int):
        return [
            OptionCount(
                option_id=o.id,
                label=o.option_text,
                value=sum(1 for (aid, _), (_, oid) in self.votes.items() if aid == agenda_id and oid == o.id),
            )
            for o in self.options.values()
            if o.agenda_id == agenda_id
        ]

    def ballots(self, agenda_id: int):
        return [
            Ballot(voter_id=vid, voter_name=name, option_id=oid, option_text=self.options[oid].option_text)
            for (aid, vid), (name, oid) in self.votes.items()
            if aid == agenda_id
        ]


class InMemoryHours:
    def __init__(self, usernames: Optional[dict[str, str]] = None):
        self.rows: list[HourRow] = []
        self.usernames = usernames or {}

    def insert_many(self, *, user_id, activity, comments, created_at, spans: Sequence[Span]) -> int:
        for s in spans:
            self.rows.append(
                HourRow(
                    id=len(self.rows) + 1,
                    user_id=user_id,
                    activity=activity,
                    comments=comments,
                    start_time=s.start_time,
                    end_time=s.end_time,
                    created_at=created_at,
                    username=self.usernames.get(user_id),
                )
            )
        return len(spans)

    def list_for_user(self, user_id: str):
        rows = [r for r in self.rows if r.user_id == user_id]
        return sorted(rows, key=lambda r: (-r.created_at.timestamp(), r.start_time))

    def list_all(self, *, start=None, end=None):
        return [
            r
            for r in sorted(self.rows, key=lambda r: r.start_time)
            if (start is None or r.start_time >= start) and (end is None or r.start_time < end)
        ]

    def delete_submission(self, *, user_id, created_from, created_to) -> int:
        keep = [r for r in self.rows if not (r.user_id == user_id and created_from <= r.created_at <= created_to)]
        deleted = len(self.rows) - len(keep)
        self.rows = keep
        return deleted


@pytest.fixture
def identity() -> FakeIdentity:
    return FakeIdentity()


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def events_repo() -> InMemoryEvents:
    return InMemoryEvents()


@pytest.fixture
def library_repo() -> InMemoryLibrary:
    return InMemoryLibrary()


@pytest.fixture
def appointments_repo() -> InMemoryAppointments:
    return InMemoryAppointments()


@pytest.fixture
def agendas_repo() -> InMemoryAgendas:
    return InMemoryAgendas()


@pytest.fixture
def hours_repo() -> InMemoryHours:
    return InMemoryHours()
