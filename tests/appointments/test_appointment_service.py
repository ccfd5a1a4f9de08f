from __future__ import annotations

from datetime import date, datetime, time

import pytest

from student_portal.appointments.service import AppointmentService
from student_portal.core.enums import Role
from student_portal.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError

# Wednesday morning, Chicago civil time
NOW = datetime(2025, 1, 8, 10, 0)


@pytest.fixture
def service(appointments_repo, users_repo, identity):
    identity.add("att1", first="Alice", last="Avery", role="attorney")
    identity.add("att2", first="Bob", last="Brown", role="attorney")
    identity.add("stu1", first="Sam", last="Student", email="sam@mnsu.edu", role="student")
    users_repo.insert(user_id="att1", username="alice", role="attorney")
    users_repo.insert(user_id="att2", username="bob", role="attorney")
    return AppointmentService(appointments_repo, users_repo, identity, tz="America/Chicago", clock=lambda: NOW)


def _book(service, slot_id, student="stu1"):
    service.book_appointment(
        student_id=student,
        data={"slotId": slot_id, "starId": "ab1234cd", "techId": "12345678", "description": "Lease question"},
    )


def test_add_availability_splits_into_slots(service, appointments_repo):
    count = service.add_availability(
        attorney_id="att1", data={"date": "2025-01-09", "start_time": "09:00", "end_time": "10:30"}
    )

    assert count == 3
    slots = appointments_repo.list_slots()
    assert [s.start_time for s in slots] == [time(9, 0), time(9, 30), time(10, 0)]
    assert {s.attorney_name for s in slots} == {"Alice Avery"}


def test_add_availability_accepts_calendar_instants(service, appointments_repo):
    # 15:00Z is 09:00 in Chicago in January
    service.add_availability(attorney_id="att1", data={"start": "2025-01-09T15:00:00Z", "end": "2025-01-09T16:00:00Z"})

    slots = appointments_repo.list_slots()
    assert [(s.date, s.start_time) for s in slots] == [(date(2025, 1, 9), time(9, 0)), (date(2025, 1, 9), time(9, 30))]


def test_add_availability_is_idempotent_per_window(service):
    data = {"date": "2025-01-09", "start_time": "09:00", "end_time": "10:00"}
    assert service.add_availability(attorney_id="att1", data=data) == 2
    assert service.add_availability(attorney_id="att1", data=data) == 0


def test_add_availability_validation(service):
    with pytest.raises(ValidationError, match="end_time must be after start_time"):
        service.add_availability(attorney_id="att1", data={"date": "2025-01-09", "start_time": "10:00", "end_time": "09:00"})
    with pytest.raises(ValidationError, match="at least 30 minutes"):
        service.add_availability(attorney_id="att1", data={"date": "2025-01-09", "start_time": "10:00", "end_time": "10:15"})
    with pytest.raises(ValidationError):
        service.add_availability(attorney_id="att1", data={"date": "tomorrow", "start_time": "10:00", "end_time": "11:00"})


def test_provider_failure_uses_placeholder_attorney_name(service, identity, appointments_repo):
    identity.failing.add("att1")
    service.add_availability(attorney_id="att1", data={"date": "2025-01-09", "start_time": "09:00", "end_time": "09:30"})
    assert appointments_repo.list_slots()[0].attorney_name == "Unknown Attorney"


def test_list_sessions_expands_thirty_minute_calendar_entries(service, appointments_repo):
    appointments_repo.add_slots(
        attorney_id="att1", attorney_name="Alice", day=date(2025, 1, 9), windows=[(time(9, 0), time(10, 0))]
    )

    assert service.list_sessions() == [
        {"title": "Available", "start": "2025-01-09T09:00:00", "end": "2025-01-09T09:30:00", "allDay": False},
        {"title": "Available", "start": "2025-01-09T09:30:00", "end": "2025-01-09T10:00:00", "allDay": False},
    ]


def test_open_slots_collapse_duplicate_windows(service):
    data = {"date": "2025-01-09", "start_time": "09:00", "end_time": "09:30"}
    service.add_availability(attorney_id="att1", data=data)
    service.add_availability(attorney_id="att2", data=data)

    assert service.list_open_slots() == [{"id": 1, "date": "2025-01-09", "start_time": "09:00", "end_time": "09:30"}]


def test_attorneys_with_availability_for_current_week(service, identity):
    service.add_availability(attorney_id="att1", data={"date": "2025-01-07", "start_time": "09:00", "end_time": "09:30"})
    service.add_availability(attorney_id="att1", data={"date": "2025-01-09", "start_time": "13:00", "end_time": "14:00"})
    service.add_availability(attorney_id="att1", data={"date": "2025-01-20", "start_time": "09:00", "end_time": "09:30"})
    _book(service, 2)

    alice, bob = service.list_attorneys_with_availability()

    assert (alice["name"], alice["initials"], alice["title"]) == ("Alice Avery", "AA", "Student Attorney")
    assert [s["time"] for s in alice["timeSlots"]] == ["Tue 9:00 AM", "Thu 1:00 PM", "Thu 1:30 PM"]
    # past, booked, open
    assert [s["isAvailable"] for s in alice["timeSlots"]] == [False, False, True]
    assert alice["timeSlots"][2] == {
        "id": "att1-3",
        "slotId": 3,
        "time": "Thu 1:30 PM",
        "duration": "30 minutes",
        "date": "2025-01-09",
        "isAvailable": True,
    }
    assert bob["timeSlots"] == []


def test_attorneys_with_availability_skips_provider_failures(service, identity):
    identity.failing.add("att2")
    result = service.list_attorneys_with_availability(week_start="2025-01-20")
    assert [a["id"] for a in result] == ["att1"]


def test_delete_availability(service, appointments_repo):
    service.add_availability(attorney_id="att1", data={"date": "2025-01-09", "start_time": "09:00", "end_time": "10:00"})

    service.delete_availability(attorney_id="att1", data={"date": "2025-01-09", "start_time": "09:00", "end_time": "09:30"})
    assert len(appointments_repo.list_slots()) == 1

    with pytest.raises(NotFoundError):
        service.delete_availability(attorney_id="att2", data={"date": "2025-01-09", "start_time": "09:30", "end_time": "10:00"})


def test_bulk_delete_availability(service, appointments_repo):
    service.add_availability(attorney_id="att1", data={"date": "2025-01-09", "start_time": "09:00", "end_time": "10:00"})

    result = service.bulk_delete_availability(
        attorney_id="att1",
        slots=[
            {"date": "2025-01-09", "start_time": "09:00", "end_time": "09:30"},
            {"date": "2025-01-09", "start_time": "09:30", "end_time": "10:00"},
            {"date": "2025-01-10", "start_time": "09:00", "end_time": "09:30"},
        ],
    )

    assert result == {"success": True, "deleted": 2, "total": 3}
    assert appointments_repo.list_slots() == []

    with pytest.raises(ValidationError, match="Missing or empty slots array"):
        service.bulk_delete_availability(attorney_id="att1", slots=[])


def test_book_appointment_and_double_booking(service, identity, appointments_repo):
    identity.add("stu2", first="Other", role="student")
    service.add_availability(attorney_id="att1", data={"date": "2025-01-09", "start_time": "09:00", "end_time": "09:30"})

    _book(service, 1)
    with pytest.raises(ConflictError, match="already been booked"):
        _book(service, 1, student="stu2")

    (booked,) = service.list_booked(user_id="stu1", current_role=Role.STUDENT)
    assert booked["student_name"] == "Sam Student"
    assert booked["student_email"] == "sam@mnsu.edu"
    assert booked["attorney_name"] == "Alice Avery"
    assert appointments_repo.get_slot(1).booked_by_student_id == "stu1"


def test_book_appointment_errors(service):
    with pytest.raises(ValidationError, match="Missing fields"):
        service.book_appointment(student_id="stu1", data={"slotId": 1, "starId": "x", "techId": "y"})
    with pytest.raises(NotFoundError, match="Slot not found"):
        _book(service, 42)

    service.add_availability(attorney_id="att1", data={"date": "2025-01-09", "start_time": "09:00", "end_time": "09:30"})
    with pytest.raises(NotFoundError, match="User not found"):
        _book(service, 1, student="ghost")


def test_list_booked_scopes_by_role(service, identity):
    identity.add("stu2", first="Other", role="student")
    service.add_availability(attorney_id="att1", data={"date": "2025-01-09", "start_time": "09:00", "end_time": "09:30"})
    service.add_availability(attorney_id="att2", data={"date": "2025-01-09", "start_time": "10:00", "end_time": "10:30"})
    _book(service, 1)
    _book(service, 2, student="stu2")

    assert len(service.list_booked(user_id="admin", current_role=Role.ADMIN)) == 2
    assert [b["attorney_id"] for b in service.list_booked(user_id="att2", current_role=Role.ATTORNEY)] == ["att2"]
    assert [b["id"] for b in service.list_booked(user_id="stu2", current_role=Role.STUDENT)] == [2]


def test_delete_appointment_frees_the_slot(service, appointments_repo):
    service.add_availability(attorney_id="att1", data={"date": "2025-01-09", "start_time": "09:00", "end_time": "09:30"})
    _book(service, 1)

    with pytest.raises(AuthorizationError, match="only delete your own"):
        service.delete_appointment(user_id="att2", current_role=Role.ATTORNEY, appointment_id=1)
    with pytest.raises(AuthorizationError, match="Only attorneys"):
        service.delete_appointment(user_id="stu1", current_role=Role.STUDENT, appointment_id=1)

    service.delete_appointment(user_id="att1", current_role=Role.ATTORNEY, appointment_id=1)
    assert appointments_repo.get_slot(1).is_booked is False

    with pytest.raises(NotFoundError):
        service.delete_appointment(user_id="att1", current_role=Role.ADMIN, appointment_id=1)


def test_dashboard_helpers(service):
    service.add_availability(attorney_id="att1", data={"date": "2025-01-07", "start_time": "09:00", "end_time": "09:30"})
    service.add_availability(attorney_id="att1", data={"date": "2025-01-09", "start_time": "09:00", "end_time": "10:00"})
    _book(service, 2)

    assert [a["date"] for a in service.upcoming_for_attorney("att1")] == ["2025-01-09"]
    assert service.open_slot_count("att1") == 1
