from __future__ import annotations

import pytest

from student_portal.agendas.service import AgendaService
from student_portal.core.exceptions import ConflictError, NotFoundError, ValidationError
from student_portal.users.service import UserService


@pytest.fixture
def service(agendas_repo, users_repo, identity):
    identity.add("sen1", first="Sena", last="Tor", role="senator")
    identity.add("sen2", first="Vo", last="Ter", role="senator")
    return AgendaService(agendas_repo, UserService(users_repo, identity))


@pytest.fixture
def agenda_id(service):
    return service.create_agenda(speaker_id="speaker", data={"title": "Bill 12", "options": ["Yes", " No ", "", "Abstain"]})


def test_create_agenda_keeps_non_blank_options(service, agenda_id):
    (agenda,) = service.list_agendas()
    assert agenda["title"] == "Bill 12"
    assert agenda["description"] == "N/A"
    assert (agenda["is_visible"], agenda["is_open"]) == (True, True)
    assert [o["optionText"] for o in agenda["options"]] == ["Yes", "No", "Abstain"]


def test_create_agenda_validation(service):
    with pytest.raises(ValidationError, match="title is required"):
        service.create_agenda(speaker_id="s", data={"options": ["Yes"]})
    with pytest.raises(ValidationError, match="options must be a list"):
        service.create_agenda(speaker_id="s", data={"title": "t", "options": "Yes"})
    with pytest.raises(ValidationError, match="At least one option"):
        service.create_agenda(speaker_id="s", data={"title": "t", "options": [" ", None]})


def test_list_agendas_open_filter(service, agenda_id):
    other = service.create_agenda(speaker_id="speaker", data={"title": "Bill 13", "options": ["Yes"]})
    service.close_agenda(agenda_id=other)

    assert [a["id"] for a in service.list_agendas(open_filter="1")] == [agenda_id]
    assert [a["id"] for a in service.list_agendas(open_filter="0")] == [other]
    assert len(service.list_agendas(open_filter=None)) == 2
    with pytest.raises(ValidationError):
        service.list_agendas(open_filter="maybe")


def test_set_visibility(service, agenda_id):
    service.set_visibility(agenda_id=agenda_id, is_visible=False)
    assert service.list_agendas()[0]["is_visible"] is False

    with pytest.raises(ValidationError, match="is_visible must be a boolean"):
        service.set_visibility(agenda_id=agenda_id, is_visible="false")
    with pytest.raises(NotFoundError):
        service.set_visibility(agenda_id=999, is_visible=True)


def test_revoting_replaces_the_previous_ballot(service, agenda_id):
    yes, no, _ = (o["id"] for o in service.list_agendas()[0]["options"])

    service.cast_vote(agenda_id=agenda_id, voter_id="sen1", option_id=yes)
    service.cast_vote(agenda_id=agenda_id, voter_id="sen1", option_id=no)
    service.cast_vote(agenda_id=agenda_id, voter_id="sen2", option_id=no)

    assert service.my_vote(agenda_id=agenda_id, voter_id="sen1") == {"option_id": no, "optionText": "No"}
    assert service.counts(agenda_id=agenda_id) == [
        {"id": yes, "label": "Yes", "value": 0},
        {"id": no, "label": "No", "value": 2},
        {"id": yes + 2, "label": "Abstain", "value": 0},
    ]
    assert sorted(service.ballots(agenda_id=agenda_id), key=lambda b: b["id"]) == [
        {"id": "sen1", "name": "Sena Tor", "option": "No"},
        {"id": "sen2", "name": "Vo Ter", "option": "No"},
    ]


def test_my_vote_without_ballot(service, agenda_id):
    assert service.my_vote(agenda_id=agenda_id, voter_id="sen1") == {"option_id": None, "optionText": "N/A"}


def test_cast_vote_errors(service, agenda_id):
    other = service.create_agenda(speaker_id="speaker", data={"title": "Bill 13", "options": ["Maybe"]})
    foreign_option = service.list_agendas()[1]["options"][0]["id"]
    own_option = service.list_agendas()[0]["options"][0]["id"]

    with pytest.raises(NotFoundError):
        service.cast_vote(agenda_id=999, voter_id="sen1", option_id=own_option)
    with pytest.raises(ValidationError, match="does not belong"):
        service.cast_vote(agenda_id=agenda_id, voter_id="sen1", option_id=foreign_option)
    with pytest.raises(ValidationError, match="option_id is required"):
        service.cast_vote(agenda_id=agenda_id, voter_id="sen1", option_id=None)

    service.close_agenda(agenda_id=other)
    with pytest.raises(ConflictError, match="closed"):
        service.cast_vote(agenda_id=other, voter_id="sen1", option_id=foreign_option)


def test_voter_name_survives_provider_outage(service, identity, agenda_id):
    identity.failing.add("sen1")
    option = service.list_agendas()[0]["options"][0]["id"]

    service.cast_vote(agenda_id=agenda_id, voter_id="sen1", option_id=option)

    assert service.ballots(agenda_id=agenda_id) == [{"id": "sen1", "name": "Unknown", "option": "Yes"}]


def test_close_unknown_agenda(service):
    with pytest.raises(NotFoundError):
        service.close_agenda(agenda_id=5)


def test_repeated_visibility_and_close_are_idempotent(service, agenda_id):
    service.set_visibility(agenda_id=agenda_id, is_visible=True)
    service.set_visibility(agenda_id=agenda_id, is_visible=True)
    service.close_agenda(agenda_id=agenda_id)
    service.close_agenda(agenda_id=agenda_id)

    (agenda,) = service.list_agendas()
    assert (agenda["is_visible"], agenda["is_open"]) == (True, False)
