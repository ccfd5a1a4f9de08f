from __future__ import annotations

from typing import Any, Optional

from ..common.validators import require_int, require_max_length, require_non_empty
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.logger import get_logger
from ..users.service import UserService
from .model import Agenda
from .repository import AgendaRepository

logger = get_logger(__name__)

DEFAULT_DESCRIPTION = "N/A"


def agenda_to_dict(a: Agenda) -> dict:
    return {
        "id": a.id,
        "speaker_id": a.speaker_id,
        "title": a.title,
        "description": a.description,
        "is_visible": a.is_visible,
        "is_open": a.is_open,
        "created_at": a.created_at.isoformat() if a.created_at else None,
        "options": [{"id": o.id, "optionText": o.option_text} for o in a.options],
    }


def _parse_open_filter(value: Optional[str]) -> Optional[bool]:
    if value is None or value == "":
        return None
    if value in ("1", "true"):
        return True
    if value in ("0", "false"):
        return False
    raise ValidationError("open must be 1 or 0")


class AgendaService:
    def __init__(self, agendas: AgendaRepository, users: UserService):
        self._agendas = agendas
        self._users = users

    def _get_or_404(self, agenda_id: Any) -> Agenda:
        agenda = self._agendas.get(require_int(agenda_id, "agenda id"))
        if agenda is None:
            raise NotFoundError("Agenda not found")
        return agenda

    def create_agenda(self, *, speaker_id: str, data: dict) -> int:
        title = require_max_length(require_non_empty(data.get("title"), "title"), "title", 255)
        raw_options = data.get("options")
        if not isinstance(raw_options, list):
            raise ValidationError("options must be a list")

        options = [str(o).strip() for o in raw_options if isinstance(o, (str, int, float)) and str(o).strip()]
        if not options:
            raise ValidationError("At least one option is required")

        agenda_id = self._agendas.create(
            speaker_id=speaker_id,
            title=title,
            description=DEFAULT_DESCRIPTION,
            options=options,
        )
        logger.info("Agenda {} created by {} with {} option(s)", agenda_id, speaker_id, len(options))
        return agenda_id

    def list_agendas(self, *, open_filter: Optional[str] = None) -> list[dict]:
        return [agenda_to_dict(a) for a in self._agendas.list(is_open=_parse_open_filter(open_filter))]

    def set_visibility(self, *, agenda_id: Any, is_visible: Any) -> None:
        if not isinstance(is_visible, bool):
            raise ValidationError("is_visible must be a boolean")
        if not self._agendas.set_visibility(require_int(agenda_id, "agenda id"), is_visible):
            raise NotFoundError("Agenda not found")

    def close_agenda(self, *, agenda_id: Any) -> None:
        if not self._agendas.close(require_int(agenda_id, "agenda id")):
            raise NotFoundError("Agenda not found")
        logger.info("Agenda {} closed", agenda_id)

    def cast_vote(self, *, agenda_id: Any, voter_id: str, option_id: Any) -> None:
        agenda = self._get_or_404(agenda_id)
        if option_id is None:
            raise ValidationError("option_id is required")

        option = self._agendas.get_option(require_int(option_id, "option_id"))
        if option is None or option.agenda_id != agenda.id:
            raise ValidationError("Option does not belong to this agenda")
        if not agenda.is_open:
            raise ConflictError("Voting is closed for this agenda")

        self._agendas.upsert_vote(
            agenda_id=agenda.id,
            voter_id=voter_id,
            voter_name=self._users.display_name(voter_id),
            option_id=option.id,
        )

    def my_vote(self, *, agenda_id: Any, voter_id: str) -> dict:
        ballot = self._agendas.get_vote(agenda_id=require_int(agenda_id, "agenda id"), voter_id=voter_id)
        if ballot is None:
            return {"option_id": None, "optionText": "N/A"}
        return {"option_id": ballot.option_id, "optionText": ballot.option_text}

    def counts(self, *, agenda_id: Any) -> list[dict]:
        agenda = self._get_or_404(agenda_id)
        return [{"id": c.option_id, "label": c.label, "value": c.value} for c in self._agendas.counts(agenda.id)]

    def ballots(self, *, agenda_id: Any) -> list[dict]:
        agenda = self._get_or_404(agenda_id)
        return [
            {"id": b.voter_id, "name": b.voter_name or "Unknown", "option": b.option_text}
            for b in self._agendas.ballots(agenda.id)
        ]
