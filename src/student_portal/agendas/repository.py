from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Agenda, AgendaOption, Ballot, OptionCount


class AgendaRepository(Protocol):
    def create(self, *, speaker_id: str, title: str, description: str, options: Sequence[str]) -> int:
        """Insert the agenda and its options in one transaction."""

        raise NotImplementedError

    def list(self, *, is_open: Optional[bool] = None) -> Sequence[Agenda]:
        raise NotImplementedError

    def get(self, agenda_id: int) -> Optional[Agenda]:
        raise NotImplementedError

    def set_visibility(self, agenda_id: int, is_visible: bool) -> bool:
        raise NotImplementedError

    def close(self, agenda_id: int) -> bool:
        raise NotImplementedError

    def get_option(self, option_id: int) -> Optional[AgendaOption]:
        raise NotImplementedError

    def upsert_vote(self, *, agenda_id: int, voter_id: str, voter_name: str, option_id: int) -> None:
        """One ballot per (agenda, voter); voting again replaces the choice."""

        raise NotImplementedError

    def get_vote(self, *, agenda_id: int, voter_id: str) -> Optional[Ballot]:
        raise NotImplementedError

    def counts(self, agenda_id: int) -> Sequence[OptionCount]:
        raise NotImplementedError

    def ballots(self, agenda_id: int) -> Sequence[Ballot]:
        raise NotImplementedError
