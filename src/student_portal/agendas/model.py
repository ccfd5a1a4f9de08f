from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AgendaOption:
    id: int
    agenda_id: int
    option_text: str


@dataclass(frozen=True)
class Agenda:
    id: int
    speaker_id: str
    title: str
    description: Optional[str]
    is_visible: bool
    is_open: bool
    created_at: Optional[datetime] = None
    options: tuple[AgendaOption, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class OptionCount:
    option_id: int
    label: str
    value: int


@dataclass(frozen=True)
class Ballot:
    voter_id: str
    voter_name: Optional[str]
    option_id: int
    option_text: str
