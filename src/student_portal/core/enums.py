from __future__ import annotations

from enum import Enum
from typing import Optional


class Role(str, Enum):
    """Portal roles, stored in the identity provider metadata and the Users table."""

    ADMIN = "admin"
    DEV = "dev"
    COORDINATOR = "coordinator"
    SENATOR = "senator"
    ATTORNEY = "attorney"
    STUDENT = "student"

    @classmethod
    def parse(cls, value: object) -> Optional["Role"]:
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class EventType(str, Enum):
    SENATE_MEETING = "senate_meeting"
    COMMITTEE_MEETING = "committee_meeting"
    OFFICE_HOURS = "office_hours"
    ADMINISTRATOR = "administrator"
    MISC = "misc"


class TeamPosition(str, Enum):
    PRESIDENT = "president"
    VICE_PRESIDENT = "vicePresident"
    SPEAKER = "speaker"
