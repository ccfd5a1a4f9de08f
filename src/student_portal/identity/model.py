from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class SessionClaims:
    user_id: str
    role: Optional[str] = None


@dataclass(frozen=True)
class IdentityUser:
    id: str
    email: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]
    role: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts)

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or "Unknown"

    @property
    def initials(self) -> str:
        letters = [p[0].upper() for p in (self.first_name, self.last_name) if p]
        return "".join(letters) or (self.email or "?")[0].upper()


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of a request."""

    user_id: str
    role: Optional[Role]
