from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class PortalUser:
    id: str
    username: str
    role: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class RoleUpdate:
    user_id: str
    role: str


@dataclass
class RoleSyncReport:
    mismatches: list[dict] = field(default_factory=list)
    provider_only: list[dict] = field(default_factory=list)
    db_only: list[dict] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)
    fixed: int = 0

    @property
    def issue_count(self) -> int:
        return len(self.mismatches) + len(self.provider_only) + len(self.db_only)
