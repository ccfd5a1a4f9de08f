from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import PortalUser


class UserRepository(Protocol):
    def get(self, user_id: str) -> Optional[PortalUser]:
        raise NotImplementedError

    def list_all(self) -> Sequence[PortalUser]:
        raise NotImplementedError

    def list_by_role(self, role: str, *, limit: Optional[int] = None) -> Sequence[PortalUser]:
        raise NotImplementedError

    def insert(self, *, user_id: str, username: str, role: Optional[str]) -> None:
        raise NotImplementedError

    def update_role(self, *, user_id: str, role: str) -> bool:
        """Return False when no row exists for the user."""

        raise NotImplementedError

    def delete(self, user_id: str) -> bool:
        raise NotImplementedError

    def count_by_role(self) -> dict[str, int]:
        raise NotImplementedError
