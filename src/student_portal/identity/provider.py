from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import IdentityUser, SessionClaims


class IdentityProvider(Protocol):
    def verify_session(self, token: str) -> SessionClaims:
        """Validate a session token; raise AuthenticationError when it is not valid."""

        raise NotImplementedError

    def get_user(self, user_id: str) -> Optional[IdentityUser]:
        raise NotImplementedError

    def list_users(self, *, limit: int, offset: int) -> Sequence[IdentityUser]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        email: str,
        first_name: str,
        last_name: str,
        role: str,
        password: Optional[str] = None,
    ) -> IdentityUser:
        raise NotImplementedError

    def delete_user(self, user_id: str) -> None:
        raise NotImplementedError

    def set_role(self, user_id: str, role: str) -> None:
        raise NotImplementedError
