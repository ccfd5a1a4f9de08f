"""Session resolution and role guards for the JSON routes.

The session token comes from the identity provider's cookie or from an
``Authorization: Bearer`` header. The caller's role is read from the Users
table when the user has a row there, and from the session claim otherwise.
"""
from __future__ import annotations

from functools import wraps
from typing import TYPE_CHECKING, Optional

from flask import g, request

from ..core.constants import ADMIN_ROLES
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..identity.model import Principal

if TYPE_CHECKING:
    from ..container import Container


def session_token(cookie_name: str) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    parts = header.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return request.cookies.get(cookie_name) or None


def resolve_role(container: "Container", user_id: str, claim_role: Optional[str]) -> Optional[Role]:
    row = container.users_repo.get(user_id)
    if row is not None:
        return Role.parse(row.role)
    return Role.parse(claim_role)


def load_principal(container: "Container") -> Principal:
    principal = g.get("principal")
    if principal is not None:
        return principal

    token = session_token(container.settings.session_cookie)
    if not token:
        raise AuthenticationError("Unauthorized")

    claims = container.identity.verify_session(token)
    principal = Principal(user_id=claims.user_id, role=resolve_role(container, claims.user_id, claims.role))
    g.principal = principal
    return principal


def current_principal() -> Principal:
    principal = g.get("principal")
    if principal is None:
        raise AuthenticationError("Unauthorized")
    return principal


def login_required(container: "Container"):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            load_principal(container)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(container: "Container", *roles: Role):
    """Allow the listed roles; admin and dev always pass."""
    allowed = set(roles) | ADMIN_ROLES

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            principal = load_principal(container)
            if principal.role not in allowed:
                raise AuthorizationError("Forbidden")
            return view(*args, **kwargs)

        return wrapper

    return decorator
