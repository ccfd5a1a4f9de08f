"""HTTP client for the hosted identity provider (Clerk Backend API).

Session tokens are RS256 JWTs signed by the provider; they are verified
locally against the provider's JWKS document. User management goes through
the Backend API authenticated with the instance secret key.
"""
from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional, Sequence

import httpx
from cachetools import TTLCache
from jose import JWTError, jwt

from ..core.exceptions import AuthenticationError, ConflictError, IdentityProviderError, ValidationError
from ..core.logger import get_logger
from .model import IdentityUser, SessionClaims

logger = get_logger(__name__)

_JWKS_TTL_SECONDS = 3600
_SESSION_CACHE_SIZE = 1000
_SESSION_TTL_SECONDS = 60


def _user_from_payload(data: dict) -> IdentityUser:
    emails = data.get("email_addresses") or []
    primary_id = data.get("primary_email_address_id")
    email = None
    for e in emails:
        if primary_id and e.get("id") == primary_id:
            email = e.get("email_address")
            break
    if email is None and emails:
        email = emails[0].get("email_address")

    metadata = data.get("public_metadata") or {}
    return IdentityUser(
        id=str(data["id"]),
        email=email,
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        role=metadata.get("role"),
        image_url=data.get("image_url"),
    )


def _role_from_claims(claims: dict) -> Optional[str]:
    role = claims.get("role")
    if role:
        return str(role)
    for key in ("metadata", "public_metadata"):
        meta = claims.get(key)
        if isinstance(meta, dict) and meta.get("role"):
            return str(meta["role"])
    return None


class ClerkIdentityProvider:
    def __init__(
        self,
        *,
        api_url: str,
        secret_key: str,
        jwks_url: str,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
    ):
        self._api_url = api_url.rstrip("/")
        self._jwks_url = jwks_url
        self._client = client or httpx.Client(timeout=timeout)
        self._headers = {"Authorization": f"Bearer {secret_key}"}
        self._jwks_cache: TTLCache[str, dict] = TTLCache(maxsize=1, ttl=_JWKS_TTL_SECONDS)
        self._clock = clock
        # token -> (claims, exp); exp is re-checked on every hit
        self._session_cache: TTLCache[str, tuple[SessionClaims, Optional[float]]] = TTLCache(
            maxsize=_SESSION_CACHE_SIZE, ttl=_SESSION_TTL_SECONDS
        )
        self._lock = threading.Lock()

    # -------- Sessions --------
    def _jwks(self) -> dict:
        with self._lock:
            cached = self._jwks_cache.get("jwks")
        if cached is not None:
            return cached
        try:
            resp = self._client.get(self._jwks_url)
        except httpx.RequestError as e:
            logger.error("JWKS request failed: {}", e)
            raise IdentityProviderError("Authentication service unavailable") from e
        if resp.status_code != 200:
            raise IdentityProviderError("Authentication service unavailable", status_code=resp.status_code)
        keys = resp.json()
        with self._lock:
            self._jwks_cache["jwks"] = keys
        return keys

    def verify_session(self, token: str) -> SessionClaims:
        with self._lock:
            cached = self._session_cache.get(token)
        if cached is not None:
            session, expires_at = cached
            if expires_at is None or self._clock() < expires_at:
                return session
            with self._lock:
                self._session_cache.pop(token, None)
            raise AuthenticationError("Unauthorized")

        try:
            claims = jwt.decode(token, self._jwks(), algorithms=["RS256"], options={"verify_aud": False})
        except JWTError as e:
            logger.info("Rejected session token: {}", e)
            raise AuthenticationError("Unauthorized") from e

        user_id = claims.get("sub")
        if not user_id:
            raise AuthenticationError("Unauthorized")

        exp = claims.get("exp")
        session = SessionClaims(user_id=str(user_id), role=_role_from_claims(claims))
        with self._lock:
            self._session_cache[token] = (session, float(exp) if isinstance(exp, (int, float)) else None)
        return session

    # -------- Backend API --------
    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._client.request(method, f"{self._api_url}{path}", headers=self._headers, **kwargs)
        except httpx.RequestError as e:
            logger.error("Identity provider {} {} failed: {}", method, path, e)
            raise IdentityProviderError("Identity provider unavailable") from e
        return resp

    @staticmethod
    def _raise_for_status(resp: httpx.Response, action: str) -> None:
        if resp.status_code < 400:
            return

        try:
            errors = resp.json().get("errors") or []
        except ValueError:
            errors = []
        codes = {e.get("code") for e in errors if isinstance(e, dict)}
        message = next((e.get("long_message") or e.get("message") for e in errors if isinstance(e, dict)), None)

        if codes & {"form_identifier_exists", "duplicate_record"}:
            raise ConflictError(message or "User already exists")
        if resp.status_code in (400, 422):
            raise ValidationError(message or f"Failed to {action}")
        raise IdentityProviderError(message or f"Failed to {action}", status_code=resp.status_code)

    def get_user(self, user_id: str) -> Optional[IdentityUser]:
        resp = self._request("GET", f"/users/{user_id}")
        if resp.status_code == 404:
            return None
        self._raise_for_status(resp, "fetch user")
        return _user_from_payload(resp.json())

    def list_users(self, *, limit: int, offset: int) -> Sequence[IdentityUser]:
        resp = self._request("GET", "/users", params={"limit": int(limit), "offset": int(offset)})
        self._raise_for_status(resp, "list users")
        payload = resp.json()
        # The endpoint returns a bare array; paginated wrappers carry it under "data".
        rows = payload.get("data", []) if isinstance(payload, dict) else payload
        return [_user_from_payload(r) for r in rows]

    def create_user(
        self,
        *,
        email: str,
        first_name: str,
        last_name: str,
        role: str,
        password: Optional[str] = None,
    ) -> IdentityUser:
        body: dict[str, Any] = {
            "email_address": [email],
            "first_name": first_name,
            "last_name": last_name,
            "public_metadata": {"role": role},
        }
        if password:
            body["password"] = password
        else:
            body["skip_password_requirement"] = True

        resp = self._request("POST", "/users", json=body)
        self._raise_for_status(resp, "create user")
        return _user_from_payload(resp.json())

    def delete_user(self, user_id: str) -> None:
        resp = self._request("DELETE", f"/users/{user_id}")
        self._raise_for_status(resp, "delete user")

    def set_role(self, user_id: str, role: str) -> None:
        resp = self._request("PATCH", f"/users/{user_id}/metadata", json={"public_metadata": {"role": role}})
        self._raise_for_status(resp, "update user role")
