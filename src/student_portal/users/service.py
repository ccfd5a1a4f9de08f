from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..common.validators import require_non_empty
from ..core.constants import ADMIN_ROLES, ASSIGNABLE_ROLES, HOME_PATHS, PROVIDER_PAGE_SIZE, UNAUTHORIZED_PATH
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, ValidationError
from ..core.logger import get_logger
from ..identity.model import IdentityUser, Principal
from ..identity.provider import IdentityProvider
from .model import RoleSyncReport, RoleUpdate
from .repository import UserRepository

logger = get_logger(__name__)

_ASSIGNABLE = tuple(r.value for r in ASSIGNABLE_ROLES)
DEFAULT_PROVIDER_ONLY_ROLE = Role.SENATOR.value


def _username_from_email(email: Optional[str], fallback: str) -> str:
    local = (email or "").split("@")[0]
    return local or fallback


def _require_admin(current_role: Optional[Role]) -> None:
    if current_role not in ADMIN_ROLES:
        raise AuthorizationError("Forbidden: Admin access required")


def _require_assignable(role: object) -> str:
    if role not in _ASSIGNABLE:
        raise ValidationError(f"Invalid role: {role}. Must be one of: {', '.join(_ASSIGNABLE)}")
    return str(role)


class UserService:
    def __init__(
        self,
        users: UserRepository,
        identity: IdentityProvider,
        *,
        allowed_email_domains: Iterable[str] = (),
    ):
        self._users = users
        self._identity = identity
        self._allowed_domains = tuple(d.lower() for d in allowed_email_domains)

    # -------- Session helpers --------
    @staticmethod
    def home_for(principal: Principal) -> dict:
        path = HOME_PATHS.get(principal.role, UNAUTHORIZED_PATH) if principal.role else UNAUTHORIZED_PATH
        return {
            "user_id": principal.user_id,
            "role": principal.role.value if principal.role else None,
            "home": path,
        }

    def display_name(self, user_id: str, *, default: str = "Unknown") -> str:
        """Best-effort provider lookup; provider failures fall back to ``default``."""
        try:
            user = self._identity.get_user(user_id)
        except DomainError as e:
            logger.warning("Could not load identity user {}: {}", user_id, e)
            return default
        return user.display_name if user else default

    def get_identity(self, user_id: str) -> IdentityUser:
        user = self._identity.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    # -------- Provider-backed listing --------
    def list_all_users(self, *, current_role: Optional[Role]) -> list[dict]:
        _require_admin(current_role)
        users = self._all_identity_users()
        return [
            {
                "id": u.id,
                "firstName": u.first_name or "N/A",
                "lastName": u.last_name or "N/A",
                "email": u.email or "N/A",
                "role": u.role or "No role",
            }
            for u in users
        ]

    def get_user_role(self, *, user_id: str) -> Optional[str]:
        return self.get_identity(require_non_empty(user_id, "userId")).role

    # -------- Admin user management --------
    def create_user(
        self,
        *,
        current_role: Optional[Role],
        email: str,
        first_name: str,
        last_name: str,
        role: str,
        password: Optional[str] = None,
    ) -> dict:
        _require_admin(current_role)
        if not email or not first_name or not last_name or not role:
            raise ValidationError("Missing required fields: email, firstName, lastName, role")
        role = _require_assignable(role)

        created = self._identity.create_user(
            email=email.strip(),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=role,
            password=password or None,
        )
        username = _username_from_email(email, created.id)
        self._users.insert(user_id=created.id, username=username, role=role)
        logger.info("User {} created with role {}", created.id, role)

        return {
            "id": created.id,
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
            "role": role,
            "username": username,
        }

    def delete_user(self, *, current_role: Optional[Role], user_id: str) -> None:
        _require_admin(current_role)
        user_id = require_non_empty(user_id, "userId")
        self._identity.delete_user(user_id)
        self._users.delete(user_id)
        logger.info("User {} deleted", user_id)

    def update_role(self, *, current_role: Optional[Role], user_id: str, role: str) -> None:
        _require_admin(current_role)
        user_id = require_non_empty(user_id, "userId")
        self._apply_role(RoleUpdate(user_id=user_id, role=_require_assignable(role)))

    def _apply_role(self, update: RoleUpdate) -> None:
        self._identity.set_role(update.user_id, update.role)
        if not self._users.update_role(user_id=update.user_id, role=update.role):
            user = self._identity.get_user(update.user_id)
            username = _username_from_email(user.email if user else None, update.user_id)
            self._users.insert(user_id=update.user_id, username=username, role=update.role)

    def batch_update_roles(self, *, current_role: Optional[Role], updates: object) -> dict:
        _require_admin(current_role)
        if not isinstance(updates, list) or not updates:
            raise ValidationError("Missing or invalid updates array")

        parsed: list[RoleUpdate] = []
        for item in updates:
            if not isinstance(item, dict) or not item.get("userId") or not item.get("role"):
                raise ValidationError("Each update must have userId and role")
            parsed.append(RoleUpdate(user_id=str(item["userId"]), role=_require_assignable(item["role"])))

        results: list[dict] = []
        errors: list[dict] = []
        for update in parsed:
            try:
                self._apply_role(update)
            except DomainError as e:
                logger.warning("Role update failed for {}: {}", update.user_id, e)
                errors.append({"userId": update.user_id, "role": update.role, "error": str(e)})
                continue
            results.append({"userId": update.user_id, "role": update.role, "success": True})

        return {
            "message": f"Batch update completed: {len(results)} succeeded, {len(errors)} failed",
            "results": results,
            "errors": errors,
        }

    def assign_default_role(self, *, user_id: str, email: str) -> str:
        if not user_id or not email:
            raise ValidationError("Missing userId or email")

        domain = email[email.find("@"):].lower() if "@" in email else ""
        if not domain or not any(domain.endswith(d) for d in self._allowed_domains):
            logger.info("Default role refused for email domain of {}", email)
            return "Email domain is not allowed. No role assigned."

        user = self.get_identity(user_id)
        if user.role:
            return f"User already has role: {user.role}"

        self._identity.set_role(user_id, Role.STUDENT.value)
        return "Default role 'student' assigned successfully"

    # -------- Role sync --------
    def _all_identity_users(self) -> Sequence[IdentityUser]:
        users: list[IdentityUser] = []
        offset = 0
        while True:
            page = list(self._identity.list_users(limit=PROVIDER_PAGE_SIZE, offset=offset))
            users.extend(page)
            offset += PROVIDER_PAGE_SIZE
            if len(page) < PROVIDER_PAGE_SIZE:
                return users

    def sync_roles(self, *, fix: bool = False, provider_is_source: bool = False) -> RoleSyncReport:
        """Compare provider and database roles, optionally repairing the differences."""
        report = RoleSyncReport()
        db_users = {u.id: u for u in self._users.list_all()}
        provider_users = {u.id: u for u in self._all_identity_users()}

        for uid, pu in provider_users.items():
            row = db_users.get(uid)
            if row is None:
                report.provider_only.append({"userId": uid, "email": pu.email, "providerRole": pu.role or "NOT SET"})
            elif pu.role != row.role:
                report.mismatches.append(
                    {
                        "userId": uid,
                        "email": pu.email,
                        "username": row.username,
                        "providerRole": pu.role or "NOT SET",
                        "dbRole": row.role or "NOT SET",
                    }
                )

        for uid, row in db_users.items():
            if uid not in provider_users:
                report.db_only.append({"userId": uid, "username": row.username, "dbRole": row.role or "NOT SET"})

        if not fix:
            return report

        for m in report.mismatches:
            try:
                if provider_is_source:
                    role = provider_users[m["userId"]].role
                    if not role:
                        continue
                    self._users.update_role(user_id=m["userId"], role=role)
                else:
                    role = db_users[m["userId"]].role
                    if not role:
                        continue
                    self._identity.set_role(m["userId"], role)
                report.fixed += 1
            except DomainError as e:
                report.errors.append({"userId": m["userId"], "error": str(e)})

        for p in report.provider_only:
            pu = provider_users[p["userId"]]
            try:
                role = pu.role or DEFAULT_PROVIDER_ONLY_ROLE
                if not pu.role:
                    self._identity.set_role(pu.id, role)
                self._users.insert(user_id=pu.id, username=_username_from_email(pu.email, pu.id), role=role)
                report.fixed += 1
            except DomainError as e:
                report.errors.append({"userId": pu.id, "error": str(e)})

        return report
