from __future__ import annotations

from typing import Any, Optional

from ..common.datetime_utils import iso_utc
from ..common.validators import optional_text, require_int
from ..core.constants import ADMIN_ROLES, MODERATOR_ROLES
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import LibraryInput, LibraryItem, LibraryKind
from .repository import LibraryRepository


def item_to_dict(item: LibraryItem) -> dict:
    out = {
        "id": item.id,
        "created_by": item.created_by,
        "title": item.title,
        "description": item.description,
        "link": item.link,
        "image_url": item.image_url,
        "created_at": iso_utc(item.created_at),
        "updated_at": iso_utc(item.updated_at),
        "creator_username": item.creator_username,
    }
    if item.kind is LibraryKind.ARCHIVE:
        out["archive_type"] = item.archive_type
    return out


class LibraryService:
    """Archives and resources share one lifecycle; archives also carry a type."""

    def __init__(self, library: LibraryRepository):
        self._library = library

    @staticmethod
    def _parse_input(kind: LibraryKind, data: dict, *, with_id: bool = False) -> LibraryInput:
        title = optional_text(data.get("title"))
        link = optional_text(data.get("link"))
        archive_type = optional_text(data.get("archive_type"))

        checks = [("id", data.get("id"))] if with_id else []
        checks += [("title", title), ("link", link)]
        if kind is LibraryKind.ARCHIVE:
            checks.append(("archive_type", archive_type))
        if not all(value for _, value in checks):
            names = ", ".join(name for name, _ in checks)
            raise ValidationError(f"Missing required fields: {names} are required")

        return LibraryInput(
            title=title,
            description=optional_text(data.get("description")),
            link=link,
            image_url=optional_text(data.get("image_url")),
            archive_type=archive_type if kind is LibraryKind.ARCHIVE else None,
        )

    def _get_or_404(self, kind: LibraryKind, item_id: Any) -> LibraryItem:
        item = self._library.get(kind, require_int(item_id, f"{kind.label} ID"))
        if not item:
            raise NotFoundError(f"{kind.label} not found")
        return item

    def add(self, kind: LibraryKind, *, user_id: str, data: dict) -> int:
        return self._library.create(kind, created_by=user_id, item=self._parse_input(kind, data))

    def list(self, kind: LibraryKind, *, archive_type: Optional[str] = None) -> list[dict]:
        if archive_type == "all":
            archive_type = None
        return [item_to_dict(i) for i in self._library.list(kind, archive_type=archive_type or None)]

    def update(self, kind: LibraryKind, *, user_id: str, data: dict) -> None:
        item_input = self._parse_input(kind, data, with_id=True)
        item = self._get_or_404(kind, data["id"])
        if item.created_by != user_id:
            raise AuthorizationError(f"Forbidden: You can only edit your own {kind.value}s")
        self._library.update(kind, item.id, item_input)

    def delete(self, kind: LibraryKind, *, user_id: str, current_role: Optional[Role], item_id: Any) -> None:
        if not item_id:
            raise ValidationError(f"{kind.label} ID is required")
        item = self._get_or_404(kind, item_id)
        if item.created_by != user_id and current_role not in MODERATOR_ROLES:
            raise AuthorizationError(f"You don't have permission to delete this {kind.value}")
        self._library.delete(kind, item.id)

    def clear_all(self, *, current_role: Optional[Role]) -> dict:
        if current_role not in ADMIN_ROLES:
            raise AuthorizationError("Forbidden: Only admins can clear all content")
        archives, resources = self._library.clear_all()
        return {
            "message": "All archives and resources deleted successfully",
            "archivesDeleted": archives,
            "resourcesDeleted": resources,
        }
