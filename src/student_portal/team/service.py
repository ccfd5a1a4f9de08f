from __future__ import annotations

import os
from typing import Callable, Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..common.json_store import JsonFileStore
from ..common.periods import now_ms
from ..core.constants import ALLOWED_IMAGE_TYPES, MAX_IMAGE_BYTES
from ..core.enums import TeamPosition
from ..core.exceptions import ValidationError
from ..core.logger import get_logger

logger = get_logger(__name__)

TEAM_FILE = "team-members.json"
PUBLIC_IMAGE_PREFIX = "/images"


def _position(value: object) -> TeamPosition:
    try:
        return TeamPosition(value)
    except ValueError:
        raise ValidationError("Invalid position. Must be president, vicePresident, or speaker")


def _size_of(file: FileStorage) -> int:
    stream = file.stream
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(pos)
    return size


class TeamService:
    def __init__(self, data_dir: str, upload_dir: str, *, clock_ms: Optional[Callable[[], int]] = None):
        self._store = JsonFileStore(os.path.join(data_dir, TEAM_FILE), default=dict)
        self._upload_dir = upload_dir
        self._clock_ms = clock_ms or now_ms

    def get_members(self) -> dict:
        return self._store.read()

    def update_member(self, *, data: dict) -> dict:
        position, name, image = data.get("position"), data.get("name"), data.get("image")
        if not position or not name or not image:
            raise ValidationError("Missing required fields: position, name, image")
        key = _position(position).value

        def apply(members: dict) -> dict:
            members[key] = {**(members.get(key) or {}), "name": name, "image": image}
            return dict(members)

        members = self._store.update(apply)
        logger.info("Team member {} updated", key)
        return members

    def save_image(self, *, file: Optional[FileStorage], position: Optional[str]) -> str:
        """Store an uploaded portrait and return its public path."""
        if file is None or not file.filename:
            raise ValidationError("No file uploaded")
        if not position:
            raise ValidationError("Position is required")
        key = _position(position).value

        ext = ALLOWED_IMAGE_TYPES.get((file.mimetype or "").lower())
        if ext is None:
            raise ValidationError("Invalid file type. Please upload a JPEG, PNG, or WebP image.")
        if _size_of(file) > MAX_IMAGE_BYTES:
            raise ValidationError("File too large. Maximum size is 5MB.")

        filename = secure_filename(f"{key}_{self._clock_ms()}.{ext}")
        os.makedirs(self._upload_dir, exist_ok=True)
        file.save(os.path.join(self._upload_dir, filename))
        logger.info("Saved team image {}", filename)
        return f"{PUBLIC_IMAGE_PREFIX}/{filename}"
