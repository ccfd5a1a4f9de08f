from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class LibraryKind(str, Enum):
    ARCHIVE = "archive"
    RESOURCE = "resource"

    @property
    def label(self) -> str:
        return "Archive" if self is LibraryKind.ARCHIVE else "Resource"


@dataclass(frozen=True)
class LibraryItem:
    id: int
    kind: LibraryKind
    created_by: str
    title: str
    description: Optional[str]
    link: str
    image_url: Optional[str]
    archive_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    creator_username: Optional[str] = None


@dataclass(frozen=True)
class LibraryInput:
    title: str
    description: Optional[str]
    link: str
    image_url: Optional[str]
    archive_type: Optional[str] = None
