from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import LibraryInput, LibraryItem, LibraryKind


class LibraryRepository(Protocol):
    def create(self, kind: LibraryKind, *, created_by: str, item: LibraryInput) -> int:
        raise NotImplementedError

    def get(self, kind: LibraryKind, item_id: int) -> Optional[LibraryItem]:
        raise NotImplementedError

    def list(self, kind: LibraryKind, *, archive_type: Optional[str] = None) -> Sequence[LibraryItem]:
        """Newest first, joined with the creator's username."""

        raise NotImplementedError

    def update(self, kind: LibraryKind, item_id: int, item: LibraryInput) -> bool:
        raise NotImplementedError

    def delete(self, kind: LibraryKind, item_id: int) -> bool:
        raise NotImplementedError

    def clear_all(self) -> tuple[int, int]:
        """Delete every archive and resource; return ``(archives, resources)`` counts."""

        raise NotImplementedError
