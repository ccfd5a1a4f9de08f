from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from .model import Event, NewEvent


class EventRepository(Protocol):
    def create(self, event: NewEvent) -> int:
        raise NotImplementedError

    def get(self, event_id: int) -> Optional[Event]:
        raise NotImplementedError

    def list_between(self, *, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Sequence[Event]:
        """Events whose start_time falls in ``[start, end]``, ordered by start."""

        raise NotImplementedError

    def update_fields(self, event_id: int, fields: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, event_id: int) -> bool:
        raise NotImplementedError
