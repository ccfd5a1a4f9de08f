from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import HourRow, Span


class HourRepository(Protocol):
    def insert_many(
        self,
        *,
        user_id: str,
        activity: str,
        comments: str,
        created_at: datetime,
        spans: Sequence[Span],
    ) -> int:
        """Insert every span as a row sharing ``created_at``, in one transaction."""

        raise NotImplementedError

    def list_for_user(self, user_id: str) -> Sequence[HourRow]:
        """Newest submission first."""

        raise NotImplementedError

    def list_all(self, *, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Sequence[HourRow]:
        """Rows whose start time falls in ``[start, end)``, joined with the username."""

        raise NotImplementedError

    def delete_submission(self, *, user_id: str, created_from: datetime, created_to: datetime) -> int:
        raise NotImplementedError
