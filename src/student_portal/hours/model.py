from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class HourRow:
    """One worked segment. All datetimes are naive UTC."""

    id: int
    user_id: str
    activity: str
    comments: Optional[str]
    start_time: datetime
    end_time: datetime
    created_at: datetime
    username: Optional[str] = None

    @property
    def hours(self) -> float:
        return max((self.end_time - self.start_time).total_seconds(), 0) / 3600


@dataclass(frozen=True)
class Span:
    start_time: datetime
    end_time: datetime
