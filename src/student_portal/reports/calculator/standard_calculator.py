from __future__ import annotations

from ...hours.model import HourRow
from .base import HourCalculator


class StandardHourCalculator(HourCalculator):
    """Standard rule: end - start in whole minutes, not below 0."""

    def credited_minutes(self, row: HourRow) -> int:
        minutes = int((row.end_time - row.start_time).total_seconds() // 60)
        return max(minutes, 0)
