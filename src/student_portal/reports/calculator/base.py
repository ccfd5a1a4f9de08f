from __future__ import annotations

from abc import ABC, abstractmethod

from ...hours.model import HourRow


class HourCalculator(ABC):
    """Calculator interface (Strategy Pattern for credited hours)."""

    @abstractmethod
    def credited_minutes(self, row: HourRow) -> int:
        raise NotImplementedError
