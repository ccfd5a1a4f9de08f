from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from ..common.datetime_utils import iso_utc
from ..common.periods import format_period, get_zone, period_bounds, period_key
from ..core.constants import DEFAULT_ANCHOR_WEEKDAY
from ..core.logger import get_logger
from ..hours.repository import HourRepository
from .calculator.base import HourCalculator
from .calculator.standard_calculator import StandardHourCalculator

logger = get_logger(__name__)

CSV_FIELDS = ["period", "user_id", "name", "total_hours", "target_hours", "met_target"]


@dataclass(frozen=True)
class HourReport:
    periods: dict[str, dict[str, dict]]
    sorted_period_keys: list[str]
    target_hours: float
    labels: dict[str, str]

    def to_dict(self) -> dict:
        return {
            "periods": self.periods,
            "sortedPeriodKeys": self.sorted_period_keys,
            "TARGET_HOURS": self.target_hours,
            "labels": self.labels,
        }


class HourReportService:
    def __init__(
        self,
        hours: HourRepository,
        *,
        tz: str,
        target_hours: float,
        anchor_weekday: int = DEFAULT_ANCHOR_WEEKDAY,
        calculator: Optional[HourCalculator] = None,
    ):
        self._hours = hours
        self._zone = get_zone(tz)
        self._target = float(target_hours)
        self._anchor = anchor_weekday
        self._calculator = calculator or StandardHourCalculator()

    @property
    def target_hours(self) -> float:
        return self._target

    def current_period(self) -> int:
        return period_key(tz=self._zone, anchor_weekday=self._anchor)

    def label(self, key: int) -> str:
        return format_period(key, tz=self._zone, anchor_weekday=self._anchor)

    def utc_bounds(self, key: int) -> tuple[datetime, datetime]:
        """Period ``key`` as naive-UTC ``[start, end)``, the way hour rows are stored."""
        lo, hi = period_bounds(key, tz=self._zone, anchor_weekday=self._anchor)
        return (
            lo.astimezone(timezone.utc).replace(tzinfo=None),
            hi.astimezone(timezone.utc).replace(tzinfo=None),
        )

    def build(self, *, period: Optional[int] = None) -> HourReport:
        """Group hour rows by reporting period of their start time, then by user."""
        start, end = self.utc_bounds(period) if period is not None else (None, None)

        minutes_by_bucket: dict[tuple[str, str], int] = {}
        periods: dict[str, dict[str, dict]] = {}
        for row in self._hours.list_all(start=start, end=end):
            key = str(period_key(row.start_time, tz=self._zone, anchor_weekday=self._anchor))
            minutes = self._calculator.credited_minutes(row)

            bucket = periods.setdefault(key, {}).get(row.user_id)
            if bucket is None:
                bucket = {"total": 0.0, "name": row.username or row.user_id, "entries": []}
                periods[key][row.user_id] = bucket
            minutes_by_bucket[(key, row.user_id)] = minutes_by_bucket.get((key, row.user_id), 0) + minutes
            bucket["entries"].append(
                {
                    "id": row.id,
                    "activity": row.activity,
                    "notes": row.comments or "",
                    "start": iso_utc(row.start_time),
                    "end": iso_utc(row.end_time),
                    "hours": round(minutes / 60, 2),
                    "createdAt": iso_utc(row.created_at),
                }
            )

        for (key, user_id), minutes in minutes_by_bucket.items():
            bucket = periods[key][user_id]
            bucket["total"] = round(minutes / 60, 2)
            bucket["met_target"] = bucket["total"] >= self._target

        sorted_keys = sorted(periods, key=int, reverse=True)
        labels = {k: self.label(int(k)) for k in sorted_keys}
        return HourReport(periods=periods, sorted_period_keys=sorted_keys, target_hours=self._target, labels=labels)

    def csv_rows(self, *, period: Optional[int] = None) -> list[dict]:
        report = self.build(period=period)
        rows = []
        for key in report.sorted_period_keys:
            users = sorted(report.periods[key].items(), key=lambda kv: kv[1]["total"], reverse=True)
            for user_id, bucket in users:
                rows.append(
                    {
                        "period": report.labels[key],
                        "user_id": user_id,
                        "name": bucket["name"],
                        "total_hours": f"{bucket['total']:.2f}",
                        "target_hours": f"{self._target:g}",
                        "met_target": "yes" if bucket["met_target"] else "no",
                    }
                )
        return rows

    def period_summary(self, key: int) -> dict:
        users = self.build(period=key).periods.get(str(key), {})
        met = sum(1 for b in users.values() if b["met_target"])
        return {
            "period": key,
            "label": self.label(key),
            "users": len(users),
            "metTarget": met,
            "targetHours": self._target,
        }
