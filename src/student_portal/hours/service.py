"""Senator hour logging.

A submission is a set of worked segments entered in portal-local civil time.
Each segment is stored as one ``Hours`` row in UTC, and all rows of one
submission share the same ``created_at``. That shared timestamp is what the
``entry_<user>_<ms>`` ids encode, so listing and deleting work on whole
submissions.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from ..common.datetime_utils import iso_utc, parse_clock, parse_iso_date, utc_now
from ..common.periods import from_epoch_ms, get_zone, to_epoch_ms
from ..common.validators import optional_text
from ..core.constants import ACTIVITY_MAX_LENGTH, ENTRY_MATCH_WINDOW_SECONDS
from ..core.exceptions import ValidationError
from ..core.logger import get_logger
from ..users.service import UserService
from .model import HourRow, Span
from .repository import HourRepository

logger = get_logger(__name__)


def entry_id(user_id: str, created_at: datetime) -> str:
    return f"entry_{user_id}_{to_epoch_ms(created_at)}"


def parse_entry_id(value: Any) -> int:
    """Return the epoch-ms timestamp encoded in an ``entry_<...>_<ms>`` id."""
    if not value or not isinstance(value, str):
        raise ValidationError("Missing entryId")
    parts = value.split("_")
    if len(parts) < 3 or parts[0] != "entry":
        raise ValidationError("Invalid entryId format")
    try:
        ms = int(parts[-1])
    except ValueError:
        raise ValidationError("Invalid timestamp in entryId")
    if ms <= 0:
        raise ValidationError("Invalid timestamp in entryId")
    return ms


class HourLogService:
    def __init__(
        self,
        hours: HourRepository,
        users: UserService,
        *,
        tz: str,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._hours = hours
        self._users = users
        self._zone = get_zone(tz)
        self._clock = clock or utc_now

    def _to_utc(self, local: datetime) -> datetime:
        return local.replace(tzinfo=self._zone).astimezone(timezone.utc).replace(tzinfo=None)

    def _to_local(self, utc: datetime) -> datetime:
        return utc.replace(tzinfo=timezone.utc).astimezone(self._zone)

    def _parse_segment(self, seg: Any) -> Optional[tuple[dict, Span, int]]:
        if not isinstance(seg, dict) or not seg.get("date") or not seg.get("start") or not seg.get("end"):
            return None
        try:
            day = parse_iso_date(str(seg["date"]), "segment date")
            start_clock = parse_clock(str(seg["start"]), "segment start")
            end_clock = parse_clock(str(seg["end"]), "segment end")
        except ValidationError as e:
            logger.warning("Skipping segment {}: {}", seg, e)
            return None

        start = datetime.combine(day, start_clock)
        end = datetime.combine(day, end_clock)
        if end <= start:
            end += timedelta(days=1)
        minutes = int((end - start).total_seconds() // 60)

        echoed = {"date": day.isoformat(), "start": start_clock.strftime("%H:%M"), "end": end_clock.strftime("%H:%M")}
        return echoed, Span(start_time=self._to_utc(start), end_time=self._to_utc(end)), minutes

    def log_hours(self, *, user_id: str, data: dict) -> dict:
        date_value = data.get("date")
        segments = data.get("segments")
        if not date_value or not isinstance(segments, list) or not segments:
            raise ValidationError("Missing required fields: date and segments")

        notes = optional_text(data.get("notes"))
        if not notes:
            raise ValidationError("Notes are required")

        parsed = [p for p in (self._parse_segment(s) for s in segments) if p is not None]
        if not parsed:
            raise ValidationError("No valid segments provided")

        activity = (optional_text(data.get("activity")) or notes)[:ACTIVITY_MAX_LENGTH]
        now = self._clock()
        created_at = now.replace(microsecond=(now.microsecond // 1000) * 1000)

        self._hours.insert_many(
            user_id=user_id,
            activity=activity,
            comments=notes,
            created_at=created_at,
            spans=[span for _, span, _ in parsed],
        )
        total_minutes = sum(minutes for _, _, minutes in parsed)
        logger.info("User {} logged {} segment(s), {} minutes", user_id, len(parsed), total_minutes)

        return {
            "id": entry_id(user_id, created_at),
            "userId": user_id,
            "senatorName": self._users.display_name(user_id),
            "date": str(date_value),
            "hours": round(total_minutes / 60, 2),
            "activity": activity,
            "notes": notes,
            "createdAt": iso_utc(created_at),
            "segments": [echoed for echoed, _, _ in parsed],
        }

    def list_entries(self, *, user_id: str) -> list[dict]:
        rows = self._hours.list_for_user(user_id)
        if not rows:
            return []

        name = self._users.display_name(user_id)
        grouped: dict[datetime, list[HourRow]] = {}
        for row in rows:
            grouped.setdefault(row.created_at, []).append(row)

        entries = []
        for created_at, group in grouped.items():
            first_start = self._to_local(group[0].start_time)
            segments = []
            for row in group:
                start = self._to_local(row.start_time)
                end = self._to_local(row.end_time)
                segments.append({"date": start.date().isoformat(), "start": f"{start:%H:%M}", "end": f"{end:%H:%M}"})
            entries.append(
                {
                    "id": entry_id(user_id, created_at),
                    "userId": user_id,
                    "senatorName": name,
                    "date": first_start.date().isoformat(),
                    "hours": round(sum(r.hours for r in group), 2),
                    "activity": group[0].activity,
                    "notes": group[0].comments or "",
                    "createdAt": iso_utc(created_at),
                    "segments": segments,
                }
            )
        entries.sort(key=lambda e: e["createdAt"], reverse=True)
        return entries

    def delete_entry(self, *, user_id: str, entry_id_value: Any) -> int:
        ms = parse_entry_id(entry_id_value)
        try:
            created_at = from_epoch_ms(ms).replace(tzinfo=None)
        except (OverflowError, ValueError):
            raise ValidationError("Invalid timestamp in entryId")
        window = timedelta(seconds=ENTRY_MATCH_WINDOW_SECONDS)
        deleted = self._hours.delete_submission(
            user_id=user_id,
            created_from=created_at - window,
            created_to=created_at + window,
        )
        logger.info("User {} deleted {} hour row(s) for {}", user_id, deleted, entry_id_value)
        return deleted

    def hours_in_range(self, *, user_id: str, start: datetime, end: datetime) -> float:
        """Total hours the user logged with a start time in ``[start, end)`` (naive UTC)."""
        return round(sum(r.hours for r in self._hours.list_for_user(user_id) if start <= r.start_time < end), 2)
