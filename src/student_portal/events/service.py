from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from ..common.periods import from_epoch_ms, get_zone
from ..common.validators import as_flag, normalize_color, optional_text, require_int, require_max_length
from ..core.constants import BORDER_DARKEN_AMOUNT, DEFAULT_EVENT_COLOR, EVENT_TITLE_MAX_LENGTH, MODERATOR_ROLES
from ..core.enums import EventType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import CUSTOM_TEXT_COLOR, EVENT_TYPE_STYLES, Event, NewEvent
from .repository import EventRepository

_VALID_TYPES = ", ".join(t.value for t in EventType)


def darken_color(hex_color: str, amount: int = BORDER_DARKEN_AMOUNT) -> str:
    """Subtract ``amount`` from each RGB channel, clamping at 0."""
    value = int(normalize_color(hex_color, DEFAULT_EVENT_COLOR).lstrip("#"), 16)
    r = max(0, ((value >> 16) & 0xFF) - amount)
    g = max(0, ((value >> 8) & 0xFF) - amount)
    b = max(0, (value & 0xFF) - amount)
    return f"#{(r << 16) | (g << 8) | b:06x}"


def _style_for(event_type: Optional[str]):
    try:
        return EVENT_TYPE_STYLES[EventType(event_type)]
    except ValueError:
        return None


def _event_type_or_none(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    try:
        return EventType(value).value
    except ValueError:
        raise ValidationError(f"Invalid event type. Must be one of: {_VALID_TYPES}")


class EventService:
    """Calendar events.

    Event times are civil times in the portal zone and are stored naive.
    Range filters given as epoch milliseconds or offset-aware ISO strings are
    converted into that zone before querying.
    """

    def __init__(self, events: EventRepository, *, tz: str):
        self._events = events
        self._zone = get_zone(tz)

    def _to_local(self, value: Union[str, int, float, datetime, None], field_name: str) -> Optional[datetime]:
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, (int, float)) or (isinstance(value, str) and value.strip().lstrip("-").isdigit()):
            try:
                dt = from_epoch_ms(int(value))
            except (OverflowError, ValueError):
                raise ValidationError(f"Invalid {field_name}")
        else:
            text = str(value).strip()
            if text.endswith(("Z", "z")):
                text = text[:-1] + "+00:00"
            try:
                dt = datetime.fromisoformat(text)
            except ValueError:
                raise ValidationError(f"Invalid {field_name}")
        if dt.tzinfo is not None:
            try:
                dt = dt.astimezone(self._zone).replace(tzinfo=None)
            except OverflowError:
                raise ValidationError(f"Invalid {field_name}")
        return dt

    def _ensure_can_modify(self, event: Event, *, user_id: str, current_role: Optional[Role], action: str) -> None:
        if current_role in MODERATOR_ROLES or event.created_by == user_id:
            return
        raise AuthorizationError(f"You don't have permission to {action} this event")

    def _get_or_404(self, event_id: Any) -> Event:
        event = self._events.get(require_int(event_id, "Event ID"))
        if not event:
            raise NotFoundError("Event not found")
        return event

    def add_event(self, *, user_id: str, data: dict) -> int:
        title = data.get("title")
        start_raw = data.get("start_time")
        if not title or not start_raw:
            raise ValidationError("Missing required fields: title and start_time")
        title = require_max_length(str(title).strip(), "Title", EVENT_TITLE_MAX_LENGTH)

        return self._events.create(
            NewEvent(
                created_by=user_id,
                title=title,
                description=optional_text(data.get("description")),
                location=optional_text(data.get("location")),
                start_time=self._to_local(start_raw, "start_time"),
                end_time=self._to_local(data.get("end_time"), "end_time"),
                is_all_day=as_flag(data.get("is_all_day")),
                event_type=_event_type_or_none(data.get("event_type")),
                color=normalize_color(data.get("color"), DEFAULT_EVENT_COLOR),
            )
        )

    def list_events(self, *, start: Any = None, end: Any = None) -> list[dict]:
        rows = self._events.list_between(start=self._to_local(start, "start"), end=self._to_local(end, "end"))
        return [self.to_calendar(e) for e in rows]

    @staticmethod
    def to_calendar(event: Event) -> dict:
        if event.is_all_day:
            start = event.start_time.strftime("%Y-%m-%d")
            end = event.end_time.strftime("%Y-%m-%d") if event.end_time else None
        else:
            start = event.start_time.strftime("%Y-%m-%dT%H:%M:%S")
            end = event.end_time.strftime("%Y-%m-%dT%H:%M:%S") if event.end_time else None

        style = _style_for(event.event_type)
        if style:
            colors = (style.background_color, style.border_color, style.text_color)
        else:
            custom = event.color or DEFAULT_EVENT_COLOR
            colors = (custom, darken_color(custom), CUSTOM_TEXT_COLOR)

        return {
            "id": str(event.id),
            "title": event.title,
            "description": event.description or "",
            "location": event.location or "",
            "start": start,
            "end": end,
            "allDay": event.is_all_day,
            "backgroundColor": colors[0],
            "borderColor": colors[1],
            "textColor": colors[2],
            "extendedProps": {
                "created_by": event.created_by,
                "description": event.description or "",
                "location": event.location or "",
                "is_all_day": event.is_all_day,
                "event_type": event.event_type,
            },
        }

    def update_event(self, *, user_id: str, current_role: Optional[Role], data: dict) -> None:
        if not data.get("id"):
            raise ValidationError("Event ID is required")
        event = self._get_or_404(data["id"])
        self._ensure_can_modify(event, user_id=user_id, current_role=current_role, action="update")

        fields: dict[str, Any] = {}
        if "title" in data:
            title = str(data["title"] or "").strip()
            if not title or len(title) > EVENT_TITLE_MAX_LENGTH:
                raise ValidationError(f"Title must be between 1 and {EVENT_TITLE_MAX_LENGTH} characters")
            fields["title"] = title
        if "event_type" in data:
            fields["event_type"] = _event_type_or_none(data["event_type"])
        if "description" in data:
            fields["description"] = optional_text(data["description"])
        if "start_time" in data:
            start = self._to_local(data["start_time"], "start_time")
            if start is None:
                raise ValidationError("start_time cannot be empty")
            fields["start_time"] = start
        if "end_time" in data:
            fields["end_time"] = self._to_local(data["end_time"], "end_time")
        if "location" in data:
            fields["location"] = optional_text(data["location"])
        if "is_all_day" in data:
            fields["is_all_day"] = as_flag(data["is_all_day"])
        if "color" in data:
            fields["color"] = normalize_color(data["color"], DEFAULT_EVENT_COLOR)

        if not fields:
            raise ValidationError("No fields to update")
        self._events.update_fields(event.id, fields)

    def delete_event(self, *, user_id: str, current_role: Optional[Role], event_id: Any) -> None:
        if not event_id:
            raise ValidationError("Event ID is required")
        event = self._get_or_404(event_id)
        self._ensure_can_modify(event, user_id=user_id, current_role=current_role, action="delete")
        self._events.delete(event.id)
