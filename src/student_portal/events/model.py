from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import EventType


@dataclass(frozen=True)
class EventTypeStyle:
    label: str
    background_color: str
    border_color: str
    text_color: str


EVENT_TYPE_STYLES: dict[EventType, EventTypeStyle] = {
    EventType.SENATE_MEETING: EventTypeStyle("Senate Meeting", "#C084FC", "#9D45FC", "#000000"),
    EventType.COMMITTEE_MEETING: EventTypeStyle("Committee Meeting", "#6EE07E", "#34C237", "#000000"),
    EventType.OFFICE_HOURS: EventTypeStyle("Office Hours", "#FFD84D", "#FFBF00", "#000000"),
    EventType.ADMINISTRATOR: EventTypeStyle("Administrator", "#FF6B6B", "#FF3A3A", "#000000"),
    EventType.MISC: EventTypeStyle("Misc.", "#73ADFF", "#2E82E8", "#000000"),
}

# Rows without an event type render with their own colour
CUSTOM_TEXT_COLOR = "#1E40AF"


@dataclass(frozen=True)
class Event:
    id: int
    created_by: str
    title: str
    description: Optional[str]
    location: Optional[str]
    start_time: datetime
    end_time: Optional[datetime]
    is_all_day: bool
    event_type: Optional[str]
    color: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewEvent:
    created_by: str
    title: str
    description: Optional[str]
    location: Optional[str]
    start_time: datetime
    end_time: Optional[datetime]
    is_all_day: int
    event_type: Optional[str]
    color: str
