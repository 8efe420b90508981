"""
Calendar value types shared by the recurrence expander and the slot finder
"""
import copy
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from config.settings import Config

# Recurrence rules that are expanded into instances. Anything else
# ('none', 'custom', missing or unknown) passes through untouched.
RECURRING_RULES = ("daily", "weekly", "monthly", "yearly")
RECURRENCE_CHOICES = ("none",) + RECURRING_RULES + ("custom",)


def parse_datetime(value: Any) -> datetime:
    """Parse an ISO-8601 string (or pass a datetime through)"""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected ISO datetime string, got {value!r}")
    # fromisoformat only learned the 'Z' suffix in 3.11
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def local_wall_clock(value: Any) -> datetime:
    """Parse a datetime and express it as naive local wall-clock time"""
    parsed = parse_datetime(value)
    if parsed.tzinfo is None:
        return parsed
    return parsed.astimezone().replace(tzinfo=None)


class CalendarEvent:
    """A scheduled block of time, either a definition or an expanded instance"""

    def __init__(self, event_id: str, start: datetime, end: datetime,
                 title: str = "", color: str = Config.DEFAULT_EVENT_COLOR, source: str = "local",
                 all_day: bool = False, recurrence: Optional[str] = None,
                 recurrence_custom: Optional[str] = None,
                 importance: Optional[str] = None,
                 guest_ids: Optional[List[str]] = None,
                 description: Optional[str] = None,
                 location: Optional[str] = None,
                 google_event_id: Optional[str] = None):
        self.id = event_id
        self.start = start
        self.end = end
        self.title = title
        self.color = color
        self.source = source
        self.all_day = all_day
        self.recurrence = recurrence
        self.recurrence_custom = recurrence_custom
        self.importance = importance
        self.guest_ids = guest_ids
        self.description = description
        self.location = location
        self.google_event_id = google_event_id

    @property
    def is_recurring(self) -> bool:
        return self.recurrence in RECURRING_RULES

    def overlaps_with(self, other_start: datetime, other_end: datetime) -> bool:
        """Half-open overlap check; touching boundaries do not overlap"""
        return self.start < other_end and self.end > other_start

    def with_times(self, event_id: str, start: datetime, end: datetime) -> "CalendarEvent":
        """Copy of this event with a new identity and time span"""
        instance = copy.copy(self)
        instance.id = event_id
        instance.start = start
        instance.end = end
        return instance

    def in_local_time(self) -> "CalendarEvent":
        """Same event with both ends as naive local wall-clock times"""
        return self.with_times(self.id, local_wall_clock(self.start), local_wall_clock(self.end))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format for JSON serialization"""
        data = {
            "id": self.id,
            "title": self.title,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "color": self.color,
            "source": self.source,
            "allDay": self.all_day,
        }
        optional = {
            "recurrence": self.recurrence,
            "recurrenceCustom": self.recurrence_custom,
            "importance": self.importance,
            "guestIds": self.guest_ids,
            "description": self.description,
            "location": self.location,
            "googleEventId": self.google_event_id,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CalendarEvent":
        """Build an event from the application store's JSON shape"""
        return cls(
            event_id=str(data["id"]),
            start=parse_datetime(data["start"]),
            end=parse_datetime(data["end"]),
            title=data.get("title", ""),
            color=data.get("color", Config.DEFAULT_EVENT_COLOR),
            source=data.get("source", "local"),
            all_day=bool(data.get("allDay", False)),
            recurrence=data.get("recurrence"),
            recurrence_custom=data.get("recurrenceCustom"),
            importance=data.get("importance"),
            guest_ids=data.get("guestIds"),
            description=data.get("description"),
            location=data.get("location"),
            google_event_id=data.get("googleEventId"),
        )

    def __eq__(self, other):
        if not isinstance(other, CalendarEvent):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"CalendarEvent(id={self.id!r}, start={self.start.isoformat()}, end={self.end.isoformat()})"


class Participant:
    """A contact whose schedule is consulted when searching for slots"""

    def __init__(self, participant_id: str, name: str, email: str = "",
                 group_type: str = "friends", priority: int = 1):
        self.id = participant_id
        self.name = name
        self.email = email
        self.group_type = group_type
        self.priority = priority

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "groupType": self.group_type,
            "priority": self.priority,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Participant":
        return cls(
            participant_id=str(data["id"]),
            name=data["name"],
            email=data.get("email", ""),
            group_type=data.get("groupType", "friends"),
            priority=int(data.get("priority", 1)),
        )

    def __repr__(self):
        return f"Participant(id={self.id!r}, name={self.name!r}, priority={self.priority})"


class SlotSuggestion:
    """A proposed one-hour slot and the reason it was picked"""

    def __init__(self, start: datetime, end: datetime, reason: str, conflicts: int = 0):
        self.start = start
        self.end = end
        self.reason = reason
        self.conflicts = conflicts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "reason": self.reason,
            "conflicts": self.conflicts,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SlotSuggestion":
        """Only 'start' is required; a missing 'end' means a default-length slot"""
        start = parse_datetime(data["start"])
        if "end" in data:
            end = parse_datetime(data["end"])
        else:
            end = start + timedelta(minutes=Config.SLOT_DURATION_MINUTES)
        return cls(
            start=start,
            end=end,
            reason=data.get("reason", ""),
            conflicts=int(data.get("conflicts", 0)),
        )

    def __repr__(self):
        return f"SlotSuggestion(start={self.start.isoformat()}, reason={self.reason!r})"
