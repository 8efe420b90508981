"""
Recurrence expansion - turns recurring event definitions into the concrete
instances that intersect a visible calendar window
"""
import calendar
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple

from config.settings import Config
from src.calendar.events import CalendarEvent

logger = logging.getLogger(__name__)

_INSTANCE_ID_PATTERN = re.compile(re.escape(Config.RECURRENCE_SUFFIX) + r"(\d+)$")


def get_visible_range(view: str, anchor: datetime) -> Tuple[datetime, datetime]:
    """
    Return the [start, end) window shown by a calendar view.

    'day' is local midnight to the next midnight, 'week' starts on the Sunday
    at or before the anchor, and anything else is treated as 'month': the
    42-day grid starting on the Sunday at or before the 1st of the month.
    """
    start = anchor.replace(hour=0, minute=0, second=0, microsecond=0)

    if view == "day":
        return start, start + timedelta(days=1)

    if view == "week":
        # weekday(): Monday=0 ... Sunday=6
        start -= timedelta(days=(start.weekday() + 1) % 7)
        return start, start + timedelta(days=7)

    start = start.replace(day=1)
    start -= timedelta(days=(start.weekday() + 1) % 7)
    return start, start + timedelta(days=Config.MONTH_GRID_DAYS)


def instance_id(event_id: str, index: int) -> str:
    """Identifier of occurrence `index`; the first occurrence keeps the original id"""
    if index == 0:
        return event_id
    return f"{event_id}{Config.RECURRENCE_SUFFIX}{index}"


def is_instance_id(event_id: str) -> bool:
    """True if the id carries an occurrence suffix"""
    return _INSTANCE_ID_PATTERN.search(event_id) is not None


def original_event_id(event_id: str) -> str:
    """
    Recover the definition id from an expanded instance id.

    Not reversible for definitions whose own id already ends in the suffix;
    the API refuses to expand such definitions.
    """
    return _INSTANCE_ID_PATTERN.sub("", event_id)


def occurrence_index(event_id: str) -> int:
    match = _INSTANCE_ID_PATTERN.search(event_id)
    return int(match.group(1)) if match else 0


def _clamped(start: datetime, year: int, month: int) -> datetime:
    # Anchor on the 1st so the month change can never overflow
    anchored = start.replace(year=year, month=month, day=1)
    last_day = calendar.monthrange(year, month)[1]
    return anchored.replace(day=min(start.day, last_day))


def _occurrence_start(start: datetime, rule: str, index: int) -> datetime:
    if rule == "daily":
        return start + timedelta(days=index)
    if rule == "weekly":
        return start + timedelta(days=7 * index)
    if rule == "monthly":
        month_index = start.month - 1 + index
        return _clamped(start, start.year + month_index // 12, month_index % 12 + 1)
    # yearly
    return _clamped(start, start.year + index, start.month)


def _absolute_duration(start: datetime, end: datetime) -> timedelta:
    if start.tzinfo is None or end.tzinfo is None:
        return end - start
    return end.astimezone(timezone.utc) - start.astimezone(timezone.utc)


def _shift_absolute(start: datetime, duration: timedelta) -> datetime:
    # Aware arithmetic in Python is wall-clock; go through UTC for an exact delta
    if start.tzinfo is None:
        return start + duration
    return (start.astimezone(timezone.utc) + duration).astimezone(start.tzinfo)


def _expand_event(event: CalendarEvent, range_start: datetime, range_end: datetime,
                  max_iterations: int) -> List[CalendarEvent]:
    duration = _absolute_duration(event.start, event.end)
    instances = []

    for index in range(max_iterations):
        try:
            occurrence_start = _occurrence_start(event.start, event.recurrence, index)
            occurrence_end = _shift_absolute(occurrence_start, duration)
        except (OverflowError, ValueError):
            logger.debug(f"Stopped expanding {event.id} at occurrence {index}: date out of range")
            break

        # Occurrences only move forward, nothing later can be visible
        if occurrence_start >= range_end:
            break

        if occurrence_end <= range_start:
            continue

        instances.append(event.with_times(instance_id(event.id, index), occurrence_start, occurrence_end))
    else:
        logger.debug(f"Expansion of {event.id} truncated at {max_iterations} occurrences")

    return instances


def expand_recurrence(events: Iterable[CalendarEvent], range_start: datetime,
                      range_end: datetime, config: Optional[Config] = None) -> List[CalendarEvent]:
    """
    Expand recurring events into the instances overlapping [range_start, range_end).

    Events without an expandable rule ('none', 'custom', missing or unknown)
    are returned unchanged whether or not they fall inside the range;
    filtering those is left to the caller. Generated instances carry every
    field of their definition except id, start and end.
    """
    config = config or Config()
    expanded = []

    for event in events:
        if not event.is_recurring:
            expanded.append(event)
            continue
        expanded.extend(_expand_event(event, range_start, range_end, config.MAX_RECURRENCE_ITERATIONS))

    return expanded
