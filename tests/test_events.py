from datetime import datetime, timedelta, timezone

from config.settings import Config
from src.calendar.events import CalendarEvent, SlotSuggestion, local_wall_clock


def test_local_wall_clock_keeps_naive_values():
    assert local_wall_clock("2026-10-20T14:00:00") == datetime(2026, 10, 20, 14, 0)


def test_local_wall_clock_converts_zulu_times():
    expected = datetime(2026, 10, 20, 14, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)

    assert local_wall_clock("2026-10-20T14:00:00Z") == expected


def test_event_in_local_time():
    event = CalendarEvent.from_dict({"id": "e", "start": "2026-10-20T14:00:00Z", "end": "2026-10-20T15:30:00Z"})

    local = event.in_local_time()

    assert local.start.tzinfo is None
    assert local.end - local.start == timedelta(minutes=90)
    assert event.start.tzinfo is not None


def test_event_default_color():
    event = CalendarEvent.from_dict({"id": "e", "start": "2026-10-20T14:00:00", "end": "2026-10-20T15:00:00"})

    assert event.color == Config.DEFAULT_EVENT_COLOR


def test_slot_from_start_only():
    slot = SlotSuggestion.from_dict({"start": "2026-10-20T14:00:00"})

    assert slot.end == datetime(2026, 10, 20, 15, 0)
    assert slot.reason == ""
    assert slot.conflicts == 0
