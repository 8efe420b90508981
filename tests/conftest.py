from datetime import datetime, timedelta

import pytest

from src.calendar.events import CalendarEvent, Participant


class FakeCalendarManager:
    """Busy events looked up by participant id; records who was asked"""

    def __init__(self, busy=None, failing=()):
        self.busy = busy or {}
        self.failing = set(failing)
        self.calls = []
        self.batches = []

    def get_participant_events(self, participant, now=None):
        self.calls.append(participant.id)
        if participant.id in self.failing:
            raise ConnectionError(f"calendar unavailable for {participant.name}")
        return self.busy.get(participant.id, [])

    def get_multiple_participants_events(self, participants, now=None):
        self.batches.append([participant.id for participant in participants])
        results = {}
        for participant in participants:
            try:
                results[participant.id] = self.get_participant_events(participant, now)
            except ConnectionError:
                results[participant.id] = []
        return results


@pytest.fixture
def now():
    # Monday 19 October 2026, 08:00
    return datetime(2026, 10, 19, 8, 0)


@pytest.fixture
def make_event():
    counter = iter(range(1, 10_000))

    def factory(start, end=None, event_id=None, **kwargs):
        return CalendarEvent(
            event_id=event_id or f"evt-{next(counter)}",
            start=start,
            end=end or start + timedelta(hours=1),
            **kwargs
        )
    return factory


@pytest.fixture
def busy_block(make_event):
    """One event per listed (day, hour) pair relative to a base datetime"""
    def factory(base, slots):
        events = []
        for day_offset, hour in slots:
            start = (base + timedelta(days=day_offset)).replace(hour=hour, minute=0, second=0, microsecond=0)
            events.append(make_event(start))
        return events
    return factory


@pytest.fixture
def sarah():
    return Participant("f1", "Sarah", "sarah@example.com", "family", priority=1)


@pytest.fixture
def mike():
    return Participant("f2", "Mike", "mike@example.com", "friends", priority=2)


@pytest.fixture
def fake_calendar():
    return FakeCalendarManager
