"""
Mock Calendar Manager - deterministic busy events without a calendar provider
"""
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from config.settings import Config
from src.calendar.events import CalendarEvent, Participant

logger = logging.getLogger(__name__)


def name_hash(name: str) -> int:
    """Position-weighted character sum, stable across runs"""
    return sum(ord(char) * (position + 1) for position, char in enumerate(name))


class MockCalendarManager:
    """Generates two busy events per participant in the coming days"""

    def __init__(self, now: Optional[datetime] = None):
        self.config = Config()
        self.now = now

    def _at(self, reference: datetime, day_offset: int, hour: int) -> datetime:
        day = reference + timedelta(days=day_offset)
        return day.replace(hour=hour, minute=0, second=0, microsecond=0)

    def get_participant_events(self, participant: Participant,
                               now: Optional[datetime] = None) -> List[CalendarEvent]:
        """Busy events for a participant: one morning meeting and one afternoon lunch"""
        reference = now or self.now or datetime.now()
        seed = name_hash(participant.name)

        # Morning meeting 1-3 days out between 9 and 12
        meeting_start = self._at(reference, seed % 3 + 1, seed % 4 + 9)
        # Afternoon block 2-5 days out between 14 and 17
        lunch_start = self._at(reference, (seed + 2) % 4 + 2, (seed + 3) % 4 + 14)

        events = [
            CalendarEvent(
                event_id=f"member-evt-{participant.id}-1",
                title="Meeting",
                start=meeting_start,
                end=meeting_start + timedelta(hours=1),
                color=self.config.MEMBER_EVENT_COLOR,
            ),
            CalendarEvent(
                event_id=f"member-evt-{participant.id}-2",
                title="Lunch",
                start=lunch_start,
                end=lunch_start + timedelta(hours=1),
                color=self.config.MEMBER_EVENT_COLOR,
            ),
        ]
        logger.debug(f"📋 MOCK: Generated {len(events)} busy events for {participant.name}")
        return events

    def get_multiple_participants_events(self, participants: Sequence[Participant],
                                         now: Optional[datetime] = None) -> Dict[str, List[CalendarEvent]]:
        """Busy events keyed by participant id"""
        logger.info(f"📋 MOCK: Getting events for {len(participants)} participants")
        return {participant.id: self.get_participant_events(participant, now) for participant in participants}
