"""
Smart Scheduler - coordinates expansion and slot suggestions for the planner
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from config.settings import Config
from src.calendar.events import CalendarEvent, Participant, SlotSuggestion
from src.calendar.mock_calendar_manager import MockCalendarManager
from src.scheduler.recurrence import expand_recurrence, get_visible_range
from src.scheduler.slot_finder import (
    BusyEventProvider,
    find_best_group_slot,
    find_best_personal_slot,
    find_conflicting_events,
)
from utils.meeting_logger import MeetingLogger

logger = logging.getLogger(__name__)

class SmartScheduler:
    """
    Entry point used by the API and CLI.

    Holds the busy-event collaborator and supplies "now" to the pure search
    functions. The calendar manager can be anything exposing
    ``get_participant_events(participant, now=None)`` and
    ``get_multiple_participants_events(participants, now=None)``; the
    deterministic mock is used when none is given.
    """

    def __init__(self, calendar_manager=None, config: Optional[Config] = None):
        self.config = config or Config()
        self.calendar_manager = calendar_manager or MockCalendarManager()
        logger.info(f"SmartScheduler initialized with {type(self.calendar_manager).__name__}")

    def _busy_events_for(self, now: datetime) -> BusyEventProvider:
        def provider(participant: Participant) -> List[CalendarEvent]:
            try:
                return self.calendar_manager.get_participant_events(participant, now=now)
            except Exception as e:
                logger.error(f"Failed to get busy events for {participant.name}: {e}")
                return []
        return provider

    def _prefetch_busy_events(self, members: Sequence[Participant], now: datetime) -> BusyEventProvider:
        """Fetch every member's busy events in one batch and serve them by id"""
        try:
            busy = self.calendar_manager.get_multiple_participants_events(members, now=now)
        except Exception as e:
            logger.error(f"Failed to get busy events for {len(members)} members: {e}")
            busy = {}
        return lambda member: busy.get(member.id, [])

    def visible_range(self, view: str, anchor: datetime) -> Tuple[datetime, datetime]:
        return get_visible_range(view, anchor)

    def expand(self, events: Sequence[CalendarEvent], range_start: datetime,
               range_end: datetime, view: str = None) -> List[CalendarEvent]:
        instances = expand_recurrence(events, range_start, range_end, self.config)
        MeetingLogger.log_expansion(view, range_start, range_end, len(events), instances)
        return instances

    def visible_events(self, view: str, anchor: datetime, local_events: Iterable[CalendarEvent],
                       synced_events: Iterable[CalendarEvent] = ()) -> List[CalendarEvent]:
        """Merge local and synced events and expand them over the view's window"""
        range_start, range_end = self.visible_range(view, anchor)
        events = list(local_events) + list(synced_events)
        return self.expand(events, range_start, range_end, view=view)

    def find_conflicts(self, events: Iterable[CalendarEvent], start: datetime, end: datetime,
                       exclude_id: Optional[str] = None) -> List[CalendarEvent]:
        return find_conflicting_events(events, start, end, exclude_id)

    def suggest_group_slot(self, members: Sequence[Participant], owner_events: Sequence[CalendarEvent],
                           now: Optional[datetime] = None,
                           exclude_slot: Optional[SlotSuggestion] = None) -> SlotSuggestion:
        """Best afternoon slot for a group; pass the rejected slot to get a different one"""
        now = now or datetime.now()
        logger.info(f"🔍 Searching group slot for {', '.join(m.name for m in members) or 'no members'}")

        suggestion = find_best_group_slot(
            members, owner_events, now, self._prefetch_busy_events(members, now),
            exclude_slot=exclude_slot, config=self.config
        )
        MeetingLogger.log_group_suggestion(suggestion, members, resuggested=exclude_slot is not None)
        return suggestion

    def suggest_personal_slots(self, owner_events: Sequence[CalendarEvent],
                               participants: Sequence[Participant],
                               now: Optional[datetime] = None) -> List[SlotSuggestion]:
        """Up to three free slots, mentioning the most important contact"""
        now = now or datetime.now()
        by_priority = sorted(participants, key=lambda participant: participant.priority)

        suggestions = find_best_personal_slot(
            owner_events, by_priority, now, self._busy_events_for(now), config=self.config
        )
        MeetingLogger.log_personal_suggestions(suggestions)
        return suggestions
