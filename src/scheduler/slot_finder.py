"""
Slot finder - searches fixed candidate windows against participants'
schedules and proposes one-hour meeting slots
"""
import logging
from datetime import datetime, timedelta
from functools import reduce
from itertools import islice
from typing import Callable, Dict, Iterable, Iterator, List, NamedTuple, Optional, Sequence

from config.settings import Config
from src.calendar.events import CalendarEvent, Participant, SlotSuggestion

logger = logging.getLogger(__name__)

BusyEventProvider = Callable[[Participant], List[CalendarEvent]]


class _Candidate(NamedTuple):
    start: datetime
    end: datetime
    conflicts: int
    busy_members: tuple


def has_conflict(events: Iterable[CalendarEvent], start: datetime, end: datetime) -> bool:
    """True if any event overlaps [start, end); back-to-back events do not conflict"""
    return any(event.start < end and event.end > start for event in events)


def find_conflicting_events(events: Iterable[CalendarEvent], start: datetime, end: datetime,
                            exclude_id: Optional[str] = None) -> List[CalendarEvent]:
    """Events overlapping [start, end), ignoring the event currently being edited"""
    return [
        event for event in events
        if event.id != exclude_id and event.overlaps_with(start, end)
    ]


def _candidate_windows(now: datetime, days: int, hours: Sequence[int],
                       duration: timedelta) -> Iterator[tuple]:
    """(start, end) windows for day offsets 1..days, in chronological order"""
    for day_offset in range(1, days + 1):
        day = now + timedelta(days=day_offset)
        for hour in hours:
            start = day.replace(hour=hour, minute=0, second=0, microsecond=0)
            yield start, start + duration


def _same_slot(start: datetime, excluded: SlotSuggestion) -> bool:
    return start.date() == excluded.start.date() and start.hour == excluded.start.hour


def _describe(start: datetime) -> str:
    return f"{start.strftime('%A')} at {start.hour}:00"


def _group_reason(candidate: _Candidate) -> str:
    if candidate.conflicts == 0:
        return f"{_describe(candidate.start)} — all members are free"
    busy = ", ".join(candidate.busy_members)
    return f"{_describe(candidate.start)} — fewest conflicts ({busy} busy)"


def _keep_better(best: Optional[_Candidate], candidate: _Candidate) -> _Candidate:
    # Strict improvement only: among equal scores the earliest candidate stays
    if best is None or candidate.conflicts < best.conflicts:
        return candidate
    return best


def find_best_group_slot(members: Sequence[Participant], owner_events: Sequence[CalendarEvent],
                         now: datetime, busy_events_for: BusyEventProvider,
                         exclude_slot: Optional[SlotSuggestion] = None,
                         config: Optional[Config] = None) -> SlotSuggestion:
    """
    Find the afternoon slot in the coming week with the fewest conflicts.

    Each candidate scores +1 if the owner is busy and +1 per busy member.
    Candidates are scanned day by day, hour by hour, and the first one to
    reach a new strict minimum wins, so ties always go to the earliest slot.
    A candidate whose date and hour match `exclude_slot` is skipped, which
    lets callers ask for a different slot after rejecting one.
    """
    config = config or Config()
    duration = timedelta(minutes=config.SLOT_DURATION_MINUTES)
    member_events: Dict[str, List[CalendarEvent]] = {
        member.id: busy_events_for(member) for member in members
    }

    def score(window: tuple) -> _Candidate:
        start, end = window
        busy_members = tuple(
            member.name for member in members if has_conflict(member_events[member.id], start, end)
        )
        owner_busy = 1 if has_conflict(owner_events, start, end) else 0
        return _Candidate(start, end, owner_busy + len(busy_members), busy_members)

    windows = (
        window for window in _candidate_windows(now, config.GROUP_SEARCH_DAYS, config.GROUP_SLOT_HOURS, duration)
        if exclude_slot is None or not _same_slot(window[0], exclude_slot)
    )
    best = reduce(_keep_better, map(score, windows), None)

    if best is None:
        fallback_start = (now + timedelta(days=1)).replace(
            hour=config.GROUP_FALLBACK_HOUR, minute=0, second=0, microsecond=0
        )
        logger.warning("⚠️  No group candidates available, using fallback slot")
        return SlotSuggestion(fallback_start, fallback_start + duration, "Best available slot")

    logger.info(f"🎯 Group slot for {len(members)} members: {best.start.isoformat()} ({best.conflicts} conflicts)")
    return SlotSuggestion(best.start, best.end, _group_reason(best), best.conflicts)


def find_best_personal_slot(owner_events: Sequence[CalendarEvent],
                            participants_by_priority: Sequence[Participant],
                            now: datetime, busy_events_for: BusyEventProvider,
                            config: Optional[Config] = None) -> List[SlotSuggestion]:
    """
    Up to three owner-free one-hour slots over the next three days.

    `participants_by_priority` must already be sorted most important first;
    only the top participant is checked and mentioned in the reason. Fewer
    suggestions (possibly none) come back when the owner is mostly busy.
    """
    config = config or Config()
    duration = timedelta(minutes=config.SLOT_DURATION_MINUTES)
    top = participants_by_priority[0] if participants_by_priority else None
    top_events = busy_events_for(top) if top is not None else []

    def suggest(window: tuple) -> SlotSuggestion:
        start, end = window
        if top is None:
            reason = f"{_describe(start)} — you're free"
        elif has_conflict(top_events, start, end):
            reason = f"{_describe(start)} — you're free ({top.name} is busy)"
        else:
            reason = f"{_describe(start)} — you're free and {top.name} (priority {top.priority}) is also available"
        return SlotSuggestion(start, end, reason)

    free_windows = (
        window for window in _candidate_windows(now, config.PERSONAL_SEARCH_DAYS, config.PERSONAL_SLOT_HOURS, duration)
        if not has_conflict(owner_events, *window)
    )
    suggestions = [suggest(window) for window in islice(free_windows, config.MAX_PERSONAL_SUGGESTIONS)]

    logger.info(f"🔍 Found {len(suggestions)} personal slot suggestions")
    return suggestions
