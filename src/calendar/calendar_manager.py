"""
Google Calendar integration - supplies externally sourced busy events
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from config.settings import Config
from src.calendar.events import CalendarEvent, Participant, local_wall_clock

logger = logging.getLogger(__name__)


def _rfc3339(value: datetime) -> str:
    # The events API rejects timestamps without an offset
    return value.astimezone().isoformat()

class CalendarManager:
    """Calendar manager with caching and parallel fetching"""

    def __init__(self, now: Optional[datetime] = None):
        self.config = Config()
        self.now = now
        self._calendar_cache = {}
        self._cache_expiry = {}
        self._cache_duration = timedelta(minutes=5)

    def _get_credentials(self, email: str) -> Credentials:
        """Get Google Calendar credentials for a user"""
        token_path = self.config.get_token_path(email)
        return Credentials.from_authorized_user_file(token_path)

    def _build_calendar_service(self, email: str):
        """Build Google Calendar service for a user"""
        credentials = self._get_credentials(email)
        return build("calendar", "v3", credentials=credentials)

    def _is_cache_valid(self, cache_key: str) -> bool:
        if cache_key not in self._calendar_cache:
            return False

        expiry_time = self._cache_expiry.get(cache_key)
        if not expiry_time or datetime.now() > expiry_time:
            self._calendar_cache.pop(cache_key, None)
            self._cache_expiry.pop(cache_key, None)
            return False

        return True

    def _cache_events(self, cache_key: str, events: List[CalendarEvent]):
        self._calendar_cache[cache_key] = events
        self._cache_expiry[cache_key] = datetime.now() + self._cache_duration

    @staticmethod
    def _to_calendar_event(item: Dict[str, Any]) -> Optional[CalendarEvent]:
        """Convert a Google event resource; returns None when it has no usable times"""
        start = item.get('start', {})
        end = item.get('end', {})
        start_value = start.get('dateTime') or start.get('date')
        end_value = end.get('dateTime') or end.get('date')
        if not start_value or not end_value:
            return None

        attendees = [attendee['email'] for attendee in item.get('attendees', []) if 'email' in attendee]

        return CalendarEvent(
            event_id=item.get('id', ''),
            title=item.get('summary', '(No title)'),
            start=local_wall_clock(start_value),
            end=local_wall_clock(end_value),
            color=Config.GOOGLE_EVENT_COLOR,
            source='google',
            all_day='dateTime' not in start,
            guest_ids=attendees or None,
            description=item.get('description'),
            location=item.get('location'),
            google_event_id=item.get('id'),
        )

    def get_user_events(self, email: str, start_date: datetime, end_date: datetime) -> List[CalendarEvent]:
        """Get calendar events for a single user with caching"""
        cache_key = f"{email}_{start_date.isoformat()}_{end_date.isoformat()}"

        if self._is_cache_valid(cache_key):
            logger.info(f"Using cached events for {email}")
            return self._calendar_cache[cache_key]

        logger.info(f"📅 Fetching calendar events for {email}: {start_date.isoformat()} to {end_date.isoformat()}")

        try:
            calendar_service = self._build_calendar_service(email)

            events_result = calendar_service.events().list(
                calendarId='primary',
                timeMin=_rfc3339(start_date),
                timeMax=_rfc3339(end_date),
                singleEvents=True,
                orderBy='startTime',
                maxResults=self.config.CALENDAR_MAX_RESULTS
            ).execute()

            calendar_events = []
            for item in events_result.get('items', []):
                event = self._to_calendar_event(item)
                if event is not None:
                    calendar_events.append(event)

            self._cache_events(cache_key, calendar_events)
            logger.info(f"✅ Retrieved and cached {len(calendar_events)} events for {email}")
            return calendar_events

        except (ValueError, FileNotFoundError) as e:
            logger.error(f"❌ Calendar token not available for {email}: {e}")
            return []
        except HttpError as e:
            logger.error(f"HTTP error getting events for {email}: {e}")
            return []

    def get_participant_events(self, participant: Participant,
                               now: Optional[datetime] = None) -> List[CalendarEvent]:
        """Busy events for a participant from the start of today over the sync window"""
        if not participant.email:
            logger.warning(f"⚠️  {participant.name} has no email, assuming no busy events")
            return []

        # Whole-day window so repeated searches on the same day share a cache entry
        start_date = (now or self.now or datetime.now()).replace(hour=0, minute=0, second=0, microsecond=0)
        end_date = start_date + timedelta(days=self.config.CALENDAR_SYNC_DAYS)
        return self.get_user_events(participant.email, start_date, end_date)

    def get_multiple_participants_events(self, participants: Sequence[Participant],
                                         now: Optional[datetime] = None) -> Dict[str, List[CalendarEvent]]:
        """Get busy events for several participants in parallel, keyed by participant id"""
        results = {}
        if not participants:
            return results

        with ThreadPoolExecutor(max_workers=min(len(participants), 5)) as executor:
            future_to_participant = {
                executor.submit(self.get_participant_events, participant, now): participant
                for participant in participants
            }

            for future in as_completed(future_to_participant):
                participant = future_to_participant[future]
                try:
                    results[participant.id] = future.result(timeout=self.config.CALENDAR_FETCH_TIMEOUT)
                except Exception as e:
                    logger.error(f"Failed to get events for {participant.name}: {e}")
                    results[participant.id] = []

        logger.info(f"📊 Fetched busy events for {len(results)} participants")
        return results
