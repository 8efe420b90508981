"""
Configuration settings for the Smart Calendar family planner
"""
import os
from typing import Tuple

class Config:
    # Calendar Configuration
    CALENDAR_TOKENS_PATH = os.environ.get(
        "SMART_CALENDAR_TOKENS_PATH", os.path.expanduser("~/.smart-calendar/tokens")
    )
    CALENDAR_SYNC_DAYS = 30  # Window fetched from the calendar provider
    CALENDAR_MAX_RESULTS = 250
    CALENDAR_FETCH_TIMEOUT = 30  # seconds per participant in a batch fetch

    # API Configuration
    API_HOST = os.environ.get("SMART_CALENDAR_API_HOST", "0.0.0.0")
    API_PORT = int(os.environ.get("SMART_CALENDAR_API_PORT", "5000"))
    LOG_LEVEL = os.environ.get("SMART_CALENDAR_LOG_LEVEL", "INFO")

    # Recurrence expansion
    MAX_RECURRENCE_ITERATIONS = 1000
    RECURRENCE_SUFFIX = "__r"

    # Group slot search: afternoon proposals over the next week
    GROUP_SEARCH_DAYS = 7
    GROUP_SLOT_HOURS: Tuple[int, ...] = (14, 15, 16)
    GROUP_FALLBACK_HOUR = 14

    # Personal slot search
    PERSONAL_SEARCH_DAYS = 3
    PERSONAL_SLOT_HOURS: Tuple[int, ...] = (9, 10, 11, 14, 15, 16, 17)
    MAX_PERSONAL_SUGGESTIONS = 3

    SLOT_DURATION_MINUTES = 60

    # Views understood by the visible range calculation
    CALENDAR_VIEWS = ("day", "week", "month")
    MONTH_GRID_DAYS = 42  # 6 rows x 7 columns

    # Event defaults
    DEFAULT_EVENT_COLOR = "#F97316"
    GOOGLE_EVENT_COLOR = "#0d9488"
    MEMBER_EVENT_COLOR = "#9333EA"

    @classmethod
    def get_token_path(cls, email: str) -> str:
        """Get token file path for a user email"""
        username = email.split("@")[0]
        token_path = os.path.join(cls.CALENDAR_TOKENS_PATH, f"{username}.token")

        if not os.path.exists(token_path):
            raise FileNotFoundError(f"Token file not found: {token_path}")

        return token_path
