"""
Utility modules for the Smart Calendar planner
"""

from .logger import SmartCalendarLogger
from .validators import RequestValidator, DataSanitizer
from .meeting_logger import MeetingLogger

__all__ = ['SmartCalendarLogger', 'RequestValidator', 'DataSanitizer', 'MeetingLogger']
