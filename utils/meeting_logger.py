"""
Specialized logging for expansions and slot suggestions
"""
import logging
from typing import Sequence

from config.settings import Config

logger = logging.getLogger(__name__)

class MeetingLogger:
    """Human-readable summaries of what the planner computed"""

    @staticmethod
    def log_expansion(view: str, range_start, range_end, definitions: int, instances: Sequence) -> None:
        """Log the outcome of expanding a calendar view"""
        recurring_instances = sum(1 for event in instances if Config.RECURRENCE_SUFFIX in event.id)

        logger.info(f"🗓️  EXPANDED {view.upper() if view else 'RANGE'}: {range_start.isoformat()} to {range_end.isoformat()}")
        logger.info(f"   📋 Definitions: {definitions}")
        logger.info(f"   📅 Instances: {len(instances)} ({recurring_instances} generated by recurrence)")

    @staticmethod
    def log_group_suggestion(suggestion, members: Sequence, resuggested: bool = False) -> None:
        """Log the slot proposed to a group"""
        label = "RE-SUGGESTED" if resuggested else "SUGGESTED"
        logger.info(f"🎯 GROUP SLOT {label} for {len(members)} members")
        logger.info(f"   📅 {suggestion.start.isoformat()} to {suggestion.end.isoformat()}")
        logger.info(f"   ⚖️  Conflicts: {suggestion.conflicts}")
        logger.info(f"   💬 {suggestion.reason}")

    @staticmethod
    def log_personal_suggestions(suggestions: Sequence) -> None:
        """Log the personal slot suggestions"""
        if not suggestions:
            logger.info("🔍 No free personal slots found")
            return

        logger.info(f"🔍 PERSONAL SLOTS ({len(suggestions)}):")
        for i, suggestion in enumerate(suggestions, 1):
            logger.info(f"   {i}. {suggestion.reason}")
