"""
Smart Calendar - family scheduling planner

This package provides the scheduling core of the planner:
- Expands recurring events into the instances visible in a calendar view
- Detects conflicts between events and candidate slots
- Suggests group and personal meeting slots from participants' schedules
"""

__version__ = "1.0.0"
__author__ = "Smart Calendar Team"
