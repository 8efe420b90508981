"""
Recurrence expansion and slot finding
"""
