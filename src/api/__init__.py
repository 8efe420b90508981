"""
HTTP API for the planner
"""
