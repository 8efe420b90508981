"""
Configuration for the Smart Calendar planner
"""
