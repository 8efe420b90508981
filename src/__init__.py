"""
Smart Calendar planner core: calendar collaborators, scheduling and API
"""
