"""
Calendar value types and busy-event collaborators
"""
