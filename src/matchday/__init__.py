"""
Fixture generation and tie-breaker scoring for raid-based tournaments.
"""
