"""
Models package for the GameTime match tracker.

This package contains the core data models used throughout the application.
"""
from .side import Side
from .goal import GoalEvent
from .match_event import MatchEvent
from .match_state import MatchState
from .player import Player
from .match_report import (
    AttendanceRecord, AttendanceSummary, EventCounts, GoalCounts,
    MatchStatistics, RankedName, TimelineEntry
)

__all__ = [
    "Side", "GoalEvent", "MatchEvent", "MatchState", "Player",
    "AttendanceRecord", "AttendanceSummary", "EventCounts", "GoalCounts",
    "MatchStatistics", "RankedName", "TimelineEntry"
]
