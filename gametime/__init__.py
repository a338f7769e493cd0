"""
GameTime match tracker

Tracks a single football match from the touchline: the match clock, goals
and match events, team names, a merged timeline and shareable statistics.

This package provides the match core and a Flask JSON API for the browser
front end.
"""
from .models import GoalEvent, MatchEvent, MatchState, Side
from .services import (
    AnalyticsService, MatchLogService, PersistenceService, ServiceFactory,
    TeamService, TimerService, load_config
)
from .ui import create_app, run_web_app
from .utils import fmt_mmss, format_match_time, now_ts, APP_TITLE

__version__ = "1.0.0"

__all__ = [
    "GoalEvent", "MatchEvent", "MatchState", "Side",
    "AnalyticsService", "MatchLogService", "PersistenceService", "ServiceFactory",
    "TeamService", "TimerService", "load_config",
    "create_app", "run_web_app",
    "fmt_mmss", "format_match_time", "now_ts", "APP_TITLE"
]
