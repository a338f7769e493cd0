"""
Constants for the GameTime match tracker.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "GameTime"

# Game timing defaults
DEFAULT_GAME_DURATION_SECONDS = 4200  # 70 minutes
GAME_DURATION_CHOICES = (600, 1200, 1800, 2400, 3000, 3600, 4200, 4800, 5400, 6000, 7200)
TIMER_UPDATE_INTERVAL_MS = 100

# Team defaults
DEFAULT_SIDE_A_NAME = "Netherton"
DEFAULT_SIDE_B_NAME = "Opposition"

# Input limits
MAX_NAME_LENGTH = 100
MAX_ROSTER_NAME_LENGTH = 50
MAX_TEAM_NAME_LENGTH = 50
MAX_NOTES_LENGTH = 500
MAX_CUSTOM_EVENT_TYPE_LENGTH = 50
MIN_SHIRT_NUMBER = 1
MAX_SHIRT_NUMBER = 99

# Placeholder used when a goal has no assist
NO_PLAYER = "N/A"

# Persistence keys, one per logical field
STORAGE_KEYS = {
    "START_TIMESTAMP": "nugt_startTimestamp",
    "IS_RUNNING": "nugt_isRunning",
    "GOALS": "nugt_goals",
    "ELAPSED_TIME": "nugt_elapsedTime",
    "FIRST_SCORE": "nugt_firstScore",
    "SECOND_SCORE": "nugt_secondScore",
    "TEAM1_NAME": "nugt_team1name",
    "TEAM2_NAME": "nugt_team2name",
    "MATCH_EVENTS": "nugt_matchEvents",
    "GAME_TIME": "nugt_gameTime",
    "IS_SECOND_HALF": "nugt_isSecondHalf",
    "TEAM1_HISTORY": "nugt_team1history",
    "TEAM2_HISTORY": "nugt_team2history",
}

# Squad roster keys, kept apart from the match keys cleared on reset
ROSTER_STORAGE_KEYS = {
    "ROSTER": "goalTracker_roster",
    "MATCH_ATTENDANCE": "nugt_matchAttendance",
}

# Sharing
WHATSAPP_SHARE_URL = "https://wa.me/?text={text}"
