"""
Utilities package for the GameTime match tracker.

This package contains utility functions used throughout the application.
"""
from .time_utils import fmt_mmss, now_ts, now_ms, format_match_time
from .logger import get_logger
from .constants import (
    APP_TITLE, DEFAULT_GAME_DURATION_SECONDS, GAME_DURATION_CHOICES,
    TIMER_UPDATE_INTERVAL_MS, DEFAULT_SIDE_A_NAME, DEFAULT_SIDE_B_NAME,
    MAX_NAME_LENGTH, MAX_ROSTER_NAME_LENGTH, MAX_TEAM_NAME_LENGTH, MAX_NOTES_LENGTH,
    MAX_CUSTOM_EVENT_TYPE_LENGTH, MIN_SHIRT_NUMBER, MAX_SHIRT_NUMBER,
    NO_PLAYER, ROSTER_STORAGE_KEYS, STORAGE_KEYS, WHATSAPP_SHARE_URL
)

__all__ = [
    "fmt_mmss", "now_ts", "now_ms", "format_match_time", "get_logger",
    "APP_TITLE", "DEFAULT_GAME_DURATION_SECONDS", "GAME_DURATION_CHOICES",
    "TIMER_UPDATE_INTERVAL_MS", "DEFAULT_SIDE_A_NAME", "DEFAULT_SIDE_B_NAME",
    "MAX_NAME_LENGTH", "MAX_ROSTER_NAME_LENGTH", "MAX_TEAM_NAME_LENGTH", "MAX_NOTES_LENGTH",
    "MAX_CUSTOM_EVENT_TYPE_LENGTH", "MIN_SHIRT_NUMBER", "MAX_SHIRT_NUMBER",
    "NO_PLAYER", "ROSTER_STORAGE_KEYS", "STORAGE_KEYS", "WHATSAPP_SHARE_URL"
]
