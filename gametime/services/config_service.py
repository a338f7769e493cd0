"""
Configuration loading for the GameTime match tracker.

Only the values the match core consumes are read: game duration, custom event
types, default team names, the clock tick interval and the storage location.
"""
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ConfigurationError
from .event_types import EventTypeRegistry
from ..utils import (
    DEFAULT_GAME_DURATION_SECONDS, DEFAULT_SIDE_A_NAME, DEFAULT_SIDE_B_NAME,
    GAME_DURATION_CHOICES, MAX_TEAM_NAME_LENGTH, TIMER_UPDATE_INTERVAL_MS, get_logger
)

log = get_logger("services.config")

CONFIG_PATH_ENV = "GAMETIME_CONFIG"
GAME_DURATION_ENV = "GAMETIME_GAME_DURATION"
STORAGE_PATH_ENV = "GAMETIME_STORAGE_PATH"


@dataclass
class MatchConfig:
    """Configuration consumed by the match core."""
    game_duration_seconds: int = DEFAULT_GAME_DURATION_SECONDS
    custom_event_types: List[str] = field(default_factory=list)
    side_a_default_name: str = DEFAULT_SIDE_A_NAME
    side_b_default_name: str = DEFAULT_SIDE_B_NAME
    timer_update_interval_ms: int = TIMER_UPDATE_INTERVAL_MS
    storage_path: Optional[str] = None

    def validate(self) -> None:
        """
        Check the values the core depends on.

        Raises:
            ConfigurationError: If any consumed value is unusable
        """
        if self.game_duration_seconds not in GAME_DURATION_CHOICES:
            raise ConfigurationError(
                "game_duration_seconds",
                f"{self.game_duration_seconds} is not one of {list(GAME_DURATION_CHOICES)}",
            )
        for attr in ("side_a_default_name", "side_b_default_name"):
            value = getattr(self, attr)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(attr, "Team name is required")
            if len(value.strip()) > MAX_TEAM_NAME_LENGTH:
                raise ConfigurationError(attr, f"Team name cannot exceed {MAX_TEAM_NAME_LENGTH} characters")
        if self.side_a_default_name.strip() == self.side_b_default_name.strip():
            raise ConfigurationError("side_b_default_name", "Team names must be different")
        if self.timer_update_interval_ms <= 0:
            raise ConfigurationError("timer_update_interval_ms", "Interval must be positive")
        # Registering checks each custom type
        EventTypeRegistry(self.custom_event_types)


def _load_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        log.warning(f"Config file not found at {path}; using defaults")
        return {}

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, ValueError) as e:
        log.warning(f"Failed to load config file {path} ({e}); using defaults")
        return {}


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    raw = data.get(name)
    return raw if isinstance(raw, dict) else {}


def load_config(path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> MatchConfig:
    """
    Build a :class:`MatchConfig` from a JSON file and environment overrides.

    Args:
        path: Config file path; falls back to ``$GAMETIME_CONFIG`` when omitted
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If a consumed value is unusable
    """
    env = os.environ if environ is None else environ
    path = path or env.get(CONFIG_PATH_ENV)
    data = _load_json(Path(path)) if path else {}

    team = _section(data, "team")
    match = _section(data, "match")
    events = _section(data, "events")
    storage = _section(data, "storage")

    config = MatchConfig()
    config.side_a_default_name = team.get("defaultTeam1Name", config.side_a_default_name)
    config.side_b_default_name = team.get("defaultTeam2Name", config.side_b_default_name)

    try:
        config.game_duration_seconds = int(match.get("defaultGameTime", config.game_duration_seconds))
        config.timer_update_interval_ms = int(
            match.get("timerUpdateInterval", config.timer_update_interval_ms)
        )
        if env.get(GAME_DURATION_ENV):
            config.game_duration_seconds = int(env[GAME_DURATION_ENV])
    except (TypeError, ValueError) as e:
        raise ConfigurationError("match", f"Expected integer values ({e})") from e

    custom = events.get("customEventTypes", [])
    if not isinstance(custom, list):
        raise ConfigurationError("custom_event_types", "Expected a list of event type names")
    config.custom_event_types = custom

    config.storage_path = env.get(STORAGE_PATH_ENV) or storage.get("path")

    config.validate()
    return config
