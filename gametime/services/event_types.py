"""
Event type registry.

The built-in event types form a closed set; a match configuration may register
extra custom types once at startup.
"""
from enum import Enum
from typing import Dict, Iterable, List, Optional

from .errors import ConfigurationError
from .notification_service import Severity
from ..utils import MAX_CUSTOM_EVENT_TYPE_LENGTH


class EventType(str, Enum):
    """Built-in match event types."""
    YELLOW_CARD = "Yellow Card"
    RED_CARD = "Red Card"
    SIN_BIN = "Sin Bin"
    FOUL = "Foul"
    PENALTY = "Penalty"
    OFFSIDE = "Offside"
    GAME_STARTED = "Game Started"
    HALF_TIME = "Half Time"
    FULL_TIME = "Full Time"
    INCIDENT = "Incident"
    INJURY = "Injury"
    SUBSTITUTION = "Substitution"


DEFAULT_ICON = "📝"

EVENT_ICONS: Dict[str, str] = {
    EventType.YELLOW_CARD.value: "🟨",
    EventType.RED_CARD.value: "🟥",
    EventType.SIN_BIN.value: "⏰",
    EventType.FOUL.value: "⚠️",
    EventType.PENALTY.value: "⚽",
    EventType.INCIDENT.value: DEFAULT_ICON,
    EventType.HALF_TIME.value: "⏸️",
    EventType.FULL_TIME.value: "🏁",
}

WARNING_EVENT_TYPES = frozenset({
    EventType.INCIDENT.value,
    EventType.PENALTY.value,
    EventType.YELLOW_CARD.value,
    EventType.RED_CARD.value,
    EventType.SIN_BIN.value,
    EventType.FOUL.value,
})

CLOCK_EVENT_TYPES = frozenset({EventType.HALF_TIME.value, EventType.FULL_TIME.value})

# Events announced by the clock itself; recording them raises no extra notice
SYSTEM_EVENT_TYPES = frozenset({
    EventType.GAME_STARTED.value,
    EventType.HALF_TIME.value,
    EventType.FULL_TIME.value,
})


class EventTypeRegistry:
    """Built-in event types plus custom types validated at construction."""

    def __init__(self, custom_types: Optional[Iterable[str]] = None):
        self._types: List[str] = [member.value for member in EventType]
        self._custom: List[str] = []
        for raw in custom_types or []:
            self._register(raw)

    def _register(self, raw: object) -> None:
        if not isinstance(raw, str) or not raw.strip():
            raise ConfigurationError("custom_event_types", "Custom event types must be non-empty strings")
        name = raw.strip()
        if len(name) > MAX_CUSTOM_EVENT_TYPE_LENGTH:
            raise ConfigurationError(
                "custom_event_types",
                f"'{name}' exceeds {MAX_CUSTOM_EVENT_TYPE_LENGTH} characters",
            )
        if name in self._types:
            # Re-registering a known type is harmless
            return
        self._types.append(name)
        self._custom.append(name)

    @property
    def types(self) -> List[str]:
        return list(self._types)

    @property
    def custom_types(self) -> List[str]:
        return list(self._custom)

    def is_valid(self, event_type: str) -> bool:
        return event_type in self._types

    @staticmethod
    def icon_for(event_type: str) -> str:
        return EVENT_ICONS.get(event_type, DEFAULT_ICON)

    @staticmethod
    def severity_for(event_type: str) -> Severity:
        return Severity.WARNING if event_type in WARNING_EVENT_TYPES else Severity.INFO

    @staticmethod
    def is_clock_event(event_type: str) -> bool:
        return event_type in CLOCK_EVENT_TYPES

    @staticmethod
    def is_system_event(event_type: str) -> bool:
        return event_type in SYSTEM_EVENT_TYPES
