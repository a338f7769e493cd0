"""
Services package for the GameTime match tracker.

This package contains service classes that handle the match logic, plus the
factory that wires them together.
"""
from .errors import (
    MatchLogError, ValidationError, IndexOutOfRange, UserCancelled,
    PersistenceError, ConfigurationError
)
from .notification_service import (
    Severity, Notification, NotificationSink, LoggingNotifier, QueuedNotifier
)
from .config_service import MatchConfig, load_config
from .event_types import EventType, EventTypeRegistry
from .persistence_service import PersistenceService, KeyValueStore, MemoryStore, JsonFileStore
from .timer_service import TimerService, Ticker, ManualTicker, IntervalTicker
from .team_service import TeamService
from .roster_service import RosterService, BulkAddResult
from .match_log_service import MatchLogService, EntryKind, LogEntry, Timeline
from .timeline_service import TimelineProjector
from .analytics_service import AnalyticsService, StatisticsTextExporter
from .service_factory import ServiceFactory

__all__ = [
    "MatchLogError", "ValidationError", "IndexOutOfRange", "UserCancelled",
    "PersistenceError", "ConfigurationError",
    "Severity", "Notification", "NotificationSink", "LoggingNotifier", "QueuedNotifier",
    "MatchConfig", "load_config", "EventType", "EventTypeRegistry",
    "PersistenceService", "KeyValueStore", "MemoryStore", "JsonFileStore",
    "TimerService", "Ticker", "ManualTicker", "IntervalTicker",
    "TeamService", "RosterService", "BulkAddResult",
    "MatchLogService", "EntryKind", "LogEntry", "Timeline",
    "TimelineProjector", "AnalyticsService", "StatisticsTextExporter", "ServiceFactory"
]
