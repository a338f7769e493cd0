"""
Service factory for the GameTime match tracker.

This module wires the match services together around a single
:class:`MatchState`, injecting shared persistence, notifications and
configuration so callers never construct the collaborators by hand.
"""
from typing import Dict, Optional

from ..models import MatchState
from .analytics_service import AnalyticsService, ExportServiceInterface, StatisticsTextExporter
from .config_service import MatchConfig
from .event_types import EventTypeRegistry
from .match_log_service import MatchLogService
from .notification_service import LoggingNotifier, NotificationSink
from .persistence_service import JsonFileStore, MemoryStore, PersistenceService
from .roster_service import RosterService
from .team_service import TeamService
from .timeline_service import TimelineProjector
from .timer_service import ManualTicker, Ticker, TimerService


class ServiceFactory:
    """
    Factory for creating service instances with their dependencies injected.

    Persistence, the notification sink and the event type registry are
    shared by every service the factory creates.
    """

    def __init__(
        self,
        config: Optional[MatchConfig] = None,
        notifier: Optional[NotificationSink] = None,
        persistence_service: Optional[PersistenceService] = None,
    ):
        self.config = config or MatchConfig()
        self.notifier = notifier or LoggingNotifier()
        self._persistence_service = persistence_service
        self._event_types: Optional[EventTypeRegistry] = None
        self._export_service: Optional[ExportServiceInterface] = None
        self._roster_service: Optional[RosterService] = None

    def new_match_state(self) -> MatchState:
        """A blank match using the configured team names and duration."""
        return MatchState(
            side_a_name=self.config.side_a_default_name,
            side_b_name=self.config.side_b_default_name,
            side_a_history=[self.config.side_a_default_name],
            side_b_history=[self.config.side_b_default_name],
            game_duration_seconds=self.config.game_duration_seconds,
        )

    def load_match_state(self) -> MatchState:
        """The persisted match, with missing or corrupt values defaulted."""
        return self.get_persistence_service().load_match_state(defaults=self.new_match_state())

    def create_timer_service(self, match_state: MatchState, ticker: Optional[Ticker] = None) -> TimerService:
        return TimerService(
            match_state,
            persistence=self.get_persistence_service(),
            notifier=self.notifier,
            ticker=ticker or ManualTicker(),
            interval_ms=self.config.timer_update_interval_ms,
        )

    def create_team_service(self, match_state: MatchState) -> TeamService:
        return TeamService(
            match_state,
            persistence=self.get_persistence_service(),
            default_side_a_name=self.config.side_a_default_name,
            default_side_b_name=self.config.side_b_default_name,
        )

    def create_match_log_service(
        self,
        match_state: MatchState,
        timer_service: TimerService,
        team_service: TeamService,
    ) -> MatchLogService:
        return MatchLogService(
            match_state,
            timer_service,
            team_service,
            event_types=self.get_event_types(),
            persistence=self.get_persistence_service(),
            notifier=self.notifier,
            default_game_duration_seconds=self.config.game_duration_seconds,
            roster=self.get_roster_service(),
        )

    def create_analytics_service(
        self,
        match_state: MatchState,
        team_service: TeamService,
        timer_service: TimerService,
    ) -> AnalyticsService:
        """
        Create AnalyticsService with injected dependencies.

        Args:
            match_state: Match to analyse
            team_service: Resolves goal attribution and renames
            timer_service: Supplies the live clock for summaries

        Returns:
            Configured AnalyticsService instance
        """
        return AnalyticsService(
            match_state,
            team_service,
            timer_service,
            projector=TimelineProjector(team_service, self.get_event_types()),
            export_service=self._get_export_service(),
            roster=self.get_roster_service(),
        )

    def create_complete_service_suite(
        self,
        match_state: Optional[MatchState] = None,
        ticker: Optional[Ticker] = None,
    ) -> Dict[str, object]:
        """
        Create every service around one match.

        Args:
            match_state: Match to manage; loaded from persistence when omitted
            ticker: Tick source for the clock

        Returns:
            Dictionary containing all configured services and the match state
        """
        if match_state is None:
            match_state = self.load_match_state()

        timer_service = self.create_timer_service(match_state, ticker)
        team_service = self.create_team_service(match_state)
        match_log = self.create_match_log_service(match_state, timer_service, team_service)
        analytics = self.create_analytics_service(match_state, team_service, timer_service)

        match_log.recalculate_scores()
        timer_service.resume_from_state()

        return {
            "state": match_state,
            "timer": timer_service,
            "teams": team_service,
            "match_log": match_log,
            "analytics": analytics,
            "event_types": self.get_event_types(),
            "persistence": self.get_persistence_service(),
            "roster": self.get_roster_service(),
        }

    def get_persistence_service(self) -> PersistenceService:
        """Shared persistence; file-backed when a storage path is configured."""
        if self._persistence_service is None:
            if self.config.storage_path:
                store = JsonFileStore(self.config.storage_path)
            else:
                store = MemoryStore()
            self._persistence_service = PersistenceService(store)
        return self._persistence_service

    def get_event_types(self) -> EventTypeRegistry:
        if self._event_types is None:
            self._event_types = EventTypeRegistry(self.config.custom_event_types)
        return self._event_types

    def _get_export_service(self) -> ExportServiceInterface:
        if self._export_service is None:
            self._export_service = StatisticsTextExporter()
        return self._export_service

    def get_roster_service(self) -> RosterService:
        """Shared squad roster; it outlives any one match."""
        if self._roster_service is None:
            self._roster_service = RosterService(self.get_persistence_service(), self.notifier)
        return self._roster_service
