"""
Match log service for the GameTime match tracker.

Owns the goal and event collections of a :class:`MatchState`. Every command
validates its input before touching state, re-derives the scores after goal
changes, persists, and emits a notification.
"""
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Iterator, List, Optional, Tuple, Union

from .errors import IndexOutOfRange, UserCancelled, ValidationError
from .event_types import EventType, EventTypeRegistry
from .notification_service import LoggingNotifier, NotificationSink, Severity
from .persistence_service import PersistenceService
from .roster_service import RosterService
from .team_service import TeamService
from .timer_service import TimerService
from .validation import (
    sanitize_text, validate_match_second, validate_minutes,
    validate_player_name, validate_shirt_number
)
from ..models import GoalEvent, MatchEvent, MatchState, Side
from ..utils import DEFAULT_GAME_DURATION_SECONDS, get_logger

log = get_logger("services.match_log")

LogRecord = Union[GoalEvent, MatchEvent]


class EntryKind(str, Enum):
    """The two collections of the match log."""
    GOAL = "goal"
    EVENT = "event"

    @classmethod
    def parse(cls, value: Any) -> "EntryKind":
        if isinstance(value, EntryKind):
            return value
        if value in ("goal", "goals"):
            return cls.GOAL
        if value in ("event", "events", "matchEvent"):
            return cls.EVENT
        raise ValidationError("type", f"Unknown log entry type: {value!r}")


@dataclass(frozen=True)
class LogEntry:
    """A goal or event together with its position in its own collection."""
    kind: EntryKind
    index: int
    record: LogRecord

    @property
    def match_second(self) -> int:
        return self.record.match_second


class Timeline:
    """
    Restartable, time-ordered view over the goal and event logs.

    Ordering is recomputed on every iteration, ascending by match second.
    Equal seconds keep recording order, goals before events.
    """

    def __init__(self, match_state: MatchState):
        self._state = match_state

    def __iter__(self) -> Iterator[LogEntry]:
        combined = [
            *(LogEntry(EntryKind.GOAL, i, goal) for i, goal in enumerate(self._state.goals)),
            *(LogEntry(EntryKind.EVENT, i, event) for i, event in enumerate(self._state.events)),
        ]
        return iter(sorted(combined, key=lambda entry: entry.match_second))

    def __len__(self) -> int:
        return len(self._state.goals) + len(self._state.events)


class MatchLogService:
    """Commands and queries over the goal and event logs."""

    def __init__(
        self,
        match_state: MatchState,
        timer: TimerService,
        teams: TeamService,
        event_types: Optional[EventTypeRegistry] = None,
        persistence: Optional[PersistenceService] = None,
        notifier: Optional[NotificationSink] = None,
        default_game_duration_seconds: int = DEFAULT_GAME_DURATION_SECONDS,
        roster: Optional[RosterService] = None,
    ):
        self.match_state = match_state
        self.timer = timer
        self.teams = teams
        self.event_types = event_types or EventTypeRegistry()
        self.persistence = persistence
        self.notifier = notifier or LoggingNotifier()
        self.default_game_duration_seconds = default_game_duration_seconds
        self.roster = roster

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------
    def capture_goal_time(self) -> int:
        """Freeze the clock value for a goal about to be entered."""
        second = self.timer.current_seconds()
        self.match_state.pending_goal_second = second
        return second

    def cancel_goal(self) -> None:
        self.match_state.pending_goal_second = None

    def record_goal(
        self,
        scorer_name: str,
        scorer_shirt_number: Optional[int] = None,
        assist_name: Optional[str] = None,
        assist_shirt_number: Optional[int] = None,
        at_second: Optional[int] = None,
    ) -> GoalEvent:
        """
        Record a goal for side A.

        Without ``at_second`` the time captured by :meth:`capture_goal_time`
        is used, falling back to the live clock. Shirt numbers left out are
        looked up on the roster by name.

        Raises:
            ValidationError: If a name, shirt number or time is invalid
        """
        scorer = validate_player_name("scorer_name", scorer_name, required=True)
        scorer_number = validate_shirt_number("scorer_shirt_number", scorer_shirt_number)
        assist = validate_player_name("assist_name", assist_name, required=False)
        assist_number = validate_shirt_number("assist_shirt_number", assist_shirt_number)
        if self.roster is not None:
            if scorer_number is None:
                scorer_number = self.roster.shirt_number_for(scorer)
            if assist_number is None:
                assist_number = self.roster.shirt_number_for(assist)

        state = self.match_state
        if at_second is None and state.pending_goal_second is not None:
            at_second = state.pending_goal_second
        second = self._resolve_second(at_second)

        goal = GoalEvent(
            entry_id=state.allocate_entry_id(),
            match_second=second,
            time_label=self.timer.format_match_time(second),
            scorer_name=scorer,
            scorer_shirt_number=scorer_number,
            assist_name=assist,
            assist_shirt_number=assist_number,
            side=Side.A,
            side_name_at_creation=state.side_a_name,
        )
        state.pending_goal_second = None
        state.goals.append(goal)
        log.info(f"Goal recorded: {scorer} at {goal.time_label}'")

        self._after_goal_change()
        self.notifier.notify(f"Goal scored by {scorer}!", Severity.SUCCESS)
        return goal

    def record_opposition_goal(self, at_second: Optional[int] = None) -> GoalEvent:
        """Record a goal for side B, attributed to the team rather than a player."""
        state = self.match_state
        second = self._resolve_second(at_second)
        team_name = state.side_b_name

        goal = GoalEvent(
            entry_id=state.allocate_entry_id(),
            match_second=second,
            time_label=self.timer.format_match_time(second),
            scorer_name=team_name,
            assist_name=team_name,
            side=Side.B,
            side_name_at_creation=team_name,
        )
        state.goals.append(goal)
        log.info(f"Opposition goal recorded for {team_name} at {goal.time_label}'")

        self._after_goal_change()
        self.notifier.notify(f"Goal scored by {team_name}!", Severity.DANGER)
        return goal

    def toggle_disallowed(
        self,
        goal_index: int,
        reason: Optional[str] = None,
        expected_id: Optional[int] = None,
    ) -> GoalEvent:
        """
        Disallow an allowed goal, or reinstate a disallowed one.

        Raises:
            IndexOutOfRange: If ``goal_index`` does not address a goal
            UserCancelled: If disallowing without a reason
        """
        goal = self._get(EntryKind.GOAL, goal_index, expected_id)

        if goal.disallowed:
            goal.disallowed = False
            goal.disallowed_reason = None
        else:
            cleaned = sanitize_text(reason)
            if not cleaned:
                raise UserCancelled("A reason is required to disallow a goal")
            goal.disallowed = True
            goal.disallowed_reason = cleaned

        self._after_goal_change()
        if goal.disallowed:
            self.notifier.notify("Goal disallowed", Severity.WARNING)
        else:
            self.notifier.notify("Goal allowed", Severity.SUCCESS)
        return goal

    def recalculate_scores(self) -> Tuple[int, int]:
        """Re-derive both scores from the allowed goals."""
        score_a = score_b = 0
        for goal in self.match_state.goals:
            if goal.disallowed:
                continue
            if self.teams.goal_side(goal) is Side.B:
                score_b += 1
            else:
                score_a += 1
        self.match_state.score_a = score_a
        self.match_state.score_b = score_b
        return score_a, score_b

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def record_event(
        self,
        event_type: str,
        notes: Optional[str] = "",
        at_second: Optional[int] = None,
    ) -> MatchEvent:
        """
        Record a match event.

        Half Time and Full Time also capture the score and drive the clock:
        half time freezes at the half-way second and starts the second half,
        full time freezes at the current second.

        Raises:
            ValidationError: If the type is unknown or the time is invalid
        """
        if not isinstance(event_type, str) or not self.event_types.is_valid(event_type):
            raise ValidationError("event_type", f"Unknown event type: {event_type!r}")
        if notes is not None and not isinstance(notes, str):
            raise ValidationError("notes", "Notes must be text")
        cleaned_notes = sanitize_text(notes)
        second = self._resolve_second(at_second)

        state = self.match_state
        event = MatchEvent(
            entry_id=state.allocate_entry_id(),
            match_second=second,
            time_label=self.timer.format_match_time(second),
            event_type=event_type,
            notes=cleaned_notes,
        )

        side = self.teams.tag_text(event_type)
        if side is not None:
            event.side = side
            event.side_name_at_creation = self.teams.current_name(side)

        if self.event_types.is_clock_event(event_type):
            event.score_snapshot = self.score_line()
            event.side_a_name_at_snapshot = state.side_a_name
            event.side_b_name_at_snapshot = state.side_b_name
            event.notes = f"{event_type} - {state.side_a_name} vs {state.side_b_name}"

        state.events.append(event)
        log.info(f"{event_type} recorded at {event.time_label}'")

        if event_type == EventType.HALF_TIME.value:
            self.timer.half_time()
        elif event_type == EventType.FULL_TIME.value:
            self.timer.full_time()

        self._persist()
        # The clock already announces system events
        if not self.event_types.is_system_event(event_type):
            severity = self.event_types.severity_for(event_type)
            self.notifier.notify(
                f"{event_type} recorded at {event.time_label}",
                Severity.WARNING if severity is Severity.WARNING else Severity.SUCCESS,
            )
        return event

    # ------------------------------------------------------------------
    # Shared entry commands
    # ------------------------------------------------------------------
    def edit_time(
        self,
        index: int,
        kind: Union[EntryKind, str],
        new_minutes: int,
        expected_id: Optional[int] = None,
    ) -> LogRecord:
        """
        Move a goal or event to ``new_minutes``.

        Raises:
            ValidationError: If the kind or minutes are invalid
            IndexOutOfRange: If ``index`` does not address an entry
        """
        kind = EntryKind.parse(kind)
        minutes = validate_minutes(new_minutes)
        record = self._get(kind, index, expected_id)

        record.match_second = minutes * 60
        record.time_label = self.timer.format_match_time(record.match_second)

        if kind is EntryKind.GOAL:
            self._after_goal_change()
        else:
            self._persist()
        self.notifier.notify("Event time updated successfully!", Severity.SUCCESS)
        return record

    def delete_entry(
        self,
        index: int,
        kind: Union[EntryKind, str],
        expected_id: Optional[int] = None,
    ) -> LogRecord:
        """
        Remove a goal or event.

        Raises:
            ValidationError: If the kind is invalid
            IndexOutOfRange: If ``index`` does not address an entry
        """
        kind = EntryKind.parse(kind)
        self._get(kind, index, expected_id)
        collection = self._collection(kind)
        record = collection.pop(index)
        log.info(f"Deleted {kind.value} {record.entry_id} at index {index}")

        if kind is EntryKind.GOAL:
            self._after_goal_change()
        else:
            self._persist()
        self.notifier.notify("Entry deleted", Severity.DANGER)
        return record

    def find_index(self, kind: Union[EntryKind, str], entry_id: int) -> int:
        """
        Current position of the entry with ``entry_id``.

        Raises:
            IndexOutOfRange: If no entry has that id
        """
        kind = EntryKind.parse(kind)
        for position, record in enumerate(self._collection(kind)):
            if record.entry_id == entry_id:
                return position
        raise IndexOutOfRange(kind.value, entry_id)

    # ------------------------------------------------------------------
    # Teams, queries and lifecycle
    # ------------------------------------------------------------------
    def rename_side(self, side: Side, new_name: str) -> str:
        name = self.teams.rename(side, new_name)
        self.recalculate_scores()
        self._persist()
        self.notifier.notify(f"Team name updated to {name}", Severity.SUCCESS)
        return name

    def timeline(self) -> Timeline:
        return Timeline(self.match_state)

    def score_line(self) -> str:
        state = self.match_state
        return f"{state.side_a_name} {state.score_a} - {state.score_b} {state.side_b_name}"

    def reset(self) -> None:
        """Clear the logs, clock and team names and persist the empty match."""
        state = self.match_state
        self.timer.reset()
        state.goals = []
        state.events = []
        state.pending_goal_second = None
        state.next_entry_id = 1
        state.game_duration_seconds = self.default_game_duration_seconds
        self.teams.reset()
        self.recalculate_scores()

        if self.persistence is not None:
            self.persistence.clear()
            self.persistence.save_match_state(state)
        log.info("Match reset")
        self.notifier.notify("Match reset", Severity.INFO)

    def replace_state(self, new_state: MatchState) -> None:
        """Load another match into the owned state object in place."""
        self.timer.ticker.stop()
        for f in fields(MatchState):
            setattr(self.match_state, f.name, getattr(new_state, f.name))
        self.match_state.ensure_entry_ids()
        self.recalculate_scores()
        self.timer.resume_from_state()
        if self.persistence is not None:
            self.persistence.save_match_state(self.match_state)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _collection(self, kind: EntryKind) -> List[Any]:
        return self.match_state.goals if kind is EntryKind.GOAL else self.match_state.events

    def _get(self, kind: EntryKind, index: Any, expected_id: Optional[int]) -> Any:
        collection = self._collection(kind)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(collection):
            raise IndexOutOfRange(kind.value, index)
        record = collection[index]
        if expected_id is not None and record.entry_id != expected_id:
            # The caller's view is stale
            raise IndexOutOfRange(kind.value, index)
        return record

    def _resolve_second(self, at_second: Optional[int]) -> int:
        if at_second is None:
            return self.timer.current_seconds()
        return validate_match_second(at_second)

    def _after_goal_change(self) -> None:
        self.recalculate_scores()
        self._persist()

    def _persist(self) -> None:
        if self.persistence is not None:
            self.persistence.save_match_data(self.match_state)
