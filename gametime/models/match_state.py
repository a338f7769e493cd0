"""
MatchState model for the GameTime match tracker.

This module contains the MatchState dataclass which represents the complete
state of a match: clock snapshot, goal and event logs, team identities and
scores, together with its JSON conversion.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .goal import GoalEvent
from .match_event import MatchEvent
from ..utils import DEFAULT_GAME_DURATION_SECONDS, DEFAULT_SIDE_A_NAME, DEFAULT_SIDE_B_NAME
from ..utils import get_logger

log = get_logger("models.match_state")


@dataclass
class MatchState:
    """
    Represents the complete state of a match.

    Attributes:
        elapsed_seconds: Frozen elapsed match seconds (live value while running
            is derived from ``start_epoch_ms``)
        is_running: Whether the clock is running
        start_epoch_ms: Wall-clock epoch (ms) matching match second zero
        goals: Recorded goals in recording order
        events: Recorded match events in recording order
        side_a_name: Current name of the tracked team
        side_b_name: Current name of the opposition
        side_a_history: Every name side A has had, in first-use order
        side_b_history: Every name side B has had, in first-use order
        game_duration_seconds: Regulation match length
        is_second_half: Whether half time has been called
        score_a: Allowed goals for side A (derived)
        score_b: Allowed goals for side B (derived)
        pending_goal_second: Clock value captured when a goal dialog opened
        next_entry_id: Next synthetic identifier for goals/events
    """
    elapsed_seconds: int = 0
    is_running: bool = False
    start_epoch_ms: Optional[int] = None
    goals: List[GoalEvent] = field(default_factory=list)
    events: List[MatchEvent] = field(default_factory=list)
    side_a_name: str = DEFAULT_SIDE_A_NAME
    side_b_name: str = DEFAULT_SIDE_B_NAME
    side_a_history: List[str] = field(default_factory=lambda: [DEFAULT_SIDE_A_NAME])
    side_b_history: List[str] = field(default_factory=lambda: [DEFAULT_SIDE_B_NAME])
    game_duration_seconds: int = DEFAULT_GAME_DURATION_SECONDS
    is_second_half: bool = False
    score_a: int = 0
    score_b: int = 0
    pending_goal_second: Optional[int] = None
    next_entry_id: int = 1

    def allocate_entry_id(self) -> int:
        """Return a fresh entry id and advance the counter."""
        entry_id = self.next_entry_id
        self.next_entry_id += 1
        return entry_id

    def ensure_entry_ids(self) -> None:
        """Give ids to entries loaded without one and move the counter past them."""
        used = {entry.entry_id for entry in [*self.goals, *self.events] if entry.entry_id}
        self.next_entry_id = max([self.next_entry_id, *(i + 1 for i in used)])
        for entry in [*self.goals, *self.events]:
            if not entry.entry_id:
                entry.entry_id = self.allocate_entry_id()

    def to_json(self) -> dict:
        """
        Convert MatchState to JSON-serializable dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "elapsed_seconds": self.elapsed_seconds,
            "is_running": self.is_running,
            "start_epoch_ms": self.start_epoch_ms,
            "goals": [goal.to_json() for goal in self.goals],
            "events": [event.to_json() for event in self.events],
            "side_a_name": self.side_a_name,
            "side_b_name": self.side_b_name,
            "side_a_history": list(self.side_a_history),
            "side_b_history": list(self.side_b_history),
            "game_duration_seconds": self.game_duration_seconds,
            "is_second_half": self.is_second_half,
            "score_a": self.score_a,
            "score_b": self.score_b,
        }

    @staticmethod
    def from_json(data: dict) -> "MatchState":
        """
        Create MatchState from JSON dictionary.

        Individual goal/event records that cannot be parsed are skipped and
        logged rather than failing the whole load.

        Args:
            data: Dictionary with match state data

        Returns:
            New MatchState instance
        """
        ms = MatchState()
        ms.elapsed_seconds = max(0, int(data.get("elapsed_seconds", 0) or 0))
        ms.is_running = bool(data.get("is_running", False))
        start = data.get("start_epoch_ms")
        ms.start_epoch_ms = int(start) if start is not None else None

        ms.goals = _parse_records(data.get("goals"), GoalEvent.from_json, "goal")
        ms.events = _parse_records(data.get("events"), MatchEvent.from_json, "event")

        ms.side_a_name = str(data.get("side_a_name") or DEFAULT_SIDE_A_NAME)
        ms.side_b_name = str(data.get("side_b_name") or DEFAULT_SIDE_B_NAME)
        ms.side_a_history = _name_history(data.get("side_a_history"), ms.side_a_name)
        ms.side_b_history = _name_history(data.get("side_b_history"), ms.side_b_name)

        ms.game_duration_seconds = int(
            data.get("game_duration_seconds") or DEFAULT_GAME_DURATION_SECONDS
        )
        ms.is_second_half = bool(data.get("is_second_half", False))
        ms.score_a = int(data.get("score_a", 0) or 0)
        ms.score_b = int(data.get("score_b", 0) or 0)
        ms.ensure_entry_ids()
        return ms


def _parse_records(raw: Any, parser, kind: str) -> list:
    if not isinstance(raw, list):
        return []
    records = []
    for position, item in enumerate(raw):
        if not isinstance(item, dict):
            log.warning(f"Skipping non-object {kind} record at position {position}")
            continue
        try:
            records.append(parser(item))
        except (TypeError, ValueError) as e:
            log.warning(f"Skipping corrupt {kind} record at position {position}: {e}")
    return records


def _name_history(raw: Any, current: str) -> List[str]:
    history: List[str] = []
    if isinstance(raw, list):
        for name in raw:
            if isinstance(name, str) and name and name not in history:
                history.append(name)
    if current not in history:
        history.append(current)
    return history
