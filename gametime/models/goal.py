"""
Goal model for the GameTime match tracker.

This module contains the GoalEvent dataclass, a single recorded goal with its
scorer, optional assist and disallowed status.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .side import Side


@dataclass
class GoalEvent:
    """
    A recorded goal.

    Attributes:
        match_second: Elapsed match seconds at the scoring instant
        time_label: Minute label derived when the goal was recorded or edited
        scorer_name: Name of the scorer (side B goals carry the team name)
        side: Which team scored, fixed at creation
        side_name_at_creation: Team display name when the goal was recorded
        scorer_shirt_number: Optional shirt number of the scorer
        assist_name: Optional name of the assisting player
        assist_shirt_number: Optional shirt number of the assisting player
        disallowed: Whether the goal has been ruled out
        disallowed_reason: Reason given when the goal was ruled out
        entry_id: Stable synthetic identifier, unique within a match
    """
    match_second: int
    time_label: str
    scorer_name: str
    side: Optional[Side] = Side.A
    side_name_at_creation: str = ""
    scorer_shirt_number: Optional[int] = None
    assist_name: Optional[str] = None
    assist_shirt_number: Optional[int] = None
    disallowed: bool = False
    disallowed_reason: Optional[str] = None
    entry_id: int = 0

    def to_json(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "entry_id": self.entry_id,
            "match_second": self.match_second,
            "time_label": self.time_label,
            "scorer_name": self.scorer_name,
            "scorer_shirt_number": self.scorer_shirt_number,
            "assist_name": self.assist_name,
            "assist_shirt_number": self.assist_shirt_number,
            "side": self.side.value if self.side else None,
            "side_name_at_creation": self.side_name_at_creation,
            "disallowed": self.disallowed,
            "disallowed_reason": self.disallowed_reason,
        }

    @staticmethod
    def from_json(data: Dict[str, Any]) -> "GoalEvent":
        """
        Create a GoalEvent from a stored dictionary.

        Records saved by the browser version of the tracker (``rawTime``,
        ``goalScorerName``, ``team`` ...) are accepted as well.

        Raises:
            ValueError: If the record has no usable time or scorer
        """
        raw_second = data.get("match_second", data.get("rawTime"))
        if raw_second is None:
            raise ValueError("Goal record has no match second")
        match_second = max(0, int(raw_second))

        scorer = data.get("scorer_name", data.get("goalScorerName"))
        if not scorer:
            raise ValueError("Goal record has no scorer")

        # Legacy records without a team stay unattributed
        side = Side.parse(data.get("side", data.get("team")))

        return GoalEvent(
            entry_id=int(data.get("entry_id", 0) or 0),
            match_second=match_second,
            time_label=str(data.get("time_label", data.get("timestamp", ""))),
            scorer_name=str(scorer),
            scorer_shirt_number=_optional_int(
                data.get("scorer_shirt_number", data.get("goalScorerShirtNumber"))
            ),
            assist_name=data.get("assist_name", data.get("goalAssistName")) or None,
            assist_shirt_number=_optional_int(
                data.get("assist_shirt_number", data.get("goalAssistShirtNumber"))
            ),
            side=side,
            side_name_at_creation=str(
                data.get("side_name_at_creation", data.get("teamName")) or ""
            ),
            disallowed=bool(data.get("disallowed", False)),
            disallowed_reason=data.get("disallowed_reason", data.get("disallowedReason")),
        )


def _optional_int(value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
