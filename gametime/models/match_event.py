"""
Match event model for the GameTime match tracker.

Match events are everything in the log that is not a goal: cards, fouls,
incidents and the half/full time markers.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .side import Side


@dataclass
class MatchEvent:
    """
    A recorded match event.

    Attributes:
        match_second: Elapsed match seconds when the event was recorded
        time_label: Minute label derived when the event was recorded or edited
        event_type: One of the registered event types
        notes: Sanitized free text
        side: Team tagged from the event text, if any
        side_name_at_creation: Team display name used for the tag
        score_snapshot: "A n - m B" score, captured for Half/Full Time only
        side_a_name_at_snapshot: Side A name used in the snapshot
        side_b_name_at_snapshot: Side B name used in the snapshot
        entry_id: Stable synthetic identifier, unique within a match
    """
    match_second: int
    time_label: str
    event_type: str
    notes: str = ""
    side: Optional[Side] = None
    side_name_at_creation: Optional[str] = None
    score_snapshot: Optional[str] = None
    side_a_name_at_snapshot: Optional[str] = None
    side_b_name_at_snapshot: Optional[str] = None
    entry_id: int = 0

    def to_json(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "entry_id": self.entry_id,
            "match_second": self.match_second,
            "time_label": self.time_label,
            "event_type": self.event_type,
            "notes": self.notes,
            "side": self.side.value if self.side else None,
            "side_name_at_creation": self.side_name_at_creation,
            "score_snapshot": self.score_snapshot,
            "side_a_name_at_snapshot": self.side_a_name_at_snapshot,
            "side_b_name_at_snapshot": self.side_b_name_at_snapshot,
        }

    @staticmethod
    def from_json(data: Dict[str, Any]) -> "MatchEvent":
        """
        Create a MatchEvent from a stored dictionary.

        Accepts the browser tracker's ``rawTime``/``type``/``score`` keys too.

        Raises:
            ValueError: If the record has no usable time or type
        """
        raw_second = data.get("match_second", data.get("rawTime"))
        if raw_second is None:
            raise ValueError("Event record has no match second")

        event_type = data.get("event_type", data.get("type"))
        if not event_type:
            raise ValueError("Event record has no type")

        return MatchEvent(
            entry_id=int(data.get("entry_id", 0) or 0),
            match_second=max(0, int(raw_second)),
            time_label=str(data.get("time_label", data.get("timestamp", ""))),
            event_type=str(event_type),
            notes=str(data.get("notes") or ""),
            side=Side.parse(data.get("side", data.get("team"))),
            side_name_at_creation=data.get("side_name_at_creation", data.get("teamName")),
            score_snapshot=data.get("score_snapshot", data.get("score")),
            side_a_name_at_snapshot=data.get("side_a_name_at_snapshot", data.get("team1Name")),
            side_b_name_at_snapshot=data.get("side_b_name_at_snapshot", data.get("team2Name")),
        )
