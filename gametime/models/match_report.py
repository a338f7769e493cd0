"""Dataclasses representing derived statistics and timeline rows."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .side import Side


@dataclass
class RankedName:
    """A player name with its goal or assist tally."""

    name: str
    count: int


@dataclass
class EventCounts:
    """Aggregate counts across the goal and event logs."""

    goals: int = 0
    cards: int = 0
    fouls: int = 0
    penalties: int = 0
    incidents: int = 0
    total: int = 0


@dataclass
class GoalCounts:
    """Allowed/disallowed split of the goal log."""

    total: int = 0
    team: int = 0
    opposition: int = 0
    disallowed: int = 0


@dataclass
class AttendanceRecord:
    """Whether one roster player turned up for the match."""

    player_name: str
    shirt_number: Optional[int] = None
    attending: bool = True

    def to_json(self) -> Dict[str, Any]:
        return {
            "player_name": self.player_name,
            "shirt_number": self.shirt_number,
            "attending": self.attending,
        }


@dataclass
class AttendanceSummary:
    """Attendance totals across the roster, in roster order."""

    total: int = 0
    attending: int = 0
    absent: int = 0
    attending_players: List[str] = field(default_factory=list)
    absent_players: List[str] = field(default_factory=list)
    attendance_rate: int = 0

    def to_json(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "attending": self.attending,
            "absent": self.absent,
            "attending_players": list(self.attending_players),
            "absent_players": list(self.absent_players),
            "attendance_rate": self.attendance_rate,
        }


@dataclass
class MatchStatistics:
    """Snapshot of derived match statistics."""

    side_a_name: str
    side_b_name: str
    team_goals: int
    opposition_goals: int
    scorers: List[RankedName] = field(default_factory=list)
    assisters: List[RankedName] = field(default_factory=list)
    event_counts: EventCounts = field(default_factory=EventCounts)
    goal_counts: GoalCounts = field(default_factory=GoalCounts)
    attendance: Optional[AttendanceSummary] = None

    @property
    def result(self) -> str:
        if self.team_goals == self.opposition_goals:
            return "DRAW"
        if self.team_goals > self.opposition_goals:
            return "WIN"
        return "LOSS"


@dataclass
class TimelineEntry:
    """A display-ready row of the merged goal/event timeline."""

    kind: str  # "goal" or "event"
    index: int  # position in the originating collection
    entry_id: int
    match_second: int
    time_label: str
    icon: str
    title: str
    summary: str
    details: List[str] = field(default_factory=list)
    side: Optional[Side] = None
    disallowed: bool = False

    @property
    def line(self) -> str:
        """Single-line rendering used by the shared match summary."""
        return f"{self.icon} {self.time_label}' - {self.summary}"

    def to_json(self) -> dict:
        return {
            "kind": self.kind,
            "index": self.index,
            "entry_id": self.entry_id,
            "match_second": self.match_second,
            "time_label": self.time_label,
            "icon": self.icon,
            "title": self.title,
            "summary": self.summary,
            "details": list(self.details),
            "side": self.side.value if self.side else None,
            "disallowed": self.disallowed,
        }
