"""
Timeline projection.

Turns the merged goal/event log into display-ready rows. The projection is
pure: it reads the match through the team service and never mutates it.
"""
from typing import Iterable, List, Optional

from .event_types import EventTypeRegistry
from .match_log_service import EntryKind, LogEntry
from .team_service import TeamService
from ..models import GoalEvent, MatchEvent, Side, TimelineEntry
from ..utils import NO_PLAYER

GOAL_ICON = "🥅"


def _with_shirt(name: Optional[str], number: Optional[int]) -> str:
    label = name or NO_PLAYER
    return f"{label} (#{number})" if number else label


def _swap_name(text: str, old: Optional[str], new: str) -> str:
    if not old or old == new:
        return text
    return text.replace(old, new, 1)


class TimelineProjector:
    """Builds :class:`TimelineEntry` rows with the current team names applied."""

    def __init__(self, teams: TeamService, event_types: Optional[EventTypeRegistry] = None):
        self.teams = teams
        self.event_types = event_types or EventTypeRegistry()

    def project(self, entries: Iterable[LogEntry]) -> List[TimelineEntry]:
        rows = []
        for entry in entries:
            if entry.kind is EntryKind.GOAL:
                rows.append(self._goal_row(entry.index, entry.record))
            else:
                rows.append(self._event_row(entry.index, entry.record))
        return rows

    def _goal_row(self, index: int, goal: GoalEvent) -> TimelineEntry:
        side = self.teams.goal_side(goal)
        team_name = self.teams.current_name(side)
        disallowed_text = f" (DISALLOWED: {goal.disallowed_reason})" if goal.disallowed else ""

        details = []
        if side is Side.A:
            details.append(f"Scored By: {_with_shirt(goal.scorer_name, goal.scorer_shirt_number)}")
            details.append(f"Assisted By: {_with_shirt(goal.assist_name, goal.assist_shirt_number)}")
            summary = f"Goal: {goal.scorer_name}, Assist: {goal.assist_name or NO_PLAYER}{disallowed_text}"
        else:
            summary = f"{team_name} Goal{disallowed_text}"
        if goal.disallowed:
            details.append(f"DISALLOWED: {goal.disallowed_reason}")

        return TimelineEntry(
            kind=EntryKind.GOAL.value,
            index=index,
            entry_id=goal.entry_id,
            match_second=goal.match_second,
            time_label=goal.time_label,
            icon=GOAL_ICON,
            title=f"Goal: {team_name}",
            summary=summary,
            details=details,
            side=side,
            disallowed=goal.disallowed,
        )

    def _event_row(self, index: int, event: MatchEvent) -> TimelineEntry:
        state = self.teams.match_state
        text = event.event_type
        if event.side is not None:
            text = _swap_name(text, event.side_name_at_creation, self.teams.current_name(event.side))

        score = event.score_snapshot
        if score:
            score = _swap_name(score, event.side_a_name_at_snapshot, state.side_a_name)
            score = _swap_name(score, event.side_b_name_at_snapshot, state.side_b_name)
            text = f"{text} ({score})"

        return TimelineEntry(
            kind=EntryKind.EVENT.value,
            index=index,
            entry_id=event.entry_id,
            match_second=event.match_second,
            time_label=event.time_label,
            icon=self.event_types.icon_for(event.event_type),
            title=text,
            summary=text,
            details=[event.notes] if event.notes else [],
            side=event.side,
        )
