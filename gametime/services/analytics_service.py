"""Statistics and shareable summaries for the GameTime match tracker."""

from __future__ import annotations

import csv
import datetime as dt
import io
from collections import Counter
from typing import Dict, Iterable, List, Optional, Protocol
from urllib.parse import quote

from .match_log_service import Timeline
from .roster_service import RosterService
from .team_service import TeamService
from .timeline_service import TimelineProjector
from ..models import EventCounts, GoalCounts, MatchState, MatchStatistics, RankedName, Side, TimelineEntry
from ..utils import NO_PLAYER, WHATSAPP_SHARE_URL, fmt_mmss, now_ts

# encodeURIComponent leaves these unescaped as well as alphanumerics and "-_.~"
_URI_COMPONENT_SAFE = "!*'()"


class TimerServiceInterface(Protocol):
    """The part of the timer the analytics need."""

    def current_seconds(self) -> int:
        ...


class ExportServiceInterface(Protocol):
    """Renders the statistics block of a summary."""

    def export_to_text(self, stats: MatchStatistics) -> str:
        ...


def _countable(name: Optional[str]) -> bool:
    return bool(name and name.strip() and name != NO_PLAYER)


def _ranked(counter: Counter) -> List[RankedName]:
    # Counter keeps first-occurrence order, so the stable sort breaks ties by it
    ordered = sorted(counter.items(), key=lambda item: -item[1])
    return [RankedName(name=name, count=count) for name, count in ordered]


def _format_ranked(items: List[RankedName]) -> str:
    if not items:
        return "None"
    return ", ".join(f"{item.name}: {item.count}" for item in items)


class StatisticsTextExporter:
    """Plain-text statistics block used at the end of the shared summary."""

    def export_to_text(self, stats: MatchStatistics) -> str:
        text = (
            "📊 Match Statistics:\n"
            f"⚽ {stats.side_a_name} Goals: {stats.team_goals}\n"
            f"⚽ {stats.side_b_name} Goals: {stats.opposition_goals}\n"
            f"🥅 Goal Scorers: {_format_ranked(stats.scorers)}\n"
            f"🎯 Assists: {_format_ranked(stats.assisters)}"
        )
        attendance = stats.attendance
        if attendance is None:
            return text
        return (
            f"{text}\n"
            f"👥 Attendance: {attendance.attending}/{attendance.total} ({attendance.attendance_rate}%)\n"
            f"✅ Present: {', '.join(attendance.attending_players)}\n"
            f"❌ Absent: {', '.join(attendance.absent_players) or 'None'}"
        )


class AnalyticsService:
    """
    Derives statistics from the match log and renders shareable summaries.

    Everything here is recomputed from the current state on each call.
    """

    def __init__(
        self,
        match_state: MatchState,
        teams: TeamService,
        timer_service: TimerServiceInterface,
        projector: Optional[TimelineProjector] = None,
        export_service: Optional[ExportServiceInterface] = None,
        roster: Optional[RosterService] = None,
    ) -> None:
        self.match_state = match_state
        self.teams = teams
        self._timer_service = timer_service
        self.projector = projector or TimelineProjector(teams)
        self.export_service = export_service or StatisticsTextExporter()
        self.roster = roster

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------
    def generate_statistics(self) -> MatchStatistics:
        """Build a :class:`MatchStatistics` snapshot; disallowed goals are ignored."""
        scorers: Counter = Counter()
        assisters: Counter = Counter()
        team_goals = 0
        opposition_goals = 0

        for goal in self.match_state.goals:
            if goal.disallowed:
                continue
            if self.teams.goal_side(goal) is Side.B:
                opposition_goals += 1
                continue

            team_goals += 1
            if _countable(goal.scorer_name):
                scorers[goal.scorer_name] += 1
            if _countable(goal.assist_name):
                assisters[goal.assist_name] += 1

        return MatchStatistics(
            side_a_name=self.match_state.side_a_name,
            side_b_name=self.match_state.side_b_name,
            team_goals=team_goals,
            opposition_goals=opposition_goals,
            scorers=_ranked(scorers),
            assisters=_ranked(assisters),
            event_counts=self.event_counts(),
            goal_counts=self.goal_counts(),
            attendance=self.roster.attendance_summary() if self.roster is not None else None,
        )

    def goal_counts(self) -> GoalCounts:
        counts = GoalCounts()
        for goal in self.match_state.goals:
            if goal.disallowed:
                counts.disallowed += 1
                continue
            counts.total += 1
            if self.teams.goal_side(goal) is Side.B:
                counts.opposition += 1
            else:
                counts.team += 1
        return counts

    def event_counts(self) -> EventCounts:
        """Card/foul/penalty/incident counts plus allowed goals and total entries."""
        state = self.match_state
        counts = EventCounts(
            goals=sum(1 for goal in state.goals if not goal.disallowed),
            total=len(state.goals) + len(state.events),
        )
        for event in state.events:
            event_type = event.event_type.lower()
            if "card" in event_type:
                counts.cards += 1
            elif "foul" in event_type:
                counts.fouls += 1
            elif "penalty" in event_type:
                counts.penalties += 1
            elif "incident" in event_type:
                counts.incidents += 1
        return counts

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------
    def timeline_rows(self) -> List[TimelineEntry]:
        return self.projector.project(Timeline(self.match_state))

    def share_text(self) -> str:
        """Plain-text match summary: header, one line per log entry, statistics."""
        stats = self.generate_statistics()
        game_time = fmt_mmss(self._timer_service.current_seconds())

        header = (
            f"⚽ Match Summary: {stats.side_a_name} vs {stats.side_b_name}\n"
            f"⌚ Game Time: {game_time}\n"
            f"🔢 Result: {stats.result} ({stats.team_goals} - {stats.opposition_goals})\n\n"
        )
        lines = "\n".join(row.line for row in self.timeline_rows())
        return f"{header}{lines}\n\n{self.export_service.export_to_text(stats)}"

    def share_text_encoded(self) -> str:
        """The summary percent-encoded for a URL query value."""
        return quote(self.share_text(), safe=_URI_COMPONENT_SAFE)

    def whatsapp_url(self) -> str:
        return WHATSAPP_SHARE_URL.format(text=self.share_text_encoded())

    # ------------------------------------------------------------------
    # Exports
    # ------------------------------------------------------------------
    def export_json(self) -> Dict[str, object]:
        """Full match record with derived statistics, ready for ``json.dumps``."""
        stats = self.generate_statistics()
        return {
            "timestamp": dt.datetime.fromtimestamp(now_ts(), tz=dt.timezone.utc).isoformat(),
            "match": self.match_state.to_json(),
            "statistics": statistics_to_json(stats),
            "timeline": [row.to_json() for row in self.timeline_rows()],
        }

    def generate_report_csv(self, rows: Optional[Iterable[TimelineEntry]] = None) -> str:
        """
        Return a CSV document describing the match.

        Args:
            rows: Optional pre-built timeline rows; defaults to the current log

        Returns:
            CSV formatted string with a summary block followed by one row per
            timeline entry
        """
        stats = self.generate_statistics()
        rows = list(rows) if rows is not None else self.timeline_rows()

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")

        writer.writerow(["GameTime Match Report"])
        writer.writerow(["Generated", dt.datetime.fromtimestamp(now_ts()).isoformat(timespec="seconds")])
        writer.writerow([stats.side_a_name, stats.team_goals])
        writer.writerow([stats.side_b_name, stats.opposition_goals])
        writer.writerow(["Result", stats.result])
        writer.writerow(["Elapsed Seconds", self._timer_service.current_seconds()])
        writer.writerow(["Disallowed Goals", stats.goal_counts.disallowed])
        writer.writerow(["Cards", stats.event_counts.cards])
        writer.writerow(["Fouls", stats.event_counts.fouls])
        writer.writerow([])

        writer.writerow(["Minute", "Match Second", "Type", "Side", "Description", "Disallowed", "Details"])
        for row in rows:
            writer.writerow(
                [
                    row.time_label,
                    row.match_second,
                    row.kind,
                    row.side.value if row.side else "",
                    row.summary,
                    "yes" if row.disallowed else "no",
                    " | ".join(row.details),
                ]
            )

        csv_text = buffer.getvalue()
        buffer.close()
        return csv_text


def statistics_to_json(stats: MatchStatistics) -> Dict[str, object]:
    return {
        "side_a_name": stats.side_a_name,
        "side_b_name": stats.side_b_name,
        "team_goals": stats.team_goals,
        "opposition_goals": stats.opposition_goals,
        "result": stats.result,
        "scorers": [{"name": r.name, "count": r.count} for r in stats.scorers],
        "assisters": [{"name": r.name, "count": r.count} for r in stats.assisters],
        "event_counts": vars(stats.event_counts).copy(),
        "goal_counts": vars(stats.goal_counts).copy(),
        "attendance": stats.attendance.to_json() if stats.attendance is not None else None,
    }
