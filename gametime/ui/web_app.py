"""
Web application module for the GameTime match tracker.

This module contains the Flask web server that exposes the match clock, goal
and event log, team names, squad roster, timeline and statistics as JSON API
endpoints.
"""
from typing import Any, Dict, Optional

from flask import Flask, Response, g, jsonify, request

from ..models import MatchState, Side
from ..services import (
    AnalyticsService, ConfigurationError, IndexOutOfRange, IntervalTicker, MatchConfig,
    MatchLogError, MatchLogService, PersistenceService, QueuedNotifier, RosterService,
    ServiceFactory, TeamService, Ticker, TimerService, UserCancelled, ValidationError,
    load_config
)
from ..services.analytics_service import statistics_to_json
from ..utils import APP_TITLE, get_logger

log = get_logger("ui.web")


class WebAppState:
    """
    State holder for the web application.

    Services are created by the factory around a single match; the match is
    loaded from persistence on construction. ``lock`` is the clock lock, held
    by the web layer around every request so commands never interleave with a
    clock tick.
    """

    def __init__(
        self,
        config: Optional[MatchConfig] = None,
        ticker: Optional[Ticker] = None,
        autosave_dir: str = "autosave",
    ):
        self.config = config or MatchConfig()
        self.notifier = QueuedNotifier()
        self.autosave_dir = autosave_dir
        self.service_factory = ServiceFactory(self.config, notifier=self.notifier)

        services = self.service_factory.create_complete_service_suite(
            ticker=ticker or IntervalTicker()
        )
        self.match_state: MatchState = services["state"]
        self.timer_service: TimerService = services["timer"]
        self.team_service: TeamService = services["teams"]
        self.match_log: MatchLogService = services["match_log"]
        self.analytics_service: AnalyticsService = services["analytics"]
        self.persistence_service: PersistenceService = services["persistence"]
        self.roster_service: RosterService = services["roster"]
        self.event_types = services["event_types"]
        self.lock = self.timer_service.lock

    def snapshot(self) -> Dict[str, Any]:
        """Everything the front end needs to redraw."""
        state = self.match_state
        return {
            "timer": {
                "elapsed_seconds": self.timer_service.current_seconds(),
                "display": self.timer_service.display_time(),
                "is_running": state.is_running,
                "is_second_half": state.is_second_half,
                "game_duration_seconds": state.game_duration_seconds,
                "pending_goal_second": state.pending_goal_second,
            },
            "teams": {
                "A": {"name": state.side_a_name, "history": list(state.side_a_history)},
                "B": {"name": state.side_b_name, "history": list(state.side_b_history)},
            },
            "score": {"A": state.score_a, "B": state.score_b, "line": self.match_log.score_line()},
            "event_types": self.event_types.types,
            "timeline": [row.to_json() for row in self.analytics_service.timeline_rows()],
        }

    def drain_notifications(self) -> list:
        return [n.to_json() for n in self.notifier.drain()]


def _body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _parse_side(raw: Any) -> Side:
    side = Side.parse(raw)
    if side is None:
        raise ValidationError("side", f"Unknown side: {raw!r}")
    return side


def create_app(
    config: Optional[MatchConfig] = None,
    app_state: Optional[WebAppState] = None,
) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        config: Match configuration; loaded from the environment when omitted
        app_state: Pre-built state holder (tests inject one with a manual ticker)

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__, static_folder=None)
    if app_state is None:
        app_state = WebAppState(config or load_config())
    app.config["GAMETIME_STATE"] = app_state

    def _ok(**payload: Any):
        return jsonify({"success": True, **payload, "notifications": app_state.drain_notifications()})

    # ==================== Request serialization ==================== #

    @app.before_request
    def acquire_match_lock():
        app_state.lock.acquire()
        g.match_lock_held = True

    @app.teardown_request
    def release_match_lock(exc: Optional[BaseException]):
        if g.pop("match_lock_held", False):
            app_state.lock.release()

    # ==================== Error mapping ==================== #

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        return jsonify({"success": False, "error": e.reason, "field": e.field,
                        "notifications": app_state.drain_notifications()}), 400

    @app.errorhandler(ConfigurationError)
    def handle_configuration_error(e: ConfigurationError):
        return jsonify({"success": False, "error": e.reason, "field": e.field}), 400

    @app.errorhandler(IndexOutOfRange)
    def handle_index_error(e: IndexOutOfRange):
        return jsonify({"success": False, "error": str(e), "refresh": True,
                        "notifications": app_state.drain_notifications()}), 404

    @app.errorhandler(UserCancelled)
    def handle_cancelled(e: UserCancelled):
        return jsonify({"success": False, "cancelled": True, "error": e.reason,
                        "notifications": app_state.drain_notifications()})

    @app.errorhandler(MatchLogError)
    def handle_match_log_error(e: MatchLogError):
        log.error(f"Unhandled match log error: {e}")
        return jsonify({"success": False, "error": str(e)}), 500

    # ==================== Clock ==================== #

    @app.route("/api/state", methods=["GET"])
    def get_state():
        return _ok(title=APP_TITLE, **app_state.snapshot())

    @app.route("/api/timer/start", methods=["POST"])
    def start_timer():
        started = app_state.timer_service.start()
        return _ok(started=started, **app_state.snapshot())

    @app.route("/api/timer/pause", methods=["POST"])
    def pause_timer():
        paused = app_state.timer_service.pause()
        return _ok(paused=paused, **app_state.snapshot())

    @app.route("/api/timer/toggle", methods=["POST"])
    def toggle_timer():
        running = app_state.timer_service.toggle()
        return _ok(is_running=running)

    @app.route("/api/timer/duration", methods=["POST"])
    def set_duration():
        data = _body()
        try:
            seconds = int(data.get("game_duration_seconds"))
        except (TypeError, ValueError):
            raise ValidationError("game_duration_seconds", "Expected a whole number of seconds")
        app_state.timer_service.set_game_duration(seconds)
        return _ok(game_duration_seconds=seconds)

    # ==================== Goals and events ==================== #

    @app.route("/api/goals/capture-time", methods=["POST"])
    def capture_goal_time():
        second = app_state.match_log.capture_goal_time()
        return _ok(match_second=second, time_label=app_state.timer_service.format_match_time(second))

    @app.route("/api/goals/capture-time", methods=["DELETE"])
    def cancel_goal():
        app_state.match_log.cancel_goal()
        return _ok()

    @app.route("/api/goals", methods=["POST"])
    def record_goal():
        data = _body()
        goal = app_state.match_log.record_goal(
            data.get("scorer_name"),
            scorer_shirt_number=data.get("scorer_shirt_number"),
            assist_name=data.get("assist_name"),
            assist_shirt_number=data.get("assist_shirt_number"),
            at_second=data.get("match_second"),
        )
        return _ok(goal=goal.to_json(), score=app_state.match_log.score_line()), 201

    @app.route("/api/goals/opposition", methods=["POST"])
    def record_opposition_goal():
        goal = app_state.match_log.record_opposition_goal(at_second=_body().get("match_second"))
        return _ok(goal=goal.to_json(), score=app_state.match_log.score_line()), 201

    @app.route("/api/goals/<int:index>/disallow", methods=["POST"])
    def toggle_disallowed(index: int):
        data = _body()
        goal = app_state.match_log.toggle_disallowed(
            index, reason=data.get("reason"), expected_id=data.get("entry_id")
        )
        return _ok(goal=goal.to_json(), score=app_state.match_log.score_line())

    @app.route("/api/events", methods=["POST"])
    def record_event():
        data = _body()
        event = app_state.match_log.record_event(
            data.get("event_type"), notes=data.get("notes", ""), at_second=data.get("match_second")
        )
        return _ok(event=event.to_json()), 201

    @app.route("/api/entries/<kind>/<int:index>/time", methods=["PUT"])
    def edit_entry_time(kind: str, index: int):
        data = _body()
        record = app_state.match_log.edit_time(
            index, kind, data.get("minutes"), expected_id=data.get("entry_id")
        )
        return _ok(entry=record.to_json())

    @app.route("/api/entries/<kind>/<int:index>", methods=["DELETE"])
    def delete_entry(kind: str, index: int):
        expected_id = request.args.get("entry_id", type=int)
        record = app_state.match_log.delete_entry(index, kind, expected_id=expected_id)
        return _ok(entry=record.to_json(), score=app_state.match_log.score_line())

    # ==================== Teams ==================== #

    @app.route("/api/teams/<side>", methods=["PUT"])
    def rename_team(side: str):
        name = app_state.match_log.rename_side(_parse_side(side), _body().get("name"))
        return _ok(name=name, score=app_state.match_log.score_line())

    # ==================== Reports ==================== #

    @app.route("/api/timeline", methods=["GET"])
    def get_timeline():
        rows = app_state.analytics_service.timeline_rows()
        return _ok(timeline=[row.to_json() for row in rows], count=len(rows))

    @app.route("/api/statistics", methods=["GET"])
    def get_statistics():
        stats = app_state.analytics_service.generate_statistics()
        return _ok(statistics=statistics_to_json(stats))

    @app.route("/api/share", methods=["GET"])
    def get_share():
        analytics = app_state.analytics_service
        return _ok(text=analytics.share_text(), url=analytics.whatsapp_url())

    @app.route("/api/export", methods=["GET"])
    def export_match():
        return _ok(export=app_state.analytics_service.export_json())

    @app.route("/api/report.csv", methods=["GET"])
    def export_csv():
        csv_text = app_state.analytics_service.generate_report_csv()
        return Response(
            csv_text,
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=match_report.csv"},
        )

    # ==================== Roster and attendance ==================== #

    @app.route("/api/roster", methods=["GET"])
    def get_roster():
        roster = app_state.roster_service
        return _ok(players=[p.to_json() for p in roster.get_roster()], stats=roster.stats())

    @app.route("/api/roster", methods=["POST"])
    def add_player():
        data = _body()
        player = app_state.roster_service.add_player(data.get("name"), data.get("shirt_number"))
        return _ok(player=player.to_json()), 201

    @app.route("/api/roster/bulk", methods=["POST"])
    def add_players_bulk():
        result = app_state.roster_service.add_players_bulk(_body().get("names"))
        return _ok(**result.to_json())

    @app.route("/api/roster/<name>", methods=["PUT"])
    def edit_player(name: str):
        data = _body()
        player = app_state.roster_service.edit_player(
            name, data.get("name", name), data.get("shirt_number")
        )
        return _ok(player=player.to_json())

    @app.route("/api/roster/<name>", methods=["DELETE"])
    def remove_player(name: str):
        player = app_state.roster_service.remove_player(name)
        return _ok(player=player.to_json())

    @app.route("/api/roster", methods=["DELETE"])
    def clear_roster():
        app_state.roster_service.clear_roster()
        return _ok()

    @app.route("/api/attendance", methods=["GET"])
    def get_attendance():
        roster = app_state.roster_service
        return _ok(
            players=[r.to_json() for r in roster.match_attendance()],
            summary=roster.attendance_summary().to_json(),
        )

    @app.route("/api/attendance/<name>", methods=["PUT"])
    def set_attendance(name: str):
        record = app_state.roster_service.set_attendance(name, _body().get("attending"))
        return _ok(player=record.to_json())

    @app.route("/api/attendance/<name>/toggle", methods=["POST"])
    def toggle_attendance(name: str):
        record = app_state.roster_service.toggle_attendance(name)
        return _ok(player=record.to_json())

    @app.route("/api/attendance", methods=["PUT"])
    def mark_all_attendance():
        attending = _body().get("attending")
        if not isinstance(attending, bool):
            raise ValidationError("attending", "Expected true or false")
        app_state.roster_service.mark_all(attending)
        return _ok(summary=app_state.roster_service.attendance_summary().to_json())

    @app.route("/api/attendance", methods=["DELETE"])
    def clear_attendance():
        app_state.roster_service.clear_attendance()
        return _ok(summary=app_state.roster_service.attendance_summary().to_json())

    # ==================== Storage ==================== #

    @app.route("/api/storage", methods=["GET"])
    def storage_status():
        persistence = app_state.persistence_service
        return _ok(healthy=persistence.check_storage_health(), info=persistence.storage_info())

    @app.route("/api/save", methods=["POST"])
    def save_match():
        path = PersistenceService.auto_save(app_state.match_state, app_state.autosave_dir)
        if path is None:
            return jsonify({"success": False, "error": "Failed to save match"}), 500
        return _ok(path=path)

    @app.route("/api/load", methods=["POST"])
    def load_match():
        data = _body().get("match")
        if not isinstance(data, dict):
            raise ValidationError("match", "Expected a match object")
        try:
            new_state = MatchState.from_json(data)
        except (TypeError, ValueError) as e:
            raise ValidationError("match", f"Unreadable match record ({e})")
        app_state.match_log.replace_state(new_state)
        return _ok(**app_state.snapshot())

    @app.route("/api/reset", methods=["POST"])
    def reset_match():
        app_state.match_log.reset()
        app_state.roster_service.clear_attendance(silent=True)
        return _ok(**app_state.snapshot())

    return app


def run_web_app(
    host: str = "127.0.0.1",
    port: int = 7122,
    config_path: Optional[str] = None,
) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
        config_path: Optional JSON config file
    """
    app = create_app(config=load_config(config_path))
    app_state: WebAppState = app.config["GAMETIME_STATE"]
    log.info(f"Serving {APP_TITLE} on http://{host}:{port}")
    try:
        app.run(host=host, port=port, debug=False)
    finally:
        app_state.timer_service.shutdown()


if __name__ == "__main__":
    run_web_app()
