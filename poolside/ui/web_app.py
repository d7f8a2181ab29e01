"""
Web application module for the Poolside scorekeeper.

This module contains the Flask server that exposes the operator commands of
one in-process :class:`GameSession` as JSON API endpoints.
"""
from dataclasses import asdict
from typing import Optional

from flask import Flask, Response, jsonify, request

from ..models import FIELD_ACTIONS, GOALIE_ACTIONS
from ..services import GameSession, ServiceFactory, StaticPrompts
from ..services.event_log_service import EDITABLE_FIELDS
from ..services.validation import Reason, ValidationResult
from ..utils.constants import DEFAULT_STATE_FILE


def _payload() -> dict:
    return request.get_json(silent=True) or {}


def _result_response(result: ValidationResult, **extra):
    """Translate a command result into the JSON reply; rejections are 400s."""
    if not result:
        return jsonify({"success": False, "error": result.message, "reason": result.reason}), 400
    body = {"success": True}
    body.update(extra)
    return jsonify(body)


def build_state_payload(session: GameSession) -> dict:
    """Snapshot plus the derived views the scoreboard shows."""
    state = session.state
    pending = session.pending_substitution
    data = state.to_json()
    data["phase"] = session.phase.value
    data["active_players"] = [p.to_dict() for p in state.active_players()]
    data["bench_players"] = [p.to_dict() for p in state.bench_players()]
    data["pending_substitution"] = None if pending is None else {
        "time_sec": pending.time_sec,
        "out_ids": sorted(pending.out_ids),
        "in_ids": sorted(pending.in_ids),
    }
    return data


def build_stats_payload(session: GameSession) -> dict:
    return {
        "players": [row.to_dict() for row in session.field_players()],
        "goalies": [row.to_dict() for row in session.goalies()],
        "goals_against_by_scorer": [asdict(e) for e in session.goals_against_by_scorer()],
        "team_stats": session.state.team_stats.to_dict(),
        "timeouts": session.state.timeouts.to_dict(),
        "score": {
            "msu": session.stats.team_goals(),
            "opp": session.stats.goals_conceded(),
        },
        "actions": {
            "field": [kind.value for kind in FIELD_ACTIONS],
            "goalie": [kind.value for kind in GOALIE_ACTIONS],
        },
    }


def create_app(session: Optional[GameSession] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        session: Game session to serve; a session without persistence is
            created when omitted

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    # The browser already asked "are you sure?" before calling /api/game/new
    app.config["SESSION"] = session or GameSession(prompts=StaticPrompts(confirm=True))

    def current() -> GameSession:
        return app.config["SESSION"]

    def with_state(result: ValidationResult):
        return _result_response(result, state=build_state_payload(current()))

    # ==================== State ==================== #

    @app.route("/api/state", methods=["GET"])
    def get_state():
        return jsonify({"success": True, "state": build_state_payload(current())})

    @app.route("/api/stats", methods=["GET"])
    def get_stats():
        return jsonify({"success": True, "stats": build_stats_payload(current())})

    # ==================== Setup ==================== #

    @app.route("/api/setup/opponent", methods=["POST"])
    def set_opponent():
        return with_state(current().set_opponent(_payload().get("opponent", "")))

    @app.route("/api/setup/notes", methods=["POST"])
    def set_notes():
        return with_state(current().set_notes(_payload().get("notes", "")))

    @app.route("/api/setup/period-length", methods=["POST"])
    def set_period_length():
        return with_state(current().set_period_minutes(_payload().get("minutes")))

    @app.route("/api/setup/starters/<player_id>", methods=["POST"])
    def toggle_starter(player_id: str):
        return with_state(current().toggle_starter(player_id))

    @app.route("/api/setup/swim-off/<player_id>", methods=["POST"])
    def select_swim_off(player_id: str):
        return with_state(current().select_swim_off(player_id))

    # ==================== Lifecycle ==================== #

    @app.route("/api/game/start", methods=["POST"])
    def start_game():
        data = _payload()
        return with_state(current().start_game(
            minutes=data.get("minutes"),
            starter_ids=data.get("starter_ids"),
            swim_off_id=data.get("swim_off_id"),
        ))

    @app.route("/api/game/end", methods=["POST"])
    def end_game():
        return with_state(current().end_game())

    @app.route("/api/game/new", methods=["POST"])
    def new_game():
        data = _payload()
        return with_state(current().new_game(clear_roster=bool(data.get("clear_roster", False))))

    @app.route("/api/period/end", methods=["POST"])
    def end_period():
        return with_state(current().end_period())

    @app.route("/api/period/start", methods=["POST"])
    def start_period():
        data = _payload()
        return with_state(current().start_period(
            starter_ids=data.get("starter_ids"),
            swim_off_id=data.get("swim_off_id"),
        ))

    # ==================== Clock ==================== #

    @app.route("/api/clock", methods=["POST"])
    def set_clock():
        return with_state(current().set_clock(_payload().get("clock", "")))

    @app.route("/api/clock/nudge", methods=["POST"])
    def nudge_clock():
        try:
            delta = int(_payload().get("delta", 0))
        except (TypeError, ValueError):
            return jsonify({"success": False, "error": "delta must be a number of seconds"}), 400
        return with_state(current().nudge_clock(delta))

    @app.route("/api/clock/period", methods=["POST"])
    def set_period():
        return with_state(current().set_period(_payload().get("period")))

    # ==================== Substitutions ==================== #

    @app.route("/api/substitution/start", methods=["POST"])
    def start_substitution():
        return with_state(current().start_substitution(_payload().get("clock")))

    @app.route("/api/substitution/out/<player_id>", methods=["POST"])
    def toggle_out(player_id: str):
        return with_state(current().toggle_out(player_id))

    @app.route("/api/substitution/in/<player_id>", methods=["POST"])
    def toggle_in(player_id: str):
        return with_state(current().toggle_in(player_id))

    @app.route("/api/substitution/apply", methods=["POST"])
    def apply_substitution():
        return with_state(current().apply_substitution())

    @app.route("/api/substitution/cancel", methods=["POST"])
    def cancel_substitution():
        return with_state(current().cancel_substitution())

    # ==================== Events ==================== #

    @app.route("/api/events", methods=["GET"])
    def list_events():
        session = current()
        player_id = request.args.get("player_id")
        limit = request.args.get("limit", type=int)
        if player_id:
            events = session.events.events_for_player(player_id)
        elif limit is not None:
            events = session.events.recent(max(0, limit))
        else:
            events = session.state.log
        return jsonify({"success": True, "events": [e.to_dict() for e in events]})

    @app.route("/api/events", methods=["POST"])
    def add_event():
        data = _payload()
        result = current().add_event(data.get("player_id"), data.get("type"), data.get("opp_scorer"))
        if not result:
            return _result_response(result)
        return _result_response(result, event=result.value.to_dict())

    @app.route("/api/events/manual", methods=["POST"])
    def add_manual_event():
        data = _payload()
        result = current().add_manual_event(
            data.get("player_id"), data.get("type"),
            clock_text=data.get("clock"), period=data.get("period"),
            opp_scorer=data.get("opp_scorer"),
        )
        if not result:
            return _result_response(result)
        return _result_response(result, event=result.value.to_dict())

    @app.route("/api/events/<event_id>", methods=["PUT"])
    def update_event(event_id: str):
        fields = {k: v for k, v in _payload().items() if k in EDITABLE_FIELDS}
        result = current().update_event(event_id, **fields)
        if not result:
            return _result_response(result)
        return _result_response(result, event=result.value.to_dict())

    @app.route("/api/events/<event_id>", methods=["DELETE"])
    def delete_event(event_id: str):
        return _result_response(current().remove_event(event_id))

    # ==================== Team situations ==================== #

    @app.route("/api/situations/<action>", methods=["POST"])
    def situation(action: str):
        return with_state(current().situation(action))

    @app.route("/api/team-stats/adjust", methods=["POST"])
    def adjust_team_stat():
        data = _payload()
        return with_state(current().adjust_team_stat(
            data.get("section", ""), data.get("key", ""), data.get("delta", 0)
        ))

    @app.route("/api/timeouts/use", methods=["POST"])
    def use_timeout():
        data = _payload()
        return with_state(current().use_timeout(data.get("team", ""), data.get("kind", "")))

    @app.route("/api/timeouts/adjust", methods=["POST"])
    def adjust_timeout():
        data = _payload()
        return with_state(current().adjust_timeout(
            data.get("team", ""), data.get("kind", ""), data.get("delta", 0)
        ))

    @app.route("/api/swim-off/winner", methods=["POST"])
    def set_swim_winner():
        return with_state(current().set_swim_winner(_payload().get("winner", "")))

    # ==================== Roster ==================== #

    @app.route("/api/players", methods=["GET"])
    def get_players():
        return jsonify({"success": True, "players": [p.to_dict() for p in current().state.roster]})

    @app.route("/api/players", methods=["POST"])
    def create_player():
        data = _payload()
        result = current().add_player(
            data.get("number", 0), data.get("name", "New"), data.get("position", "FP")
        )
        if not result:
            return _result_response(result)
        return _result_response(result, player=result.value.to_dict()), 201

    @app.route("/api/players/<player_id>", methods=["PUT"])
    def update_player(player_id: str):
        data = _payload()
        result = current().update_player(
            player_id, number=data.get("number"), name=data.get("name"), position=data.get("position")
        )
        if not result:
            status = 404 if result.reason == Reason.UNKNOWN_PLAYER else 400
            return jsonify({"success": False, "error": result.message, "reason": result.reason}), status
        return _result_response(result, player=result.value.to_dict())

    @app.route("/api/players/<player_id>", methods=["DELETE"])
    def delete_player(player_id: str):
        result = current().remove_player(player_id)
        if not result and result.reason == Reason.UNKNOWN_PLAYER:
            return jsonify({"success": False, "error": result.message, "reason": result.reason}), 404
        return _result_response(result)

    @app.route("/api/players/import", methods=["POST"])
    def import_players():
        data = _payload()
        text = data.get("csv")
        if text is None:
            return jsonify({"success": False, "error": "No player data provided"}), 400
        result = current().import_roster(text, data.get("mode", "merge"))
        if not result:
            return _result_response(result)
        return _result_response(result, players=[p.to_dict() for p in result.value])

    @app.route("/api/players/export", methods=["GET"])
    def export_players():
        return Response(
            current().export_roster(),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=roster.csv"},
        )

    # ==================== Exports ==================== #

    @app.route("/api/export/<kind>", methods=["GET"])
    def export_csv(kind: str):
        session = current()
        try:
            text = session.export(kind)
        except KeyError:
            return jsonify({"success": False, "error": f"Unknown export: {kind}"}), 404
        return Response(
            text,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={session.export_filename(kind)}"},
        )

    return app


def run_web_app(host: str = "127.0.0.1", port: int = 7122, state_path: Optional[str] = DEFAULT_STATE_FILE) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
        state_path: Snapshot file restored on start and written after every change
    """
    session = GameSession(
        persistence=ServiceFactory().create_persistence_service(state_path),
        prompts=StaticPrompts(confirm=True),
    )
    app = create_app(session)
    app.run(host=host, port=port, debug=False)
