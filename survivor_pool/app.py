import datetime as _dt
import logging
import threading

import requests
from flask import Flask, jsonify, request
from flask_cors import CORS

from .cache import ResultsCache
from .config import Settings, load_settings
from .contest import join_contest
from .feeds import EspnResultsFeed
from .models import Rejected
from .season_calendar import SeasonCalendar
from .service import NotFound, process_week, require_contest, require_entry, season_state, submit_picks
from .standings import leaderboard
from .store import JsonStore, StoreError
from .teams import TEAMS

logger = logging.getLogger(__name__)


def _utcnow():
    return _dt.datetime.now(_dt.timezone.utc)


def rejected_response(result: Rejected):
    return jsonify(result.to_dict()), 400


def create_app(settings=None, store=None, feed=None, clock=_utcnow):
    settings = settings or Settings()
    store = store or JsonStore.open(settings.data_path)
    if feed is None:
        feed = EspnResultsFeed(
            cache=ResultsCache(ttl=settings.cache_ttl, max_entries=settings.cache_size),
            base_url=settings.espn_base_url,
            timeout=settings.http_timeout,
        )

    app = Flask(__name__)
    CORS(app)
    app.config["SURVIVOR_STORE"] = store
    # One writer at a time keeps "exactly N picks per entry and week" true.
    write_lock = threading.Lock()

    @app.errorhandler(NotFound)
    def not_found(e):
        return jsonify({"error": "not_found", "message": str(e)}), 404

    @app.errorhandler(StoreError)
    def store_failed(e):
        logger.error("Store failure: %s", e)
        return jsonify({"error": "store_error", "message": str(e)}), 500

    @app.route('/api/health')
    def health():
        return jsonify({"status": "ok", "contests": len(store.contests)})

    @app.route('/api/schedule')
    def get_schedule():
        week = request.args.get('week', type=int)
        if week is None:
            return jsonify([g.to_dict() for g in store.all_games()])
        games = SeasonCalendar(store.all_games()).games_for_week(week)
        if isinstance(games, Rejected):
            return rejected_response(games)
        return jsonify([g.to_dict() for g in games])

    @app.route('/api/contests/<contest_id>')
    def get_contest(contest_id):
        contest = require_contest(store, contest_id)
        data = contest.to_dict()
        state = season_state(store, contest_id)
        data["participants"] = len(state.standings)
        data["alive"] = len(state.alive_entry_ids)
        return jsonify(data)

    @app.route('/api/contests/<contest_id>/join', methods=['POST'])
    def join(contest_id):
        body = request.get_json(silent=True) or {}
        user_id = body.get("user_id")
        if not user_id:
            return jsonify({"error": "bad_request", "message": "user_id is required"}), 400
        with write_lock:
            contest = require_contest(store, contest_id)
            result = join_contest(contest, str(user_id), store.entries_for_contest(contest_id), clock())
            if isinstance(result, Rejected):
                return rejected_response(result)
            store.save_entry(result)
            store.save()
        logger.info("User %s joined contest %s as entry %s", user_id, contest_id, result.entry_id)
        return jsonify(result.to_dict()), 201

    @app.route('/api/contests/<contest_id>/picks', methods=['POST'])
    def save_picks(contest_id):
        body = request.get_json(silent=True) or {}
        try:
            entry_id = str(body["entry_id"])
            week = int(body["week"])
            team_ids = [str(t).upper() for t in body["team_ids"]]
        except (KeyError, TypeError, ValueError):
            return jsonify({"error": "bad_request", "message": "entry_id, week and team_ids are required"}), 400
        with write_lock:
            result = submit_picks(store, contest_id, entry_id, week, team_ids, clock())
        if isinstance(result, Rejected):
            return rejected_response(result)
        return jsonify({"status": "success", "picks": [p.to_dict() for p in result]}), 201

    @app.route('/api/contests/<contest_id>/entries/<entry_id>')
    def get_entry(contest_id, entry_id):
        entry = require_entry(store, contest_id, entry_id)
        standing = season_state(store, contest_id).standings[entry_id]
        picks = sorted(store.picks_for_entry(entry_id), key=lambda p: (p.week, p.team_id))
        return jsonify({
            "entry": entry.to_dict(),
            "standing": standing.to_dict(),
            "picks": [p.to_dict() for p in picks],
        })

    @app.route('/api/contests/<contest_id>/entries/<entry_id>/available-teams')
    def available_teams(contest_id, entry_id):
        require_entry(store, contest_id, entry_id)
        standing = season_state(store, contest_id).standings[entry_id]
        teams = [
            {"team_id": t.team_id, "name": t.name, "conference": t.conference, "division": t.division}
            for t in sorted(TEAMS.values(), key=lambda t: (t.conference, t.division, t.name))
            if t.team_id in standing.available_team_ids
        ]
        return jsonify({
            "available_teams": teams,
            "used_team_ids": sorted(standing.used_team_ids),
            "total_available": len(teams),
            "total_used": len(standing.used_team_ids),
        })

    @app.route('/api/contests/<contest_id>/leaderboard')
    def get_leaderboard(contest_id):
        require_contest(store, contest_id)
        entries = store.entries_for_contest(contest_id)
        return jsonify(leaderboard(entries, season_state(store, contest_id)))

    @app.route('/api/contests/<contest_id>/process-week/<int:week>', methods=['POST'])
    def process(contest_id, week):
        refresh = request.args.get('refresh', 'false').lower() == 'true'
        try:
            with write_lock:
                summary = process_week(store, contest_id, week, feed=feed if refresh else None,
                                       refresh=refresh, now=clock())
        except requests.RequestException as e:
            logger.error("Results feed failed for week %s: %s", week, e)
            return jsonify({"error": "feed_unavailable", "message": str(e)}), 502
        if isinstance(summary, Rejected):
            return rejected_response(summary)
        return jsonify(summary)

    return app


def main():
    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app(settings)
    app.run(host=settings.host, port=settings.port)


if __name__ == '__main__':
    main()
