"""Tests for the Flask API."""

import dataclasses

import pytest
import requests
from factories import after_lock, before_lock, full_schedule, round_robin_week

from survivor_pool.app import create_app
from survivor_pool.models import Contest, GameStatus
from survivor_pool.store import JsonStore


def home_wins(week):
    return [
        dataclasses.replace(g, status=GameStatus.FINAL, home_score=21, away_score=14, winner=g.home)
        for g in round_robin_week(week)
    ]


class FakeFeed:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def fetch_week(self, season, week, refresh=False):
        self.calls.append((season, week, refresh))
        if self.error:
            raise self.error
        return home_wins(week)


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def store(tmp_path):
    store = JsonStore(str(tmp_path / "pool.json"))
    store.save_contest(Contest(contest_id="c1", name="Office Pool", season=2025))
    store.upsert_games(full_schedule())
    store.save()
    return store


@pytest.fixture
def clock():
    return Clock(before_lock(1))


@pytest.fixture
def feed():
    return FakeFeed()


@pytest.fixture
def client(store, feed, clock):
    app = create_app(store=store, feed=feed, clock=clock)
    app.config["TESTING"] = True
    return app.test_client()


def join(client, user_id):
    resp = client.post("/api/contests/c1/join", json={"user_id": user_id})
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["entry_id"]


def submit(client, entry_id, week, team_ids):
    return client.post("/api/contests/c1/picks", json={"entry_id": entry_id, "week": week, "team_ids": team_ids})


def test_health_and_schedule(client):
    assert client.get("/api/health").get_json()["status"] == "ok"
    week_one = client.get("/api/schedule?week=1").get_json()
    assert len(week_one) == 16
    assert len(client.get("/api/schedule").get_json()) == 16 * 18


@pytest.mark.parametrize("week", [0, 19])
def test_schedule_for_unknown_week_is_rejected(client, week):
    resp = client.get(f"/api/schedule?week={week}")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "unknown_week"


def test_join_twice_is_rejected(client):
    join(client, "u1")
    resp = client.post("/api/contests/c1/join", json={"user_id": "u1"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "already_joined"


def test_join_requires_user(client):
    resp = client.post("/api/contests/c1/join", json={})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_request"


def test_unknown_contest_and_entry_are_404(client):
    assert client.get("/api/contests/nope").status_code == 404
    assert client.get("/api/contests/c1/entries/missing").status_code == 404
    assert submit(client, "missing", 1, ["KC"]).status_code == 404


def test_pick_is_saved_and_reported(client, store):
    entry_id = join(client, "u1")
    resp = submit(client, entry_id, 1, ["kc"])
    assert resp.status_code == 201
    assert resp.get_json()["picks"][0]["team_id"] == "KC"
    assert [p.team_id for p in JsonStore.open(store.path).picks_for_entry(entry_id)] == ["KC"]

    teams = client.get(f"/api/contests/c1/entries/{entry_id}/available-teams").get_json()
    assert teams["total_available"] == 31
    assert teams["used_team_ids"] == ["KC"]
    assert "KC" not in {t["team_id"] for t in teams["available_teams"]}


def test_pick_rules_are_enforced(client, clock):
    entry_id = join(client, "u1")
    assert submit(client, entry_id, 1, ["KC"]).status_code == 201
    clock.now = before_lock(5)
    resp = submit(client, entry_id, 5, ["KC"])
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "already_used_team"
    clock.now = before_lock(12)
    assert submit(client, entry_id, 12, ["BUF"]).get_json()["error"] == "wrong_pick_count"
    assert submit(client, entry_id, 4, ["BUF"]).get_json()["error"] == "deadline_passed"


def test_malformed_pick_is_bad_request(client):
    entry_id = join(client, "u1")
    resp = client.post("/api/contests/c1/picks", json={"entry_id": entry_id, "week": "one", "team_ids": ["KC"]})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_request"


def test_week_processing_eliminates_losers(client, feed, clock):
    week_one = home_wins(1)
    winner_a, winner_b = week_one[0].home, week_one[2].home
    loser = week_one[1].away
    e1, e2, e3 = join(client, "u1"), join(client, "u2"), join(client, "u3")
    assert submit(client, e1, 1, [winner_a]).status_code == 201
    assert submit(client, e2, 1, [loser]).status_code == 201
    assert submit(client, e3, 1, [winner_b]).status_code == 201

    clock.now = after_lock(1)
    resp = client.post("/api/contests/c1/process-week/1?refresh=true")
    summary = resp.get_json()
    assert resp.status_code == 200
    assert (summary["survived"], summary["eliminated"], summary["remaining"]) == (2, 1, 2)
    assert summary["contest_status"] == "active"
    assert feed.calls == [(2025, 1, True)]

    detail = client.get(f"/api/contests/c1/entries/{e2}").get_json()
    assert detail["entry"]["alive"] is False
    assert detail["standing"]["eliminated_at_week"] == 1
    assert detail["standing"]["elimination_reason"] == "incorrect_pick"
    assert detail["picks"][0]["locked"] is True

    board = client.get("/api/contests/c1/leaderboard").get_json()
    assert board[-1]["entry_id"] == e2
    assert {row["entry_id"] for row in board[:2]} == {e1, e3}

    # Scoring the same week again changes nothing.
    client.post("/api/contests/c1/process-week/1")
    assert client.get("/api/contests/c1/leaderboard").get_json() == board

    clock.now = before_lock(2)
    assert submit(client, e2, 2, ["DAL"]).get_json()["error"] == "entry_not_alive"
    assert client.post("/api/contests/c1/join", json={"user_id": "late"}).get_json()["error"] == "contest_not_open"


def test_last_entry_standing_wins(client, clock):
    week_one = home_wins(1)
    e1, e2 = join(client, "u1"), join(client, "u2")
    submit(client, e1, 1, [week_one[0].home])
    submit(client, e2, 1, [week_one[0].away])
    clock.now = after_lock(1)
    summary = client.post("/api/contests/c1/process-week/1?refresh=true").get_json()
    assert summary["contest_status"] == "completed"
    assert summary["winners"] == [e1]
    assert client.get("/api/contests/c1").get_json()["winner_entry_ids"] == [e1]


def test_missing_results_leave_picks_pending(client):
    e1, e2 = join(client, "u1"), join(client, "u2")
    submit(client, e1, 1, ["KC"])
    submit(client, e2, 1, ["BUF"])
    summary = client.post("/api/contests/c1/process-week/1").get_json()
    assert summary["pending"] == 2
    assert summary["remaining"] == 2


def test_feed_failure_is_bad_gateway(store, clock):
    app = create_app(store=store, feed=FakeFeed(error=requests.ConnectionError("down")), clock=clock)
    resp = app.test_client().post("/api/contests/c1/process-week/1?refresh=true")
    assert resp.status_code == 502
    assert resp.get_json()["error"] == "feed_unavailable"


def test_unlocked_week_does_not_eliminate_entries_without_picks(client):
    e1, e2 = join(client, "u1"), join(client, "u2")
    submit(client, e1, 1, ["KC"])
    resp = client.post("/api/contests/c1/process-week/5")
    assert resp.status_code == 200
    assert resp.get_json()["outcomes"] == []
    for entry_id in (e1, e2):
        assert client.get(f"/api/contests/c1/entries/{entry_id}").get_json()["entry"]["alive"] is True
    assert client.get("/api/contests/c1").get_json()["status"] == "open"


def test_entry_without_pick_is_out_after_lock(client, clock):
    e1, e2 = join(client, "u1"), join(client, "u2")
    submit(client, e1, 1, [home_wins(1)[0].home])
    clock.now = after_lock(1)
    summary = client.post("/api/contests/c1/process-week/1?refresh=true").get_json()
    assert summary["winners"] == [e1]
    detail = client.get(f"/api/contests/c1/entries/{e2}").get_json()
    assert detail["standing"]["elimination_reason"] == "no_pick_submitted"


def test_week_outside_contest_is_rejected(client, store):
    join(client, "u1")
    store.save_contest(Contest(contest_id="c1", name="Office Pool", season=2025, start_week=5))
    resp = client.post("/api/contests/c1/process-week/1")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "unknown_week"
    assert client.get("/api/contests/c1").get_json()["status"] == "open"
    assert client.post("/api/contests/c1/process-week/19").get_json()["error"] == "unknown_week"
