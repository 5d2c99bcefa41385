"""Tests for week processing against the JSON store."""

import dataclasses

import pytest
from factories import after_lock, before_lock, full_schedule, make_entry, pick, round_robin_week

from survivor_pool.models import Contest, ContestStatus, EliminationReason, GameStatus, Rejected, RejectionReason
from survivor_pool.service import process_week
from survivor_pool.store import JsonStore


def finished(game, winner):
    home_won = winner == game.home
    return dataclasses.replace(game, status=GameStatus.FINAL, winner=winner,
                               home_score=27 if home_won else 13, away_score=13 if home_won else 27)


@pytest.fixture
def store(tmp_path):
    store = JsonStore(str(tmp_path / "pool.json"))
    store.save_contest(Contest(contest_id="c1", name="Office Pool", season=2025))
    store.upsert_games(full_schedule())
    store.save_entry(make_entry("e1"))
    store.save_entry(make_entry("e2"))
    return store


def test_future_week_leaves_entries_without_picks_alone(store):
    summary = process_week(store, "c1", 5, now=before_lock(1))
    assert summary["locked"] is False
    assert summary["outcomes"] == []
    assert summary["remaining"] == 2
    assert all(store.get_entry(e).alive for e in ("e1", "e2"))
    assert store.get_contest("c1").status == ContestStatus.OPEN


def test_before_lock_only_complete_pick_sets_are_scored(store):
    store.replace_week_picks("e1", 1, [pick("e1", 1, "KC")])
    summary = process_week(store, "c1", 1, now=before_lock(1))
    assert [o["entry_id"] for o in summary["outcomes"]] == ["e1"]
    assert summary["pending"] == 1
    assert store.get_entry("e2").alive
    assert not store.picks_for_entry("e1")[0].locked


def test_missing_pick_eliminates_once_the_week_locks(store):
    store.replace_week_picks("e1", 1, [pick("e1", 1, "KC")])
    summary = process_week(store, "c1", 1, now=after_lock(1))
    assert summary["locked"] is True
    e2 = store.get_entry("e2")
    assert not e2.alive
    assert e2.eliminated_reason == EliminationReason.NO_PICK_SUBMITTED
    assert store.picks_for_entry("e1")[0].locked


def test_naive_now_is_read_as_utc(store):
    summary = process_week(store, "c1", 5, now=before_lock(5).replace(tzinfo=None))
    assert summary["locked"] is False
    assert summary["remaining"] == 2


@pytest.mark.parametrize("week", [1, 4, 19])
def test_week_outside_contest_is_rejected(store, week):
    store.save_contest(Contest(contest_id="c1", name="Office Pool", season=2025, start_week=5))
    result = process_week(store, "c1", week, now=after_lock(18))
    assert isinstance(result, Rejected)
    assert result.reason == RejectionReason.UNKNOWN_WEEK
    assert all(store.get_entry(e).alive for e in ("e1", "e2"))
    assert store.outcomes_for_contest("c1") == []
    assert store.get_contest("c1").status == ContestStatus.OPEN


def test_contest_waits_for_last_pending_pick(store):
    first, second = round_robin_week(1)[:2]
    store.replace_week_picks("e1", 1, [pick("e1", 1, first.away)])
    store.replace_week_picks("e2", 1, [pick("e2", 1, second.home)])
    store.upsert_games([finished(first, first.home)])

    summary = process_week(store, "c1", 1, now=after_lock(1))
    assert (summary["eliminated"], summary["pending"], summary["remaining"]) == (1, 1, 1)
    assert summary["contest_status"] == "active"
    assert summary["winners"] == []

    store.upsert_games([finished(second, second.away)])
    summary = process_week(store, "c1", 1, now=after_lock(1))
    assert summary["remaining"] == 0
    assert summary["contest_status"] == "completed"
    assert summary["winners"] == []
    assert store.get_contest("c1").winner_entry_ids == ()


def test_completed_contest_is_not_processed_again(store):
    store.save_contest(Contest(contest_id="c1", name="Office Pool", season=2025,
                               status=ContestStatus.COMPLETED, winner_entry_ids=("e1",)))
    result = process_week(store, "c1", 2, now=after_lock(2))
    assert isinstance(result, Rejected)
    assert result.reason == RejectionReason.CONTEST_NOT_OPEN
    assert store.get_entry("e1").alive
