"""Tests for week lookups and lock times."""

from factories import full_schedule, kickoff, make_game

from survivor_pool.models import Rejected, RejectionReason
from survivor_pool.season_calendar import SeasonCalendar


def test_games_for_week_are_ordered_by_kickoff():
    games = [
        make_game(3, "KC", "DEN", hours=60, game_id="b"),
        make_game(3, "BUF", "MIA", hours=0, game_id="z"),
        make_game(3, "DAL", "NYG", hours=60, game_id="a"),
    ]
    calendar = SeasonCalendar(games)
    assert [g.game_id for g in calendar.games_for_week(3)] == ["z", "a", "b"]


def test_lock_time_is_earliest_kickoff():
    calendar = SeasonCalendar(full_schedule())
    assert calendar.lock_time_for_week(7) == kickoff(7)


def test_unknown_week_is_rejected():
    calendar = SeasonCalendar(full_schedule())
    for week in (0, 19):
        result = calendar.games_for_week(week)
        assert isinstance(result, Rejected)
        assert result.reason == RejectionReason.UNKNOWN_WEEK
        assert calendar.lock_time_for_week(week).reason == RejectionReason.UNKNOWN_WEEK


def test_week_without_games_has_no_lock_time():
    calendar = SeasonCalendar([make_game(1, "KC", "BAL")])
    assert calendar.games_for_week(2) == ()
    assert calendar.lock_time_for_week(2).reason == RejectionReason.UNKNOWN_WEEK


def test_teams_playing_and_game_lookup():
    calendar = SeasonCalendar([make_game(5, "KC", "BAL"), make_game(5, "DAL", "NYG")])
    assert calendar.teams_playing(5) == {"KC", "BAL", "DAL", "NYG"}
    assert calendar.game_for_team(5, "NYG").home == "DAL"
    assert calendar.game_for_team(5, "BUF") is None
    assert calendar.teams_playing(40) == set()


def test_custom_season_range():
    calendar = SeasonCalendar(full_schedule(range(1, 18)), last_week=17)
    assert calendar.weeks() == list(range(1, 18))
    assert not calendar.is_known_week(18)
