"""Season calendar: which games fall in which week, and when each week locks."""

from __future__ import annotations

import datetime as _dt
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from .models import FIRST_WEEK, LAST_WEEK, Game, RejectionReason, Rejected


class SeasonCalendar:
    """Read-only view of a season's schedule, keyed by week.

    A week locks at the earliest kickoff among its games.  Weeks outside
    ``first_week..last_week`` answer with ``Rejected(UNKNOWN_WEEK)``.
    """

    def __init__(self, games: Iterable[Game], first_week: int = FIRST_WEEK, last_week: int = LAST_WEEK):
        self.first_week = first_week
        self.last_week = last_week
        self._by_week: Dict[int, List[Game]] = {}
        for game in games:
            self._by_week.setdefault(game.week, []).append(game)
        for week_games in self._by_week.values():
            week_games.sort(key=lambda g: (g.kickoff, g.game_id))

    def _unknown(self, week: int) -> Rejected:
        return Rejected(
            RejectionReason.UNKNOWN_WEEK,
            f"Week {week} is outside the season ({self.first_week}-{self.last_week})",
        )

    def weeks(self) -> List[int]:
        return list(range(self.first_week, self.last_week + 1))

    def is_known_week(self, week: int) -> bool:
        return self.first_week <= week <= self.last_week

    def games_for_week(self, week: int) -> Union[Tuple[Game, ...], Rejected]:
        if not self.is_known_week(week):
            return self._unknown(week)
        return tuple(self._by_week.get(week, ()))

    def lock_time_for_week(self, week: int) -> Union[_dt.datetime, Rejected]:
        games = self.games_for_week(week)
        if isinstance(games, Rejected):
            return games
        if not games:
            return Rejected(RejectionReason.UNKNOWN_WEEK, f"No games scheduled in week {week}")
        return min(g.kickoff for g in games)

    def teams_playing(self, week: int) -> Set[str]:
        games = self.games_for_week(week)
        if isinstance(games, Rejected):
            return set()
        teams: Set[str] = set()
        for g in games:
            teams.add(g.home)
            teams.add(g.away)
        return teams

    def game_for_team(self, week: int, team_id: str) -> Optional[Game]:
        games = self.games_for_week(week)
        if isinstance(games, Rejected):
            return None
        for g in games:
            if g.involves(team_id):
                return g
        return None
