"""Scoring a week's picks against final game results."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from .models import (
    TWO_PICKS_FROM_WEEK,
    EliminationOutcome,
    EliminationReason,
    Entry,
    Game,
    OutcomeStatus,
    PickResult,
    TiePolicy,
    WeekPick,
    required_pick_count,
)

logger = logging.getLogger(__name__)


def index_games_by_team(games: Iterable[Game], week: int) -> Dict[str, Game]:
    index: Dict[str, Game] = {}
    for g in games:
        if g.week != week:
            continue
        index[g.home] = g
        index[g.away] = g
    return index


def _week_team_ids(entry_id: str, week: int, picks: Iterable[WeekPick]) -> Tuple[str, ...]:
    seen: List[str] = []
    for p in picks:
        if p.entry_id == entry_id and p.week == week and p.team_id not in seen:
            seen.append(p.team_id)
    return tuple(seen)


def score_entry(
    entry: Entry,
    week: int,
    picks: Iterable[WeekPick],
    games_by_team: Dict[str, Game],
    tie_policy: TiePolicy = TiePolicy.SURVIVE,
    two_picks_from_week: int = TWO_PICKS_FROM_WEEK,
) -> EliminationOutcome:
    team_ids = _week_team_ids(entry.entry_id, week, picks)
    if len(team_ids) < required_pick_count(week, two_picks_from_week):
        return EliminationOutcome(
            entry_id=entry.entry_id,
            week=week,
            status=OutcomeStatus.ELIMINATED,
            team_ids=team_ids,
            reason=EliminationReason.NO_PICK_SUBMITTED,
        )

    results = []
    for team in team_ids:
        game = games_by_team.get(team)
        results.append((team, game.result_for(team) if game else PickResult.PENDING))

    # A loss is final even when another pick of the same week is still pending.
    for team, result in results:
        if result == PickResult.LOSS:
            return EliminationOutcome(
                entry_id=entry.entry_id,
                week=week,
                status=OutcomeStatus.ELIMINATED,
                team_ids=team_ids,
                reason=EliminationReason.INCORRECT_PICK,
                losing_team=team,
            )
    if tie_policy == TiePolicy.ELIMINATE:
        for team, result in results:
            if result == PickResult.TIE:
                return EliminationOutcome(
                    entry_id=entry.entry_id,
                    week=week,
                    status=OutcomeStatus.ELIMINATED,
                    team_ids=team_ids,
                    reason=EliminationReason.TIED_PICK,
                    losing_team=team,
                )

    status = OutcomeStatus.SURVIVED
    if any(result == PickResult.PENDING for _, result in results):
        status = OutcomeStatus.PENDING
    return EliminationOutcome(entry_id=entry.entry_id, week=week, status=status, team_ids=team_ids)


def apply_week_results(
    week: int,
    final_games: Iterable[Game],
    entries_with_picks: Sequence[Tuple[Entry, Sequence[WeekPick]]],
    tie_policy: TiePolicy = TiePolicy.SURVIVE,
    two_picks_from_week: int = TWO_PICKS_FROM_WEEK,
) -> List[EliminationOutcome]:
    """Score every alive entry's picks for ``week``.

    ``final_games`` may contain unfinished games; those leave the picks on
    them pending.  Entries already eliminated produce no outcome.  Nothing is
    mutated: the caller persists the outcomes and applies eliminations, and
    re-running with the same inputs returns the same list, ordered by entry
    id.
    """
    games_by_team = index_games_by_team(final_games, week)
    outcomes = [
        score_entry(entry, week, picks, games_by_team, tie_policy, two_picks_from_week)
        for entry, picks in entries_with_picks
        if entry.alive
    ]
    outcomes.sort(key=lambda o: o.entry_id)
    logger.debug(
        "Week %s scored: %d survived, %d eliminated, %d pending",
        week,
        sum(o.status == OutcomeStatus.SURVIVED for o in outcomes),
        sum(o.status == OutcomeStatus.ELIMINATED for o in outcomes),
        sum(o.status == OutcomeStatus.PENDING for o in outcomes),
    )
    return outcomes
