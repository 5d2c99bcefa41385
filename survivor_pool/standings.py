"""Projection of pick and outcome history into per-entry standings."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .models import (
    EliminationOutcome,
    EliminationReason,
    Entry,
    EntryStanding,
    OutcomeStatus,
    WeekPick,
)
from .teams import ALL_TEAM_IDS

# Several outcomes may exist for one week when a pending week is re-scored.
_PRECEDENCE = {
    OutcomeStatus.ELIMINATED: 2,
    OutcomeStatus.SURVIVED: 1,
    OutcomeStatus.PENDING: 0,
}


def _decisive_by_week(entry_id: str, outcomes: Iterable[EliminationOutcome]) -> List[EliminationOutcome]:
    best: Dict[int, EliminationOutcome] = {}
    for o in outcomes:
        if o.entry_id != entry_id:
            continue
        current = best.get(o.week)
        if current is None or _PRECEDENCE[o.status] > _PRECEDENCE[current.status]:
            best[o.week] = o
    return [best[w] for w in sorted(best)]


def project(
    entry: Entry,
    all_picks: Iterable[WeekPick],
    all_outcomes: Iterable[EliminationOutcome],
    team_ids: FrozenSet[str] = ALL_TEAM_IDS,
) -> EntryStanding:
    """Fold an entry's history, week ascending, into its current standing.

    Elimination is absorbing: outcomes after the first elimination are
    ignored, and an entry already stored as eliminated stays eliminated.
    """
    used = frozenset(p.team_id for p in all_picks if p.entry_id == entry.entry_id)

    cutoff = entry.eliminated_week if not entry.alive else None

    alive = True
    eliminated_at: Optional[int] = None
    reason: Optional[EliminationReason] = None
    survived = 0
    pending: List[int] = []
    for outcome in _decisive_by_week(entry.entry_id, all_outcomes):
        if cutoff is not None and outcome.week > cutoff:
            break
        if outcome.status == OutcomeStatus.ELIMINATED:
            alive = False
            eliminated_at = outcome.week
            reason = outcome.reason
            break
        if outcome.status == OutcomeStatus.SURVIVED:
            survived += 1
        else:
            pending.append(outcome.week)

    if not entry.alive and alive:
        alive = False
        eliminated_at = entry.eliminated_week
        reason = entry.eliminated_reason

    return EntryStanding(
        entry_id=entry.entry_id,
        alive=alive,
        eliminated_at_week=eliminated_at,
        elimination_reason=reason,
        used_team_ids=used,
        available_team_ids=frozenset(team_ids) - used,
        weeks_survived=survived,
        pending_weeks=tuple(pending),
    )


def apply_standing(entry: Entry, standing: EntryStanding) -> Entry:
    """Return ``entry`` with the elimination from ``standing`` applied.

    The transition only ever goes from alive to eliminated.
    """
    if not entry.alive or standing.alive:
        return entry
    return dataclasses.replace(
        entry,
        alive=False,
        eliminated_week=standing.eliminated_at_week,
        eliminated_reason=standing.elimination_reason,
    )


@dataclass(frozen=True)
class SeasonState:
    standings: Dict[str, EntryStanding] = field(default_factory=dict)

    @property
    def alive_entry_ids(self) -> Tuple[str, ...]:
        return tuple(sorted(e for e, s in self.standings.items() if s.alive))

    def available_teams(self, entry_id: str) -> FrozenSet[str]:
        return self.standings[entry_id].available_team_ids

    def weeks_survived(self, entry_id: str) -> int:
        return self.standings[entry_id].weeks_survived


def project_season(
    entries: Sequence[Entry],
    all_picks: Sequence[WeekPick],
    all_outcomes: Sequence[EliminationOutcome],
) -> SeasonState:
    return SeasonState({e.entry_id: project(e, all_picks, all_outcomes) for e in entries})


def leaderboard(entries: Sequence[Entry], state: SeasonState) -> List[Dict[str, object]]:
    """Rank entries: alive first, then weeks survived, then latest elimination."""
    def sort_key(entry: Entry):
        s = state.standings[entry.entry_id]
        return (
            0 if s.alive else 1,
            -s.weeks_survived,
            -(s.eliminated_at_week or 0),
            entry.created_at,
            entry.entry_id,
        )

    rows = []
    for rank, entry in enumerate(sorted(entries, key=sort_key), start=1):
        s = state.standings[entry.entry_id]
        rows.append({
            "rank": rank,
            "entry_id": entry.entry_id,
            "user_id": entry.user_id,
            "status": "alive" if s.alive else "eliminated",
            "weeks_survived": s.weeks_survived,
            "eliminated_week": s.eliminated_at_week,
            "eliminated_reason": s.elimination_reason.value if s.elimination_reason else None,
        })
    return rows
