"""Operations that tie the pure engine to the JSON store and the results feed."""

from __future__ import annotations

import dataclasses
import datetime as _dt
import logging
from typing import Dict, List, Optional, Sequence, Union

from .contest import settle_contest
from .elimination import apply_week_results
from .feeds import EspnResultsFeed
from .models import (
    Contest,
    ContestStatus,
    Entry,
    OutcomeStatus,
    RejectionReason,
    Rejected,
    WeekPick,
    as_utc,
)
from .pick_validator import validate
from .season_calendar import SeasonCalendar
from .standings import SeasonState, apply_standing, project_season
from .store import JsonStore

logger = logging.getLogger(__name__)


class NotFound(LookupError):
    pass


def require_contest(store: JsonStore, contest_id: str) -> Contest:
    contest = store.get_contest(contest_id)
    if contest is None:
        raise NotFound(f"Contest {contest_id} not found")
    return contest


def require_entry(store: JsonStore, contest_id: str, entry_id: str) -> Entry:
    entry = store.get_entry(entry_id)
    if entry is None or entry.contest_id != contest_id:
        raise NotFound(f"Entry {entry_id} not found in contest {contest_id}")
    return entry


def season_state(store: JsonStore, contest_id: str) -> SeasonState:
    return project_season(
        store.entries_for_contest(contest_id),
        store.picks_for_contest(contest_id),
        store.outcomes_for_contest(contest_id),
    )


def submit_picks(
    store: JsonStore,
    contest_id: str,
    entry_id: str,
    week: int,
    team_ids: Sequence[str],
    now: _dt.datetime,
) -> Union[List[WeekPick], Rejected]:
    """Validate and record an entry's picks for a week.

    Not safe to call concurrently for the same entry and week; the caller
    serialises submissions.
    """
    contest = require_contest(store, contest_id)
    entry = require_entry(store, contest_id, entry_id)
    now = as_utc(now)
    calendar = SeasonCalendar(store.all_games())
    result = validate(entry, week, team_ids, store.picks_for_entry(entry_id), calendar, now, contest)
    if isinstance(result, Rejected):
        logger.info("Rejected picks for entry %s week %s: %s", entry_id, week, result.reason.value)
        return result
    picks = [WeekPick(entry_id=entry_id, week=week, team_id=t, submitted_at=now) for t in result.team_ids]
    store.replace_week_picks(entry_id, week, picks)
    store.save()
    logger.info("Picks saved: entry %s, week %s, teams %s", entry_id, week, ", ".join(result.team_ids))
    return picks


def process_week(
    store: JsonStore,
    contest_id: str,
    week: int,
    feed: Optional[EspnResultsFeed] = None,
    refresh: bool = False,
    now: Optional[_dt.datetime] = None,
) -> Union[Dict[str, object], Rejected]:
    """Score ``week`` for a contest and persist outcomes and eliminations.

    With a ``feed`` the week's games are pulled first.  Safe to re-run: the
    engine is pure and outcomes are stored per entry and week.

    Until the week locks, picks are still open, so only entries holding a
    full set of picks are scored and the contest is not settled.  ``now``
    defaults to the current time; a naive value is read as UTC.
    """
    contest = require_contest(store, contest_id)
    if contest.status == ContestStatus.COMPLETED:
        return Rejected(RejectionReason.CONTEST_NOT_OPEN, f"Contest {contest_id} is already completed")
    calendar = SeasonCalendar(store.all_games())
    if not calendar.is_known_week(week) or not contest.covers_week(week):
        return Rejected(
            RejectionReason.UNKNOWN_WEEK,
            f"Week {week} is outside contest {contest_id} (weeks {contest.start_week}-{contest.end_week})",
        )
    if feed is not None:
        store.upsert_games(feed.fetch_week(contest.season, week, refresh=refresh))
        calendar = SeasonCalendar(store.all_games())
    lock_time = calendar.lock_time_for_week(week)
    if isinstance(lock_time, Rejected):
        return lock_time
    now = as_utc(now) if now is not None else _dt.datetime.now(_dt.timezone.utc)
    locked = now >= lock_time
    required = contest.required_picks(week)

    entries = store.entries_for_contest(contest_id)
    picks = store.picks_for_contest(contest_id)
    entries_with_picks = [(e, [p for p in picks if p.entry_id == e.entry_id]) for e in entries]
    if not locked:
        entries_with_picks = [
            (e, ps) for e, ps in entries_with_picks
            if sum(p.week == week for p in ps) >= required
        ]
    outcomes = apply_week_results(
        week,
        store.games_for_week(week),
        entries_with_picks,
        contest.tie_policy,
        contest.two_picks_from_week,
    )
    store.upsert_outcomes(outcomes)

    if locked:
        entry_ids = {e.entry_id for e in entries}
        # Scored picks of a locked week can no longer change.
        store.picks = [
            dataclasses.replace(p, locked=True) if p.week == week and p.entry_id in entry_ids else p
            for p in store.picks
        ]

    state = season_state(store, contest_id)
    for entry in entries:
        store.save_entry(apply_standing(entry, state.standings[entry.entry_id]))
    if locked:
        contest = settle_contest(contest, state, week)
        store.save_contest(contest)
    store.save()

    summary = {
        "week": week,
        "locked": locked,
        "survived": sum(o.status == OutcomeStatus.SURVIVED for o in outcomes),
        "eliminated": sum(o.status == OutcomeStatus.ELIMINATED for o in outcomes),
        "pending": sum(o.status == OutcomeStatus.PENDING for o in outcomes),
        "remaining": len(state.alive_entry_ids),
        "contest_status": contest.status.value,
        "winners": list(contest.winner_entry_ids),
        "outcomes": [o.to_dict() for o in outcomes],
    }
    logger.info("Week %s processed for %s: %s eliminated, %s remaining",
                week, contest_id, summary["eliminated"], summary["remaining"])
    return summary
