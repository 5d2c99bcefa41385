"""
Pick validation.

``validate`` decides whether a candidate set of teams may be recorded for an
entry in a given week.  It is a pure function of its arguments: the current
time is passed in, nothing is read from a clock, a database or the network,
and nothing is persisted.  Persisting an accepted submission (and
serialising concurrent submissions for the same entry and week) is the
caller's job.

Checks run in a fixed order so that a submission breaking several rules is
always reported with the same reason:

    1. the week exists (UNKNOWN_WEEK)
    2. the entry is still alive (ENTRY_NOT_ALIVE)
    3. the week has not locked (DEADLINE_PASSED)
    4. the number of picks matches the week (WRONG_PICK_COUNT)
    5. no team is repeated within the submission (DUPLICATE_IN_SUBMISSION)
    6. every team exists (UNKNOWN_TEAM)
    7. no team was used in an earlier week (ALREADY_USED_TEAM)
    8. every team plays this week (TEAM_NOT_PLAYING)
"""

from __future__ import annotations

import datetime as _dt
from typing import Iterable, Optional, Sequence, Set, Union

from .models import (
    TWO_PICKS_FROM_WEEK,
    Accepted,
    Contest,
    Entry,
    RejectionReason,
    Rejected,
    WeekPick,
    as_utc,
    required_pick_count,
)
from .season_calendar import SeasonCalendar
from .teams import ALL_TEAM_IDS


def used_team_ids(prior_picks: Iterable[WeekPick], entry_id: str, exclude_week: Optional[int] = None) -> Set[str]:
    """Teams an entry has already spent, optionally ignoring one week."""
    return {
        p.team_id for p in prior_picks
        if p.entry_id == entry_id and p.week != exclude_week
    }


def validate(
    entry: Entry,
    week: int,
    candidate_team_ids: Sequence[str],
    prior_picks: Iterable[WeekPick],
    calendar: SeasonCalendar,
    now: _dt.datetime,
    contest: Optional[Contest] = None,
) -> Union[Accepted, Rejected]:
    """Accept or reject ``candidate_team_ids`` for ``entry`` in ``week``.

    ``prior_picks`` is the entry's pick history (picks of other entries are
    ignored).  Picks already recorded for ``week`` itself are treated as
    being replaced, so an entry may change its mind until the week locks.
    A naive ``now`` is read as UTC.
    """
    candidates = tuple(candidate_team_ids)
    now = as_utc(now)
    two_picks_from = contest.two_picks_from_week if contest else TWO_PICKS_FROM_WEEK

    if not calendar.is_known_week(week) or (contest is not None and not contest.covers_week(week)):
        return Rejected(RejectionReason.UNKNOWN_WEEK, f"Week {week} is not part of this contest", candidates)

    if not entry.alive:
        return Rejected(
            RejectionReason.ENTRY_NOT_ALIVE,
            f"Entry {entry.entry_id} was eliminated in week {entry.eliminated_week}",
            candidates,
        )

    lock_time = calendar.lock_time_for_week(week)
    if isinstance(lock_time, Rejected):
        return Rejected(lock_time.reason, lock_time.detail, candidates)
    if now >= lock_time:
        return Rejected(
            RejectionReason.DEADLINE_PASSED,
            f"Week {week} locked at {lock_time.isoformat()}",
            candidates,
        )

    required = required_pick_count(week, two_picks_from)
    if len(candidates) != required:
        return Rejected(
            RejectionReason.WRONG_PICK_COUNT,
            f"Week {week} requires {required} pick(s), got {len(candidates)}",
            candidates,
        )

    if len(set(candidates)) != len(candidates):
        return Rejected(
            RejectionReason.DUPLICATE_IN_SUBMISSION,
            "The same team was picked more than once",
            candidates,
        )

    unknown = [t for t in candidates if t not in ALL_TEAM_IDS]
    if unknown:
        return Rejected(RejectionReason.UNKNOWN_TEAM, f"Unknown team(s): {', '.join(unknown)}", tuple(unknown))

    used = used_team_ids(prior_picks, entry.entry_id, exclude_week=week)
    reused = [t for t in candidates if t in used]
    if reused:
        return Rejected(
            RejectionReason.ALREADY_USED_TEAM,
            f"Already used this season: {', '.join(reused)}",
            tuple(reused),
        )

    playing = calendar.teams_playing(week)
    idle = [t for t in candidates if t not in playing]
    if idle:
        return Rejected(
            RejectionReason.TEAM_NOT_PLAYING,
            f"No game in week {week} for: {', '.join(idle)}",
            tuple(idle),
        )

    return Accepted(candidates)
