"""Contest lifecycle: joining, and deciding when a contest is over."""

from __future__ import annotations

import dataclasses
import datetime as _dt
import logging
import uuid
from typing import Optional, Sequence, Union

from .models import Contest, ContestStatus, Entry, RejectionReason, Rejected
from .standings import SeasonState

logger = logging.getLogger(__name__)


def join_contest(
    contest: Contest,
    user_id: str,
    entries: Sequence[Entry],
    now: _dt.datetime,
    entry_id: Optional[str] = None,
) -> Union[Entry, Rejected]:
    """Create an entry for ``user_id`` or say why the user cannot join.

    ``entries`` are the contest's existing entries.  One entry per user.
    """
    if contest.status != ContestStatus.OPEN:
        return Rejected(RejectionReason.CONTEST_NOT_OPEN, f"Contest {contest.contest_id} is {contest.status.value}")
    existing = [e for e in entries if e.contest_id == contest.contest_id]
    if any(e.user_id == user_id for e in existing):
        return Rejected(RejectionReason.ALREADY_JOINED, f"User {user_id} already joined this contest")
    if contest.max_participants is not None and len(existing) >= contest.max_participants:
        return Rejected(RejectionReason.CONTEST_FULL, f"Contest is full ({contest.max_participants} entries)")
    return Entry(
        entry_id=entry_id or uuid.uuid4().hex,
        user_id=user_id,
        contest_id=contest.contest_id,
        created_at=now,
    )


def settle_contest(contest: Contest, state: SeasonState, last_processed_week: int) -> Contest:
    """Move the contest forward once a week has been scored.

    Nothing is decided while an alive entry still has a pending week.  Past
    that, the contest completes when at most one entry is left alive or its
    final week has been scored, and every surviving entry shares the win.
    If the last entries all fall in the same week there is no winner.
    """
    if contest.status == ContestStatus.COMPLETED:
        return contest
    alive = state.alive_entry_ids
    undecided = any(s.pending_weeks for s in state.standings.values() if s.alive)
    if not undecided and (len(alive) <= 1 or last_processed_week >= contest.end_week):
        logger.info("Contest %s completed after week %s, winners: %s",
                    contest.contest_id, last_processed_week, ", ".join(alive) or "none")
        return dataclasses.replace(contest, status=ContestStatus.COMPLETED, winner_entry_ids=alive)
    return dataclasses.replace(contest, status=ContestStatus.ACTIVE)
