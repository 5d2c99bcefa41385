"""
Data definitions shared by the survivor pool engine.

Everything here is a plain dataclass.  Entries, picks and games are the
records a persistence layer stores; outcomes are produced by the elimination
engine; ``Accepted`` and ``Rejected`` are the values returned by every rule
check in the package.  Rule violations are never raised: callers branch on
``isinstance(result, Rejected)``.
"""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


FIRST_WEEK = 1
LAST_WEEK = 18
TWO_PICKS_FROM_WEEK = 12


def required_pick_count(week: int, two_picks_from_week: int = TWO_PICKS_FROM_WEEK) -> int:
    """One pick a week until ``two_picks_from_week``, two picks from then on."""
    return 2 if week >= two_picks_from_week else 1


def as_utc(value: _dt.datetime) -> _dt.datetime:
    """Naive datetimes are taken to be UTC; aware ones are left as they are."""
    if value.tzinfo is None:
        return value.replace(tzinfo=_dt.timezone.utc)
    return value


def _iso(value: Optional[_dt.datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_dt(value: Optional[str]) -> Optional[_dt.datetime]:
    return _dt.datetime.fromisoformat(value) if value else None


###############################################################################
# Enumerations
###############################################################################

class GameStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINAL = "final"
    POSTPONED = "postponed"


class PickResult(str, Enum):
    WIN = "win"
    LOSS = "loss"
    TIE = "tie"
    PENDING = "pending"


class TiePolicy(str, Enum):
    SURVIVE = "survive"
    ELIMINATE = "eliminate"


class ContestStatus(str, Enum):
    OPEN = "open"
    ACTIVE = "active"
    COMPLETED = "completed"


class OutcomeStatus(str, Enum):
    SURVIVED = "survived"
    ELIMINATED = "eliminated"
    PENDING = "pending"


class EliminationReason(str, Enum):
    INCORRECT_PICK = "incorrect_pick"
    TIED_PICK = "tied_pick"
    NO_PICK_SUBMITTED = "no_pick_submitted"


class RejectionReason(str, Enum):
    ALREADY_USED_TEAM = "already_used_team"
    WRONG_PICK_COUNT = "wrong_pick_count"
    DUPLICATE_IN_SUBMISSION = "duplicate_in_submission"
    DEADLINE_PASSED = "deadline_passed"
    ENTRY_NOT_ALIVE = "entry_not_alive"
    UNKNOWN_WEEK = "unknown_week"
    UNKNOWN_TEAM = "unknown_team"
    TEAM_NOT_PLAYING = "team_not_playing"
    CONTEST_NOT_OPEN = "contest_not_open"
    CONTEST_FULL = "contest_full"
    ALREADY_JOINED = "already_joined"


###############################################################################
# Result values
###############################################################################

@dataclass(frozen=True)
class Accepted:
    team_ids: Tuple[str, ...]


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason
    detail: str = ""
    team_ids: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "error": self.reason.value,
            "message": self.detail,
            "team_ids": list(self.team_ids),
        }


###############################################################################
# Records
###############################################################################

@dataclass(frozen=True)
class Entry:
    """One user's participation in one contest."""
    entry_id: str
    user_id: str
    contest_id: str
    created_at: _dt.datetime
    alive: bool = True
    eliminated_week: Optional[int] = None
    eliminated_reason: Optional[EliminationReason] = None

    def to_dict(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "user_id": self.user_id,
            "contest_id": self.contest_id,
            "created_at": _iso(self.created_at),
            "alive": self.alive,
            "eliminated_week": self.eliminated_week,
            "eliminated_reason": self.eliminated_reason.value if self.eliminated_reason else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Entry":
        reason = data.get("eliminated_reason")
        return cls(
            entry_id=data["entry_id"],
            user_id=data["user_id"],
            contest_id=data["contest_id"],
            created_at=_parse_dt(data["created_at"]),
            alive=data.get("alive", True),
            eliminated_week=data.get("eliminated_week"),
            eliminated_reason=EliminationReason(reason) if reason else None,
        )


@dataclass(frozen=True)
class WeekPick:
    entry_id: str
    week: int
    team_id: str
    submitted_at: _dt.datetime
    locked: bool = False

    def to_dict(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "week": self.week,
            "team_id": self.team_id,
            "submitted_at": _iso(self.submitted_at),
            "locked": self.locked,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WeekPick":
        return cls(
            entry_id=data["entry_id"],
            week=int(data["week"]),
            team_id=data["team_id"],
            submitted_at=_parse_dt(data["submitted_at"]),
            locked=data.get("locked", False),
        )


@dataclass(frozen=True)
class Game:
    game_id: str
    week: int
    home: str
    away: str
    kickoff: _dt.datetime
    status: GameStatus = GameStatus.SCHEDULED
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    winner: Optional[str] = None
    note: str = ""

    @property
    def is_final(self) -> bool:
        return self.status == GameStatus.FINAL

    def involves(self, team_id: str) -> bool:
        return team_id in (self.home, self.away)

    def opponent_of(self, team_id: str) -> Optional[str]:
        if team_id == self.home:
            return self.away
        if team_id == self.away:
            return self.home
        return None

    def winning_team(self) -> Optional[str]:
        """Winner of a final game; None while unfinished or on a tie.

        An explicit ``winner`` from the feed wins over the score line.
        """
        if not self.is_final:
            return None
        if self.winner:
            return self.winner
        if self.home_score is None or self.away_score is None:
            return None
        if self.home_score > self.away_score:
            return self.home
        if self.away_score > self.home_score:
            return self.away
        return None

    def result_for(self, team_id: str) -> PickResult:
        if not self.is_final:
            return PickResult.PENDING
        winner = self.winning_team()
        if winner is None:
            return PickResult.TIE
        return PickResult.WIN if winner == team_id else PickResult.LOSS

    def to_dict(self) -> dict:
        return {
            "game_id": self.game_id,
            "week": self.week,
            "home": self.home,
            "away": self.away,
            "kickoff": _iso(self.kickoff),
            "status": self.status.value,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "winner": self.winner,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Game":
        return cls(
            game_id=str(data["game_id"]),
            week=int(data["week"]),
            home=data["home"],
            away=data["away"],
            kickoff=_parse_dt(data["kickoff"]),
            status=GameStatus(data.get("status", GameStatus.SCHEDULED.value)),
            home_score=data.get("home_score"),
            away_score=data.get("away_score"),
            winner=data.get("winner"),
            note=data.get("note", ""),
        )


@dataclass(frozen=True)
class EliminationOutcome:
    entry_id: str
    week: int
    status: OutcomeStatus
    team_ids: Tuple[str, ...] = ()
    reason: Optional[EliminationReason] = None
    losing_team: Optional[str] = None

    @property
    def eliminated(self) -> bool:
        return self.status == OutcomeStatus.ELIMINATED

    def to_dict(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "week": self.week,
            "status": self.status.value,
            "team_ids": list(self.team_ids),
            "reason": self.reason.value if self.reason else None,
            "losing_team": self.losing_team,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EliminationOutcome":
        reason = data.get("reason")
        return cls(
            entry_id=data["entry_id"],
            week=int(data["week"]),
            status=OutcomeStatus(data["status"]),
            team_ids=tuple(data.get("team_ids", ())),
            reason=EliminationReason(reason) if reason else None,
            losing_team=data.get("losing_team"),
        )


@dataclass(frozen=True)
class Contest:
    contest_id: str
    name: str
    season: int
    start_week: int = FIRST_WEEK
    end_week: int = LAST_WEEK
    two_picks_from_week: int = TWO_PICKS_FROM_WEEK
    max_participants: Optional[int] = 100
    tie_policy: TiePolicy = TiePolicy.SURVIVE
    status: ContestStatus = ContestStatus.OPEN
    winner_entry_ids: Tuple[str, ...] = ()
    description: str = ""

    def required_picks(self, week: int) -> int:
        return required_pick_count(week, self.two_picks_from_week)

    def covers_week(self, week: int) -> bool:
        return self.start_week <= week <= self.end_week

    def to_dict(self) -> dict:
        return {
            "contest_id": self.contest_id,
            "name": self.name,
            "season": self.season,
            "start_week": self.start_week,
            "end_week": self.end_week,
            "two_picks_from_week": self.two_picks_from_week,
            "max_participants": self.max_participants,
            "tie_policy": self.tie_policy.value,
            "status": self.status.value,
            "winner_entry_ids": list(self.winner_entry_ids),
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Contest":
        return cls(
            contest_id=data["contest_id"],
            name=data["name"],
            season=int(data["season"]),
            start_week=data.get("start_week", FIRST_WEEK),
            end_week=data.get("end_week", LAST_WEEK),
            two_picks_from_week=data.get("two_picks_from_week", TWO_PICKS_FROM_WEEK),
            max_participants=data.get("max_participants", 100),
            tie_policy=TiePolicy(data.get("tie_policy", TiePolicy.SURVIVE.value)),
            status=ContestStatus(data.get("status", ContestStatus.OPEN.value)),
            winner_entry_ids=tuple(data.get("winner_entry_ids", ())),
            description=data.get("description", ""),
        )


@dataclass(frozen=True)
class EntryStanding:
    entry_id: str
    alive: bool
    eliminated_at_week: Optional[int] = None
    elimination_reason: Optional[EliminationReason] = None
    used_team_ids: frozenset = field(default_factory=frozenset)
    available_team_ids: frozenset = field(default_factory=frozenset)
    weeks_survived: int = 0
    pending_weeks: Tuple[int, ...] = ()

    def to_dict(self) -> Dict[str, object]:
        return {
            "entry_id": self.entry_id,
            "alive": self.alive,
            "eliminated_at_week": self.eliminated_at_week,
            "elimination_reason": self.elimination_reason.value if self.elimination_reason else None,
            "used_team_ids": sorted(self.used_team_ids),
            "available_team_ids": sorted(self.available_team_ids),
            "weeks_survived": self.weeks_survived,
            "pending_weeks": list(self.pending_weeks),
        }
