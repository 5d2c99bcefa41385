"""NFL survivor pool: pick validation, elimination and standings."""

from .elimination import apply_week_results
from .models import (
    Accepted,
    Contest,
    EliminationOutcome,
    EliminationReason,
    Entry,
    EntryStanding,
    Game,
    GameStatus,
    Rejected,
    RejectionReason,
    TiePolicy,
    WeekPick,
)
from .pick_validator import validate
from .season_calendar import SeasonCalendar
from .standings import project, project_season

__version__ = "0.1.0"
