"""Static NFL team reference data.

Team ids are the two or three letter aliases used throughout the pool
(``KC``, ``BUF``...).  The table is fixed at season setup and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional


@dataclass(frozen=True)
class Team:
    team_id: str
    name: str
    conference: str
    division: str


TEAMS: Dict[str, Team] = {t.team_id: t for t in (
    # AFC East
    Team("BUF", "Buffalo Bills",          "AFC", "East"),
    Team("MIA", "Miami Dolphins",         "AFC", "East"),
    Team("NYJ", "New York Jets",          "AFC", "East"),
    Team("NE",  "New England Patriots",   "AFC", "East"),
    # AFC North
    Team("BAL", "Baltimore Ravens",       "AFC", "North"),
    Team("PIT", "Pittsburgh Steelers",    "AFC", "North"),
    Team("CIN", "Cincinnati Bengals",     "AFC", "North"),
    Team("CLE", "Cleveland Browns",       "AFC", "North"),
    # AFC South
    Team("HOU", "Houston Texans",         "AFC", "South"),
    Team("IND", "Indianapolis Colts",     "AFC", "South"),
    Team("JAX", "Jacksonville Jaguars",   "AFC", "South"),
    Team("TEN", "Tennessee Titans",       "AFC", "South"),
    # AFC West
    Team("KC",  "Kansas City Chiefs",     "AFC", "West"),
    Team("LAC", "Los Angeles Chargers",   "AFC", "West"),
    Team("DEN", "Denver Broncos",         "AFC", "West"),
    Team("LV",  "Las Vegas Raiders",      "AFC", "West"),
    # NFC East
    Team("PHI", "Philadelphia Eagles",    "NFC", "East"),
    Team("WAS", "Washington Commanders",  "NFC", "East"),
    Team("DAL", "Dallas Cowboys",         "NFC", "East"),
    Team("NYG", "New York Giants",        "NFC", "East"),
    # NFC North
    Team("DET", "Detroit Lions",          "NFC", "North"),
    Team("MIN", "Minnesota Vikings",      "NFC", "North"),
    Team("GB",  "Green Bay Packers",      "NFC", "North"),
    Team("CHI", "Chicago Bears",          "NFC", "North"),
    # NFC South
    Team("TB",  "Tampa Bay Buccaneers",   "NFC", "South"),
    Team("ATL", "Atlanta Falcons",        "NFC", "South"),
    Team("CAR", "Carolina Panthers",      "NFC", "South"),
    Team("NO",  "New Orleans Saints",     "NFC", "South"),
    # NFC West
    Team("LAR", "Los Angeles Rams",       "NFC", "West"),
    Team("SEA", "Seattle Seahawks",       "NFC", "West"),
    Team("ARI", "Arizona Cardinals",      "NFC", "West"),
    Team("SF",  "San Francisco 49ers",    "NFC", "West"),
)}

ALL_TEAM_IDS: FrozenSet[str] = frozenset(TEAMS)

# Feeds disagree on a handful of aliases.
ALIAS_OVERRIDES: Dict[str, str] = {
    "WSH": "WAS",
    "JAC": "JAX",
    "LA": "LAR",
    "OAK": "LV",
    "SD": "LAC",
    "STL": "LAR",
}

_BY_NAME: Dict[str, str] = {t.name.lower(): t.team_id for t in TEAMS.values()}


def normalize_team_id(raw: Optional[str]) -> Optional[str]:
    """Map a feed alias or full team name onto a pool team id, or None."""
    if not raw:
        return None
    value = raw.strip()
    upper = value.upper()
    if upper in TEAMS:
        return upper
    if upper in ALIAS_OVERRIDES:
        return ALIAS_OVERRIDES[upper]
    return _BY_NAME.get(value.lower())
