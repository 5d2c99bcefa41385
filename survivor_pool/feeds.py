"""
Schedule and results providers.

Two sources feed the engine with ``Game`` records:

    EspnResultsFeed
        Reads the public ESPN scoreboard one week at a time.  It supplies
        kickoff times, live status and, once a game is final, the score
        line and winner.  Responses are kept in a ``ResultsCache`` so that
        repeated lookups inside the TTL do not hit the network.

    parse_fftoday_schedule() / scrape_schedule()
        Parse the FFToday season schedule page.  It has no scores, so every
        game comes back as scheduled; it is only useful to seed a season
        before ESPN publishes later weeks.

Both return games keyed by pool team ids (see ``teams.normalize_team_id``).
Games naming a team we cannot map are dropped with a warning.
"""

from __future__ import annotations

import datetime as _dt
import logging
import re
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

import requests
from bs4 import BeautifulSoup

from .cache import ResultsCache
from .config import ESPN_SCOREBOARD_URL, FFTODAY_SCHEDULE_URL
from .models import Game, GameStatus
from .teams import normalize_team_id

logger = logging.getLogger(__name__)

EASTERN = ZoneInfo("America/New_York")

ESPN_STATUS: Dict[str, GameStatus] = {
    "STATUS_SCHEDULED": GameStatus.SCHEDULED,
    "STATUS_IN_PROGRESS": GameStatus.IN_PROGRESS,
    "STATUS_HALFTIME": GameStatus.IN_PROGRESS,
    "STATUS_END_PERIOD": GameStatus.IN_PROGRESS,
    "STATUS_DELAYED": GameStatus.IN_PROGRESS,
    "STATUS_FINAL": GameStatus.FINAL,
    "STATUS_FINAL_OVERTIME": GameStatus.FINAL,
    "STATUS_POSTPONED": GameStatus.POSTPONED,
    "STATUS_CANCELED": GameStatus.POSTPONED,
}

# Browser-like header; FFToday refuses the default requests user agent.
BROWSER_HEADERS = {
    'User-Agent': (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) '
        'AppleWebKit/537.36 (KHTML, like Gecko) '
        'Chrome/115.0 Safari/537.36'
    )
}

MONTHS = {'Jan': 1, 'Feb': 2, 'Mar': 3, 'Apr': 4, 'May': 5, 'Jun': 6,
          'Jul': 7, 'Aug': 8, 'Sep': 9, 'Oct': 10, 'Nov': 11, 'Dec': 12}


###############################################################################
# ESPN scoreboard
###############################################################################

def _parse_espn_date(raw: str) -> _dt.datetime:
    # ESPN writes "2025-09-05T00:20Z"
    return _dt.datetime.fromisoformat(raw.replace("Z", "+00:00"))


def _score(raw) -> Optional[int]:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def parse_espn_event(event: dict, week: int) -> Optional[Game]:
    """Turn one ESPN scoreboard event into a ``Game`` (None if unusable)."""
    competition = event['competitions'][0]
    sides = {c.get('homeAway'): c for c in competition.get('competitors', [])}
    home, away = sides.get('home'), sides.get('away')
    if not home or not away:
        return None
    home_id = normalize_team_id(home['team'].get('abbreviation'))
    away_id = normalize_team_id(away['team'].get('abbreviation'))
    if not home_id or not away_id:
        logger.warning("Skipping ESPN event %s: unknown teams %s @ %s", event.get('id'),
                       away['team'].get('abbreviation'), home['team'].get('abbreviation'))
        return None

    status_name = event.get('status', {}).get('type', {}).get('name', 'STATUS_SCHEDULED')
    status = ESPN_STATUS.get(status_name, GameStatus.SCHEDULED)
    home_score = away_score = winner = None
    if status in (GameStatus.IN_PROGRESS, GameStatus.FINAL):
        home_score = _score(home.get('score'))
        away_score = _score(away.get('score'))
    if status == GameStatus.FINAL:
        if home.get('winner'):
            winner = home_id
        elif away.get('winner'):
            winner = away_id

    return Game(
        game_id=str(event['id']),
        week=week,
        home=home_id,
        away=away_id,
        kickoff=_parse_espn_date(event.get('date') or competition['date']),
        status=status,
        home_score=home_score,
        away_score=away_score,
        winner=winner,
    )


class EspnResultsFeed:
    """Week-by-week NFL schedule and results from ESPN's public scoreboard."""

    def __init__(
        self,
        cache: Optional[ResultsCache] = None,
        session=None,
        base_url: str = ESPN_SCOREBOARD_URL,
        timeout: float = 10.0,
    ):
        self.cache = cache if cache is not None else ResultsCache()
        self.session = session if session is not None else requests.Session()
        self.base_url = base_url
        self.timeout = timeout

    def _request_week(self, season: int, week: int) -> List[Game]:
        logger.info("ESPN request: season %s week %s", season, week)
        params = {"week": week, "seasontype": 2, "dates": season}
        resp = self.session.get(self.base_url, params=params, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        games = []
        for event in data.get('events', []):
            game = parse_espn_event(event, week)
            if game is not None:
                games.append(game)
        return games

    def fetch_week(self, season: int, week: int, refresh: bool = False) -> List[Game]:
        key = (season, week)
        if refresh:
            self.cache.invalidate(key)
        return self.cache.get_or_fetch(key, lambda: self._request_week(season, week))


###############################################################################
# FFToday schedule page
###############################################################################

def _parse_kickoff(date_text: str, time_text: str, season: int) -> Optional[_dt.datetime]:
    match = re.search(r"([A-Z][a-z]{2})\s+(\d{1,2})", date_text)
    if not match or match.group(1) not in MONTHS:
        return None
    month = MONTHS[match.group(1)]
    # Weeks 1-17 fall in the season year; the tail end crosses into January.
    year = season + 1 if month <= 2 else season
    try:
        clock = _dt.datetime.strptime(time_text.strip().upper(), "%I:%M %p").time()
    except ValueError:
        clock = _dt.time(13, 0)  # 'TBD' kickoffs default to the early Sunday window
    return _dt.datetime.combine(_dt.date(year, month, int(match.group(2))), clock, tzinfo=EASTERN)


def parse_fftoday_schedule(html: str, season: int) -> List[Game]:
    """Parse the FFToday regular season schedule markup into scheduled games."""
    soup = BeautifulSoup(html, "html.parser")
    table = soup.find('table')
    if not table:
        raise RuntimeError("Could not locate schedule table on FFToday")
    games: List[Game] = []
    current_week = None
    for row in table.find_all('tr'):
        # Week header rows carry an anchor named after the week number
        anchor = row.find('a', attrs={'name': True})
        if anchor and anchor['name'].isdigit():
            current_week = int(anchor['name'])
            continue
        if current_week is None or row.find('td', class_='tableclmhdr'):
            continue
        classes = row.get('class', [])
        if 'smallestbody' in classes or 'smallestbodygrey' in classes:
            continue
        cells = row.find_all('td')
        if len(cells) != 4:
            continue
        date_text, time_text, away_text, home_text = (c.get_text(strip=True) for c in cells)
        # Footnote markers trail some team names (e.g. international games)
        away = normalize_team_id(re.sub(r"\d+$", "", away_text).strip())
        home = normalize_team_id(re.sub(r"\d+$", "", home_text).strip())
        kickoff = _parse_kickoff(date_text, time_text, season)
        if not away or not home or kickoff is None:
            logger.warning("Skipping FFToday row in week %s: %s @ %s (%s)",
                           current_week, away_text, home_text, date_text)
            continue
        games.append(Game(
            game_id=f"{season}-W{current_week:02d}-{away}@{home}",
            week=current_week,
            home=home,
            away=away,
            kickoff=kickoff,
        ))
    return games


def scrape_schedule(season: int, session=None, url: str = FFTODAY_SCHEDULE_URL, timeout: float = 10.0) -> List[Game]:
    session = session or requests.Session()
    resp = session.get(url, headers=BROWSER_HEADERS, timeout=timeout)
    resp.raise_for_status()
    return parse_fftoday_schedule(resp.text, season)
