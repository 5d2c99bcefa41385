"""
JSON file persistence.

All pool state lives in one JSON document, in the same spirit as the
``picks.json`` file the pick tracker has always used::

    {
      "contests": [...],
      "entries":  [...],
      "picks":    [...],
      "outcomes": [...],
      "games":    [...]
    }

The store is a thin, synchronous record keeper.  It applies no game rules;
callers validate before writing.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Dict, Iterable, List, Optional

from .models import Contest, EliminationOutcome, Entry, Game, WeekPick

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    pass


class JsonStore:
    def __init__(self, path: str):
        self.path = path
        self.contests: Dict[str, Contest] = {}
        self.entries: Dict[str, Entry] = {}
        self.picks: List[WeekPick] = []
        self.outcomes: Dict[tuple, EliminationOutcome] = {}
        self.games: Dict[str, Game] = {}

    @classmethod
    def open(cls, path: str) -> "JsonStore":
        store = cls(path)
        store.load()
        return store

    def load(self) -> None:
        if not os.path.exists(self.path):
            logger.info("No data file at %s, starting empty", self.path)
            return
        try:
            with open(self.path, "r") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise StoreError(f"Could not read {self.path}: {e}") from e
        if not isinstance(raw, dict):
            raise StoreError(f"Could not read {self.path}: expected a JSON object, got {type(raw).__name__}")
        self.contests = {c.contest_id: c for c in map(Contest.from_dict, raw.get("contests", []))}
        self.entries = {e.entry_id: e for e in map(Entry.from_dict, raw.get("entries", []))}
        self.picks = [WeekPick.from_dict(p) for p in raw.get("picks", [])]
        self.outcomes = {
            (o.entry_id, o.week): o for o in map(EliminationOutcome.from_dict, raw.get("outcomes", []))
        }
        self.games = {g.game_id: g for g in map(Game.from_dict, raw.get("games", []))}

    def save(self) -> None:
        doc = {
            "contests": [c.to_dict() for c in self.contests.values()],
            "entries": [e.to_dict() for e in self.entries.values()],
            "picks": [p.to_dict() for p in self.picks],
            "outcomes": [o.to_dict() for o in self.outcomes.values()],
            "games": [g.to_dict() for g in self.games.values()],
        }
        tmp_path = self.path + ".tmp"
        try:
            with open(tmp_path, "w") as f:
                json.dump(doc, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StoreError(f"Could not write {self.path}: {e}") from e

    # -- contests and entries ---------------------------------------------

    def save_contest(self, contest: Contest) -> None:
        self.contests[contest.contest_id] = contest

    def get_contest(self, contest_id: str) -> Optional[Contest]:
        return self.contests.get(contest_id)

    def save_entry(self, entry: Entry) -> None:
        self.entries[entry.entry_id] = entry

    def get_entry(self, entry_id: str) -> Optional[Entry]:
        return self.entries.get(entry_id)

    def entries_for_contest(self, contest_id: str) -> List[Entry]:
        return [e for e in self.entries.values() if e.contest_id == contest_id]

    # -- picks ------------------------------------------------------------

    def picks_for_entry(self, entry_id: str) -> List[WeekPick]:
        return [p for p in self.picks if p.entry_id == entry_id]

    def picks_for_contest(self, contest_id: str) -> List[WeekPick]:
        entry_ids = {e.entry_id for e in self.entries_for_contest(contest_id)}
        return [p for p in self.picks if p.entry_id in entry_ids]

    def replace_week_picks(self, entry_id: str, week: int, picks: Iterable[WeekPick]) -> None:
        """Swap out whatever ``entry_id`` had picked for ``week``."""
        self.picks = [p for p in self.picks if not (p.entry_id == entry_id and p.week == week)]
        self.picks.extend(picks)

    # -- outcomes ---------------------------------------------------------

    def upsert_outcomes(self, outcomes: Iterable[EliminationOutcome]) -> None:
        for o in outcomes:
            self.outcomes[(o.entry_id, o.week)] = o

    def outcomes_for_contest(self, contest_id: str) -> List[EliminationOutcome]:
        entry_ids = {e.entry_id for e in self.entries_for_contest(contest_id)}
        return sorted(
            (o for o in self.outcomes.values() if o.entry_id in entry_ids),
            key=lambda o: (o.week, o.entry_id),
        )

    # -- games ------------------------------------------------------------

    def upsert_games(self, games: Iterable[Game]) -> None:
        """Store games, replacing any game for the same week and matchup."""
        for g in games:
            stale = [
                gid for gid, old in self.games.items()
                if (old.week, old.home, old.away) == (g.week, g.home, g.away) and gid != g.game_id
            ]
            for gid in stale:
                del self.games[gid]
            self.games[g.game_id] = g

    def all_games(self) -> List[Game]:
        return sorted(self.games.values(), key=lambda g: (g.week, g.kickoff, g.game_id))

    def games_for_week(self, week: int) -> List[Game]:
        return [g for g in self.all_games() if g.week == week]
