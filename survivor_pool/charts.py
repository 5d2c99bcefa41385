"""Survival curve of a contest: how many entries were still alive after each week."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from .models import EliminationOutcome, Entry, WeekPick  # noqa: E402
from .standings import project  # noqa: E402


def alive_by_week(
    entries: Sequence[Entry],
    picks: Sequence[WeekPick],
    outcomes: Sequence[EliminationOutcome],
    weeks: Iterable[int],
) -> Dict[int, int]:
    """Number of entries alive once each of ``weeks`` had been scored.

    Stored entries already reflect the latest eliminations, so each week is
    projected from fresh entries and the outcomes up to that week only.
    """
    fresh = [Entry(e.entry_id, e.user_id, e.contest_id, e.created_at) for e in entries]
    counts: Dict[int, int] = {}
    for week in weeks:
        so_far = [o for o in outcomes if o.week <= week]
        counts[week] = sum(project(e, picks, so_far).alive for e in fresh)
    return counts


def plot_survival_curve(counts: Dict[int, int], path: str, title: str = "Entries Alive by Week") -> str:
    weeks: List[int] = sorted(counts)
    alive = [counts[w] for w in weeks]
    fig, ax = plt.subplots(figsize=(10, 6))
    try:
        ax.plot(weeks, alive, marker='o')
        ax.set_title(title)
        ax.set_xlabel('Week')
        ax.set_ylabel('Entries alive')
        ax.set_xticks(weeks)
        ax.set_ylim(bottom=0)
        ax.grid(True)
        fig.tight_layout()
        fig.savefig(path)
    finally:
        plt.close(fig)
    return path
