"""Tests for the survival chart."""

from factories import make_entry

from survivor_pool.charts import alive_by_week, plot_survival_curve
from survivor_pool.models import EliminationOutcome, EliminationReason, OutcomeStatus


def test_alive_by_week_counts_entries_after_each_week():
    entries = [make_entry("a"), make_entry("b", alive=False, eliminated_week=2), make_entry("c")]
    outcomes = [
        EliminationOutcome("a", 1, OutcomeStatus.SURVIVED, ("KC",)),
        EliminationOutcome("b", 1, OutcomeStatus.SURVIVED, ("BUF",)),
        EliminationOutcome("c", 1, OutcomeStatus.ELIMINATED, ("DAL",), EliminationReason.INCORRECT_PICK, "DAL"),
        EliminationOutcome("a", 2, OutcomeStatus.SURVIVED, ("PHI",)),
        EliminationOutcome("b", 2, OutcomeStatus.ELIMINATED, ("NYG",), EliminationReason.INCORRECT_PICK, "NYG"),
    ]
    assert alive_by_week(entries, [], outcomes, range(1, 4)) == {1: 2, 2: 1, 3: 1}


def test_plot_writes_image(tmp_path):
    path = str(tmp_path / "survival.png")
    assert plot_survival_curve({1: 10, 2: 7, 3: 4}, path) == path
    assert (tmp_path / "survival.png").stat().st_size > 0
