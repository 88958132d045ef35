"""Tests pour les fonctions d'analyse (bilans, filtres, tri)."""

from datetime import datetime, timedelta, timezone

import pytest

from src.analysis.filters import (
    SortColumn,
    SortDirection,
    SortState,
    filter_options,
    filter_results,
    sort_results,
)
from src.analysis.stats import compute_outcome_rates, format_record
from src.models import MatchResult, Outcome, OutcomeRates

BASE = datetime(2026, 3, 1, 20, 0, tzinfo=timezone.utc)


def _r(i, map_name="dm3", opponent="bar", ours=100, theirs=50, day=0):
    return MatchResult(
        id=str(i),
        map=map_name,
        played_at=BASE + timedelta(days=day),
        our_tag="foo",
        opponent_tag=opponent,
        our_score=ours,
        opponent_score=theirs,
        result=Outcome.from_scores(ours, theirs),
    )


class TestComputeOutcomeRates:
    """Tests pour compute_outcome_rates."""

    def test_one_win_one_loss(self):
        """FOO vs BAR : une victoire, une défaite."""
        rates = compute_outcome_rates([_r(1, ours=200, theirs=100), _r(2, ours=90, theirs=150)])
        assert (rates.wins, rates.losses, rates.draws, rates.total) == (1, 1, 0, 2)
        assert rates.win_rate == pytest.approx(50.0)

    def test_draws(self):
        rates = compute_outcome_rates([_r(1, ours=100, theirs=100)])
        assert rates.draws == 1
        assert rates.win_rate == pytest.approx(0.0)

    def test_empty(self):
        rates = compute_outcome_rates([])
        assert rates.total == 0
        assert rates.win_rate is None


class TestFormatRecord:
    """Tests pour format_record."""

    def test_basic(self):
        assert format_record(OutcomeRates(wins=1, losses=1, total=2)) == "1W / 1L (50%)"

    def test_with_draws(self):
        assert format_record(OutcomeRates(wins=2, losses=1, draws=1, total=4)) == "2W / 1L / 1D (50%)"

    def test_empty(self):
        assert format_record(OutcomeRates()) == "Aucune partie"


class TestFilterResults:
    """Tests pour filter_results."""

    def test_map_and_opponent(self):
        results = [_r(1, "dm3", "bar"), _r(2, "dm2", "bar"), _r(3, "dm3", "baz")]
        assert [r.id for r in filter_results(results, map="dm3")] == ["1", "3"]
        assert [r.id for r in filter_results(results, opponent="bar")] == ["1", "2"]
        assert [r.id for r in filter_results(results, map="dm3", opponent="baz")] == ["3"]

    def test_no_constraint(self):
        results = [_r(1), _r(2)]
        assert filter_results(results) == results

    def test_exact_match_only(self):
        assert filter_results([_r(1, "dm3")], map="dm") == []

    def test_options(self):
        results = [_r(1, "e1m2", "Bar"), _r(2, "dm3", "baz"), _r(3, "dm3", "Bar")]
        opts = filter_options(results)
        assert opts["maps"] == ["dm3", "e1m2"]
        assert opts["opponents"] == ["Bar", "baz"]


class TestSortResults:
    """Tests pour sort_results et SortState."""

    def test_default_is_date_desc(self):
        state = SortState()
        assert state.column == SortColumn.DATE
        assert state.direction == SortDirection.DESC

    def test_toggle_same_column_flips(self):
        state = SortState().toggled(SortColumn.DATE)
        assert state.direction == SortDirection.ASC
        assert state.toggled("date").direction == SortDirection.DESC

    def test_toggle_new_column_starts_desc(self):
        state = SortState(SortColumn.MAP, SortDirection.ASC).toggled(SortColumn.RESULT)
        assert state == SortState(SortColumn.RESULT, SortDirection.DESC)

    def test_date_desc(self):
        results = [_r(1, day=0), _r(2, day=2), _r(3, day=1)]
        assert [r.id for r in sort_results(results, "date", "desc")] == ["2", "3", "1"]

    def test_does_not_mutate_input(self):
        results = [_r(1, day=0), _r(2, day=2)]
        sort_results(results, SortColumn.DATE, SortDirection.DESC)
        assert [r.id for r in results] == ["1", "2"]

    def test_stable_both_directions(self):
        """À clé égale, l'ordre d'origine est conservé."""
        results = [_r(1, "dm3"), _r(2, "dm2"), _r(3, "dm3"), _r(4, "dm2")]
        asc = sort_results(results, SortColumn.MAP, SortDirection.ASC)
        desc = sort_results(results, SortColumn.MAP, SortDirection.DESC)
        assert [r.id for r in asc] == ["2", "4", "1", "3"]
        assert [r.id for r in desc] == ["1", "3", "2", "4"]

    def test_result_ordinal(self):
        results = [_r(1, ours=10, theirs=20), _r(2, ours=20, theirs=10), _r(3, ours=10, theirs=10)]
        assert [r.id for r in sort_results(results, SortColumn.RESULT, SortDirection.DESC)] == ["2", "3", "1"]

    def test_scores(self):
        results = [_r(1, ours=150, theirs=90), _r(2, ours=200, theirs=10)]
        assert [r.id for r in sort_results(results, SortColumn.OUR_SCORE, SortDirection.ASC)] == ["1", "2"]
        assert [r.id for r in sort_results(results, SortColumn.OPPONENT_SCORE, SortDirection.ASC)] == ["2", "1"]

    def test_unknown_column(self):
        with pytest.raises(ValueError):
            sort_results([], "frags")
