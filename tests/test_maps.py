"""Tests pour la comparaison par carte."""

from datetime import datetime, timedelta, timezone

import pytest

from src.analysis.maps import classify_map_strength, compute_map_stats, merge_map_stats, merged_maps_to_frame
from src.models import MapStat, MatchResult, Outcome


def _m(name: str, win_rate: float, games: int = 10) -> MapStat:
    return MapStat(map=name, games=games, wins=int(games * win_rate / 100), win_rate=win_rate)


class TestClassifyMapStrength:
    """Tests pour classify_map_strength (ordre des règles)."""

    def test_both_strong_before_diff(self):
        assert classify_map_strength(_m("dm3", 65), _m("dm3", 62), "FOO", "BAR") == "Both teams strong"

    def test_both_strong_even_with_large_gap(self):
        """La règle "fortes" passe avant "domine"."""
        assert classify_map_strength(_m("dm3", 100), _m("dm3", 60), "FOO", "BAR") == "Both teams strong"

    def test_dominates(self):
        assert classify_map_strength(_m("dm3", 80), _m("dm3", 40), "FOO", "BAR") == "FOO dominates"
        assert classify_map_strength(_m("dm3", 20), _m("dm3", 50), "FOO", "BAR") == "BAR dominates"

    def test_favors(self):
        assert classify_map_strength(_m("dm3", 55), _m("dm3", 40), "FOO", "BAR") == "FOO favors"
        assert classify_map_strength(_m("dm3", 45), _m("dm3", 60), "FOO", "BAR") == "BAR favors"

    def test_neither(self):
        assert classify_map_strength(_m("dm3", 30), _m("dm3", 35), "FOO", "BAR") == "Neither team favors"

    def test_even(self):
        assert classify_map_strength(_m("dm3", 50), _m("dm3", 45), "FOO", "BAR") == "Even"

    def test_one_side_missing(self):
        assert classify_map_strength(_m("dm3", 50), None, "FOO", "BAR") == "FOO plays, BAR doesn't"
        assert classify_map_strength(None, _m("dm3", 50), "FOO", "BAR") == "BAR plays, FOO doesn't"


class TestMergeMapStats:
    """Tests pour merge_map_stats."""

    def test_full_outer_join(self):
        maps_a = [_m("dm3", 50, games=5), _m("e1m2", 70, games=2)]
        maps_b = [_m("dm3", 40, games=4), _m("dm2", 30, games=3)]
        rows = merge_map_stats(maps_a, maps_b, "FOO", "BAR")

        assert sorted(r.map for r in rows) == ["dm2", "dm3", "e1m2"]
        by_map = {r.map: r for r in rows}
        assert by_map["e1m2"].b is None
        assert by_map["dm2"].a is None
        assert by_map["dm2"].label == "BAR plays, FOO doesn't"

    def test_sorted_by_combined_games(self):
        maps_a = [_m("dm3", 50, games=5), _m("e1m2", 70, games=2)]
        maps_b = [_m("dm3", 40, games=4), _m("dm2", 30, games=3)]
        rows = merge_map_stats(maps_a, maps_b, "FOO", "BAR")
        assert [r.map for r in rows] == ["dm3", "dm2", "e1m2"]
        assert rows[0].total_games == 9

    def test_ties_by_map_name(self):
        rows = merge_map_stats([_m("e1m2", 50, games=3)], [_m("dm2", 50, games=3)], "FOO", "BAR")
        assert [r.map for r in rows] == ["dm2", "e1m2"]

    def test_empty(self):
        assert merge_map_stats([], [], "FOO", "BAR") == []

    def test_frame(self):
        rows = merge_map_stats([_m("dm3", 50)], [], "FOO", "BAR")
        df = merged_maps_to_frame(rows, "FOO", "BAR")
        assert df.loc[0, "FOO games"] == 10
        assert df.loc[0, "verdict"] == "FOO plays, BAR doesn't"


class TestComputeMapStats:
    """Tests pour compute_map_stats (historique brut)."""

    def _r(self, i, map_name, ours, theirs):
        return MatchResult(
            id=str(i),
            map=map_name,
            played_at=datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(days=i),
            our_tag="foo",
            opponent_tag="bar",
            our_score=ours,
            opponent_score=theirs,
            result=Outcome.from_scores(ours, theirs),
        )

    def test_per_map(self):
        results = [
            self._r(1, "dm3", 200, 100),
            self._r(2, "dm3", 100, 150),
            self._r(3, "dm3", 180, 120),
            self._r(4, "e1m2", 90, 100),
        ]
        stats = compute_map_stats(results)
        assert [s.map for s in stats] == ["dm3", "e1m2"]
        dm3 = stats[0]
        assert (dm3.games, dm3.wins, dm3.losses) == (3, 2, 1)
        assert dm3.win_rate == pytest.approx(200 / 3)
        assert dm3.avg_frag_diff == pytest.approx(36.7)

    def test_empty(self):
        assert compute_map_stats([]) == []
