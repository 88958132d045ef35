"""Tests pour l'agrégation des stats détaillées (ktxstats)."""

import pytest

from src.analysis.aggregation import (
    aggregate_team,
    aggregates_to_frame,
    extract_player_stat,
    find_team_aggregate,
    participating_players,
    team_aggregates,
)
from src.models import PlayerGameStat, WeaponStat


def _player(name, team, *, frags=0, deaths=0, ping=25, to_die=0, rl=None, items=None):
    p = {
        "name": name,
        "team": team,
        "ping": ping,
        "stats": {"frags": frags, "deaths": deaths, "kills": frags, "tk": 0, "suicides": 0},
        "dmg": {"given": frags * 100, "taken": deaths * 100, "taken-to-die": to_die},
        "weapons": {},
        "items": items or {},
    }
    if rl is not None:
        hits, attacks = rl
        p["weapons"]["rl"] = {
            "acc": {"attacks": attacks, "hits": hits},
            "kills": {"total": hits // 2, "enemy": hits // 2},
            "pickups": {"taken": 3, "dropped": 1},
        }
    return p


class TestParticipatingPlayers:
    """Tests pour participating_players."""

    def test_ping_zero_excluded(self):
        blob = {"players": [_player("a", "foo"), _player("ghost", "foo", ping=0)]}
        names = [p["name"] for p in participating_players(blob)]
        assert names == ["a"]

    def test_invalid_blob(self):
        assert participating_players(None) == []
        assert participating_players({"players": None}) == []


class TestExtractPlayerStat:
    """Tests pour extract_player_stat."""

    def test_performance(self):
        p = extract_player_stat(_player("a", "foo", frags=30, deaths=10, to_die=150), "performance")
        assert p.frags == 30
        assert p.deaths == 10
        assert p.dmg_given == 3000
        assert p.to_die == pytest.approx(150)
        assert p.efficiency == pytest.approx(75.0)

    def test_missing_fields_are_zero(self):
        p = extract_player_stat({"name": "bot"}, "performance")
        assert (p.frags, p.deaths, p.dmg_taken) == (0, 0, 0)
        assert p.efficiency == 0.0

    def test_weapons(self):
        p = extract_player_stat(_player("a", "foo", rl=(40, 100)), "weapons")
        assert p.weapons["rl"] == WeaponStat(hits=40, attempts=100, kills=20, pickups=3, drops=1)
        # Arme absente du blob : zéros.
        assert p.weapons["lg"] == WeaponStat()

    def test_resources(self):
        p = extract_player_stat(_player("a", "foo", items={"ra": {"took": 4}, "q": {"took": 1}}), "resources")
        assert p.items["ra"] == 4
        assert p.items["q"] == 1
        assert p.items["mh"] == 0

    def test_decodes_qw_names(self):
        team = "".join(chr(ord(c) + 128) for c in "foo")
        p = extract_player_stat({"name": "x", "team": team}, "performance")
        assert p.team == "foo"

    def test_unknown_category(self):
        with pytest.raises(ValueError):
            extract_player_stat({}, "teleports")


class TestAggregateTeam:
    """Tests pour aggregate_team."""

    def test_efficiency_is_ratio_of_sums(self):
        """50/100 et 10/400 : 60/500 = 12%, pas la moyenne des taux."""
        players = [
            PlayerGameStat(name="p1", team="foo", category="performance", frags=50, deaths=50),
            PlayerGameStat(name="p2", team="foo", category="performance", frags=10, deaths=390),
        ]
        agg = aggregate_team(players, "performance")
        assert agg.efficiency == pytest.approx(12.0)
        naive = (players[0].efficiency + players[1].efficiency) / 2
        assert naive == pytest.approx(26.25)

    def test_accuracy_is_ratio_of_sums(self):
        players = [
            PlayerGameStat(name="p1", team="foo", category="weapons", weapons={"lg": WeaponStat(hits=50, attempts=100)}),
            PlayerGameStat(name="p2", team="foo", category="weapons", weapons={"lg": WeaponStat(hits=10, attempts=400)}),
        ]
        agg = aggregate_team(players, "weapons")
        assert agg.weapons["lg"].hits == 60
        assert agg.weapons["lg"].attempts == 500
        assert agg.weapons["lg"].accuracy == pytest.approx(12.0)

    def test_zero_denominators(self):
        players = [PlayerGameStat(name="p1", team="foo", category="performance")]
        agg = aggregate_team(players, "performance")
        assert agg.efficiency == 0.0
        agg_w = aggregate_team([PlayerGameStat(name="p1", team="foo", category="weapons")], "weapons")
        assert agg_w.weapons["rl"].accuracy == 0.0

    def test_to_die_is_player_mean(self):
        players = [
            PlayerGameStat(name="p1", team="foo", category="performance", to_die=100),
            PlayerGameStat(name="p2", team="foo", category="performance", to_die=200),
        ]
        assert aggregate_team(players, "performance").to_die == pytest.approx(150)

    def test_empty_is_none(self):
        assert aggregate_team([], "performance") is None

    def test_items_summed(self):
        players = [
            PlayerGameStat(name="p1", team="foo", category="resources", items={"ra": 2, "q": 1}),
            PlayerGameStat(name="p2", team="foo", category="resources", items={"ra": 3}),
        ]
        agg = aggregate_team(players, "resources")
        assert agg.items["ra"] == 5
        assert agg.items["q"] == 1


class TestTeamAggregates:
    """Tests pour team_aggregates / aggregates_to_frame."""

    def test_groups_by_team_and_filters_ping(self):
        blob = {
            "players": [
                _player("a", "foo", frags=20, deaths=10),
                _player("b", "foo", frags=10, deaths=20),
                _player("c", "bar", frags=30, deaths=30),
                _player("observer", "bar", frags=99, deaths=0, ping=0),
            ]
        }
        aggs = team_aggregates(blob, "performance")
        assert list(aggs) == ["foo", "bar"]
        assert aggs["foo"].players == 2
        assert aggs["foo"].efficiency == pytest.approx(50.0)
        assert aggs["bar"].players == 1
        assert aggs["bar"].frags == 30

    def test_find_team_aggregate_case_insensitive(self):
        aggs = team_aggregates({"players": [_player("a", "Foo", frags=1)]}, "performance")
        assert find_team_aggregate(aggs, "FOO").frags == 1
        assert find_team_aggregate(aggs, "bar") is None

    def test_frame(self):
        aggs = team_aggregates({"players": [_player("a", "foo", rl=(10, 40))]}, "weapons")
        df = aggregates_to_frame(aggs)
        assert df.loc[0, "team"] == "foo"
        assert df.loc[0, "rl_acc"] == pytest.approx(25.0)

    def test_empty_blob(self):
        assert team_aggregates({}, "performance") == {}
        assert aggregates_to_frame({}).empty
