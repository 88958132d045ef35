"""Tests pour les fonctions de parsing."""

from datetime import datetime, timezone

import pytest

from src.db.parsers import (
    coerce_datetime,
    coerce_int,
    coerce_number,
    normalize_tags,
    parse_form,
    parse_head_to_head,
    parse_hub_match,
    parse_iso_utc,
    parse_maps,
    parse_opponents,
    parse_roster,
    qw_to_ascii,
)
from src.models import Outcome


class TestParseIsoUtc:
    """Tests pour parse_iso_utc."""

    def test_z_suffix(self):
        dt = parse_iso_utc("2026-01-02T20:18:01.293Z")
        assert dt.tzinfo is not None
        assert dt.year == 2026 and dt.hour == 20 and dt.minute == 18

    def test_postgres_short_offset(self):
        """Offset abrégé "+00" renvoyé par Supabase."""
        dt = parse_iso_utc("2026-01-02 20:18:01+00")
        assert dt == datetime(2026, 1, 2, 20, 18, 1, tzinfo=timezone.utc)

    def test_offset_converted_to_utc(self):
        dt = parse_iso_utc("2026-01-02T22:00:00+02:00")
        assert dt.hour == 20

    def test_date_only(self):
        dt = parse_iso_utc("2026-01-02")
        assert dt == datetime(2026, 1, 2, tzinfo=timezone.utc)


class TestCoercion:
    """Tests pour coerce_number / coerce_int / coerce_datetime."""

    def test_coerce_number(self):
        assert coerce_number(3) == 3.0
        assert coerce_number("4.5") == 4.5
        assert coerce_number("abc") is None
        assert coerce_number(None) is None
        assert coerce_number(True) is None
        assert coerce_number(float("nan")) is None

    def test_coerce_int_default(self):
        assert coerce_int("12") == 12
        assert coerce_int(None) == 0
        assert coerce_int("x", default=-1) == -1

    def test_coerce_datetime_epoch(self):
        """Epoch en secondes ou en millisecondes."""
        s = coerce_datetime(1767385081)
        ms = coerce_datetime(1767385081000)
        assert s == ms
        assert s.tzinfo is not None

    def test_coerce_datetime_invalid(self):
        assert coerce_datetime("pas une date") is None
        assert coerce_datetime(None) is None


class TestQwNames:
    """Tests pour qw_to_ascii et normalize_tags."""

    def test_high_bit_characters(self):
        """Les caractères >= 128 sont ramenés en ASCII."""
        colored = "".join(chr(ord(c) + 128) for c in "foo")
        assert qw_to_ascii(colored) == "foo"

    def test_special_symbols(self):
        assert qw_to_ascii(chr(16) + "x" + chr(17)) == "[x]"
        assert qw_to_ascii(chr(18) + chr(27)) == "09"

    def test_plain_ascii_unchanged(self):
        assert qw_to_ascii("]SR[") == "]SR["

    def test_normalize_tags(self):
        assert normalize_tags("FOO") == "foo"
        assert normalize_tags(["FOO", " Foo2 ", ""]) == "foo,foo2"
        assert normalize_tags(None) == ""


class TestParseHeadToHead:
    """Tests pour parse_head_to_head / parse_form."""

    def test_games_from_team_a_perspective(self):
        payload = {
            "teamA": "foo",
            "teamB": "bar",
            "games": [
                {"id": 1, "playedAt": "2026-01-02T20:00:00Z", "map": "dm3", "teamAFrags": 200, "teamBFrags": 150,
                 "result": "W", "demoSha256": "abc123"},
                {"id": 2, "playedAt": "2026-01-03T20:00:00Z", "map": "e1m2", "teamAFrags": 100, "teamBFrags": 180},
            ],
        }
        h2h = parse_head_to_head(payload, "foo", "bar")
        assert h2h.team_a == "foo"
        assert [g.result for g in h2h.games] == [Outcome.WIN, Outcome.LOSS]
        assert h2h.games[0].stats_ref == "abc123"
        assert h2h.games[1].stats_ref is None
        assert h2h.games[1].opponent_tag == "bar"

    def test_missing_scores_are_zero(self):
        payload = {"games": [{"id": "g", "playedAt": "2026-01-02T20:00:00Z"}]}
        h2h = parse_head_to_head(payload, "foo", "bar")
        g = h2h.games[0]
        assert (g.our_score, g.opponent_score) == (0, 0)
        assert g.result == Outcome.DRAW

    def test_invalid_entries_skipped(self):
        payload = {"games": [{"id": "g"}, "junk", {"playedAt": "2026-01-02"}]}
        assert parse_head_to_head(payload, "foo", "bar").games == []

    def test_form(self):
        payload = {
            "team": "foo",
            "games": [
                {"id": 3, "playedAt": "2026-01-02T20:00:00Z", "map": "dm2", "teamFrags": 120, "oppFrags": 90,
                 "opponent": "baz"},
            ],
        }
        games = parse_form(payload, "foo")
        assert len(games) == 1
        assert games[0].opponent_tag == "baz"
        assert games[0].result == Outcome.WIN

    def test_non_dict_payload(self):
        assert parse_form(None, "foo") == []
        assert parse_head_to_head([], "a", "b").games == []


class TestParseHubMatch:
    """Tests pour parse_hub_match."""

    def test_our_team_detected_by_name(self):
        raw = {
            "id": 42,
            "timestamp": "2026-01-02 20:18:01+00",
            "map": "dm3",
            "teams": [{"name": "bar", "frags": 210}, {"name": "foo", "frags": 190}],
            "demo_sha256": "deadbeef",
        }
        m = parse_hub_match(raw, "FOO")
        assert m.our_tag == "foo"
        assert m.opponent_tag == "bar"
        assert (m.our_score, m.opponent_score) == (190, 210)
        assert m.result == Outcome.LOSS
        assert m.stats_ref == "deadbeef"

    def test_missing_timestamp(self):
        assert parse_hub_match({"id": 1, "teams": []}, "foo") is None


class TestParseLists:
    """Tests pour parse_maps / parse_roster / parse_opponents."""

    def test_maps_win_rate_recomputed(self):
        maps = parse_maps({"maps": [{"map": "dm3", "games": 4, "wins": 3, "losses": 1}, {"map": ""}]})
        assert len(maps) == 1
        assert maps[0].win_rate == pytest.approx(75.0)

    def test_maps_win_rate_kept(self):
        maps = parse_maps({"maps": [{"map": "dm3", "games": 4, "wins": 3, "winRate": 70}]})
        assert maps[0].win_rate == pytest.approx(70.0)

    def test_roster(self):
        roster = parse_roster({"players": [{"player": "milton", "games": 12}, {"name": ""}]})
        assert [(r.player, r.games) for r in roster] == [("milton", 12)]

    def test_opponents(self):
        opps = parse_opponents({"opponents": [{"tag": "bar", "total": 5, "wins": 2, "losses": 3}]})
        assert opps[0].tag == "bar"
        assert opps[0].losses == 3
