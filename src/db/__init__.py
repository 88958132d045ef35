"""Module de parsing des réponses distantes et d'annuaire des équipes."""

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
    parse_stats_game,
    qw_to_ascii,
)
from src.db.teams import TeamDirectory, load_teams

__all__ = [
    # parsers
    "coerce_datetime",
    "coerce_int",
    "coerce_number",
    "normalize_tags",
    "parse_form",
    "parse_head_to_head",
    "parse_hub_match",
    "parse_iso_utc",
    "parse_maps",
    "parse_opponents",
    "parse_roster",
    "parse_stats_game",
    "qw_to_ascii",
    # teams
    "TeamDirectory",
    "load_teams",
]
