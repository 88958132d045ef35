"""Module d'analyse des données."""

from src.analysis.stats import compute_outcome_rates, format_record
from src.analysis.activity import (
    activity_to_frame,
    bucket_weekly_activity,
    period_start,
    week_start,
)
from src.analysis.aggregation import (
    aggregate_team,
    aggregates_to_frame,
    extract_player_stat,
    find_team_aggregate,
    participating_players,
    team_aggregates,
)
from src.analysis.filters import (
    SortColumn,
    SortDirection,
    SortState,
    filter_options,
    filter_results,
    sort_results,
)
from src.analysis.maps import (
    classify_map_strength,
    compute_map_stats,
    merge_map_stats,
    merged_maps_to_frame,
)

__all__ = [
    "compute_outcome_rates",
    "format_record",
    "activity_to_frame",
    "bucket_weekly_activity",
    "period_start",
    "week_start",
    "aggregate_team",
    "aggregates_to_frame",
    "extract_player_stat",
    "find_team_aggregate",
    "participating_players",
    "team_aggregates",
    "SortColumn",
    "SortDirection",
    "SortState",
    "filter_options",
    "filter_results",
    "sort_results",
    "classify_map_strength",
    "compute_map_stats",
    "merge_map_stats",
    "merged_maps_to_frame",
]
