"""Accès aux sources de statistiques distantes."""

from src.api.cache import ResponseCache, StatsCache
from src.api.client import StatsApiClient, StatsApiError, hub_team_url

__all__ = [
    "ResponseCache",
    "StatsCache",
    "StatsApiClient",
    "StatsApiError",
    "hub_team_url",
]
