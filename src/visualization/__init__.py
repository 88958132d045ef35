"""Module de visualisation (graphiques Plotly)."""

from src.visualization.activity import plot_weekly_activity
from src.visualization.maps import plot_map_strength
from src.visualization.theme import apply_plot_style, empty_figure

__all__ = [
    "plot_weekly_activity",
    "plot_map_strength",
    "apply_plot_style",
    "empty_figure",
]
