"""Graphiques par carte (map)."""

from typing import List

import plotly.graph_objects as go

from src.config import COLORS, PLOT_CONFIG
from src.models import MergedMapRow
from src.visualization.theme import apply_plot_style, empty_figure, get_legend_horizontal_bottom


def plot_map_strength(
    rows: List[MergedMapRow],
    label_a: str,
    label_b: str,
    title: str = "Taux de victoire par carte",
) -> go.Figure:
    """Compare le taux de victoire des deux équipes carte par carte.

    Une carte jamais jouée par une équipe n'a pas de barre de son côté.

    Args:
        rows: Lignes issues de merge_map_stats.
        label_a: Libellé de l'équipe A.
        label_b: Libellé de l'équipe B.
        title: Titre du graphique.

    Returns:
        Figure Plotly (barres horizontales groupées).
    """
    if not rows:
        return empty_figure()

    colors = COLORS.as_dict()
    # Plus jouée en haut.
    ordered = list(reversed(rows))
    maps = [r.map for r in ordered]

    fig = go.Figure()
    for label, attr, color in ((label_a, "a", colors["cyan"]), (label_b, "b", colors["violet"])):
        stats = [getattr(r, attr) for r in ordered]
        fig.add_trace(
            go.Bar(
                x=[s.win_rate if s is not None else None for s in stats],
                y=maps,
                orientation="h",
                name=label,
                marker_color=color,
                opacity=PLOT_CONFIG.bar_opacity,
                customdata=[
                    (s.games if s is not None else 0, r.label) for s, r in zip(stats, ordered)
                ],
                hovertemplate=(
                    "%{y}<br>victoires=%{x:.0f}%<br>parties=%{customdata[0]}"
                    "<br>%{customdata[1]}<extra></extra>"
                ),
            )
        )

    height = max(PLOT_CONFIG.default_height, 28 * len(rows) + 120)
    fig.update_layout(
        barmode="group",
        margin=dict(l=40, r=20, t=60, b=90),
        legend=get_legend_horizontal_bottom(),
    )
    fig.update_xaxes(title_text="Victoires (%)", range=[0, 100])
    return apply_plot_style(fig, title=title, height=height)
