"""Graphique d'activité hebdomadaire."""

from typing import List, Optional

import plotly.graph_objects as go

from src.analysis.activity import activity_to_frame
from src.config import COLORS, PLOT_CONFIG
from src.models import ActivityBucket
from src.visualization.theme import apply_plot_style, empty_figure, get_legend_horizontal_bottom


def plot_weekly_activity(
    buckets_a: List[ActivityBucket],
    buckets_b: Optional[List[ActivityBucket]] = None,
    *,
    label_a: str = "A",
    label_b: str = "B",
    title: str = "Parties par semaine",
) -> go.Figure:
    """Histogramme du nombre de parties par semaine.

    Args:
        buckets_a: Semaines de l'équipe A.
        buckets_b: Semaines de l'équipe B (optionnel, barres groupées).
        label_a: Libellé de l'équipe A.
        label_b: Libellé de l'équipe B.
        title: Titre du graphique.

    Returns:
        Figure Plotly.
    """
    colors = COLORS.as_dict()
    series = [(buckets_a, label_a, colors["cyan"])]
    if buckets_b:
        series.append((buckets_b, label_b, colors["violet"]))

    if not any(b for b, _, _ in series):
        return empty_figure(PLOT_CONFIG.short_height)

    fig = go.Figure()
    for buckets, label, color in series:
        d = activity_to_frame(buckets)
        if d.empty:
            continue
        fig.add_trace(
            go.Bar(
                x=d["week_start"],
                y=d["games"],
                name=label,
                marker_color=color,
                opacity=PLOT_CONFIG.bar_opacity,
                customdata=list(zip(d["wins"], d["losses"], d["draws"])),
                hovertemplate=(
                    "semaine du %{x|%d/%m/%Y}<br>parties=%{y}"
                    "<br>V=%{customdata[0]} D=%{customdata[1]} N=%{customdata[2]}<extra></extra>"
                ),
            )
        )

    fig.update_layout(
        barmode="group",
        margin=dict(l=40, r=20, t=60, b=90),
        legend=get_legend_horizontal_bottom(),
        bargap=0.15,
    )
    fig.update_yaxes(title_text="Parties", rangemode="tozero")
    return apply_plot_style(fig, title=title, height=PLOT_CONFIG.short_height)
