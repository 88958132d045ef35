"""Thème et style des graphiques Plotly."""

from __future__ import annotations

import plotly.graph_objects as go

from src.config import PLOT_CONFIG, THEME_COLORS


def apply_plot_style(
    fig: go.Figure,
    *,
    title: str | None = None,
    height: int | None = None,
) -> go.Figure:
    """Applique le thème sombre du dashboard aux graphiques Plotly.

    Args:
        fig: Figure Plotly à styliser.
        title: Titre optionnel à ajouter.
        height: Hauteur optionnelle en pixels.

    Returns:
        La figure stylisée (modifiée in-place).
    """
    bg_color = THEME_COLORS.bg_plot_rgba(1.0)

    fig.update_layout(
        template="plotly_dark",
        paper_bgcolor=bg_color,
        plot_bgcolor=bg_color,
        font=dict(color=THEME_COLORS.text_primary, size=13),
        hoverlabel=dict(
            bgcolor=THEME_COLORS.bg_plot_rgba(0.96),
            bordercolor=THEME_COLORS.border,
        ),
    )

    if title is not None:
        fig.update_layout(title=title)
    if height is not None:
        fig.update_layout(height=height)

    axis_style = dict(
        showgrid=True,
        gridcolor="rgba(255,255,255,0.07)",
        zeroline=False,
        showline=True,
        linecolor=THEME_COLORS.border,
    )
    fig.update_xaxes(**axis_style)
    fig.update_yaxes(**axis_style)
    return fig


def get_default_margin() -> dict:
    cfg = PLOT_CONFIG
    return dict(l=cfg.margin_left, r=cfg.margin_right, t=cfg.margin_top, b=cfg.margin_bottom)


def get_legend_horizontal_bottom() -> dict:
    """Légende horizontale sous le graphique."""
    return dict(
        orientation="h",
        yanchor="top",
        y=-0.22,
        xanchor="left",
        x=0,
    )


def empty_figure(height: int | None = None) -> go.Figure:
    """Figure vide stylisée (aucune donnée à afficher)."""
    h = height or PLOT_CONFIG.default_height
    fig = go.Figure()
    fig.update_layout(height=h, margin=get_default_margin())
    return apply_plot_style(fig, height=h)
