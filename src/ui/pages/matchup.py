"""Page Comparaison d'équipes.

Confrontations directes, forme récente des deux équipes et bilan par carte,
avec stats détaillées de la partie épinglée (ou prévisualisée).
"""

from __future__ import annotations

from typing import Optional

import streamlit as st

from src.analysis import aggregates_to_frame, find_team_aggregate, format_record, merged_maps_to_frame
from src.analysis.filters import SortColumn, SortDirection
from src.api import hub_team_url
from src.app.session import ComparisonSessionController, SubMode
from src.app.state import run_sync, settle
from src.config import ALLOWED_PERIOD_MONTHS, STAT_CATEGORIES
from src.models import LoadStatus, SelectionMode, Side
from src.ui.formatting import format_percent, results_to_frame, style_outcome_text, style_signed_number
from src.visualization import plot_map_strength, plot_weekly_activity

_SUB_MODE_LABELS = {
    SubMode.H2H: "Confrontations",
    SubMode.FORM: "Forme",
    SubMode.MAPS: "Cartes",
}

_CATEGORY_LABELS = {
    "performance": "Performance",
    "weapons": "Armes",
    "resources": "Ressources",
}

_SORT_LABELS = {
    SortColumn.DATE: "Date",
    SortColumn.MAP: "Carte",
    SortColumn.OUR_SCORE: "Score",
    SortColumn.OPPONENT_SCORE: "Score adverse",
    SortColumn.OPPONENT: "Adversaire",
    SortColumn.RESULT: "Résultat",
}


def _side_key(side: Optional[Side]) -> str:
    return side.value if side is not None else "h2h"


def _apply_selection(ctl: ComparisonSessionController, side: Optional[Side], result_id: str, *, sticky: bool) -> None:
    async def _run() -> None:
        if sticky:
            await settle(ctl.select_result(side, result_id))
        else:
            await settle(ctl.hover_result(side, result_id))

    run_sync(_run())


# =============================================================================
# Barre latérale
# =============================================================================


def _team_picker(ctl: ComparisonSessionController, label: str, current: str, key: str) -> str:
    teams = ctl.directory.teams
    if not teams:
        return st.sidebar.text_input(label, value=current, key=key).strip()
    options = [""] + sorted({t.tag for t in teams} | ({current} if current else set()), key=str.lower)
    return st.sidebar.selectbox(
        label,
        options=options,
        index=options.index(current) if current in options else 0,
        format_func=lambda tag: ctl.team_label(tag) if tag else "-",
        key=key,
    )


def render_matchup_sidebar(ctl: ComparisonSessionController) -> None:
    """Sélection des équipes et de la période."""
    session = ctl.session
    st.sidebar.header("Comparaison")

    team_a = _team_picker(ctl, "Équipe A", session.team_a, "matchup_team_a")
    if team_a != session.team_a:
        run_sync(ctl.select_team_a(team_a))

    team_b = _team_picker(ctl, "Adversaire", ctl.session.team_b, "matchup_team_b")
    if team_b != ctl.session.team_b:
        run_sync(ctl.select_opponent(team_b))

    periods = list(ALLOWED_PERIOD_MONTHS)
    months = st.sidebar.selectbox(
        "Période",
        options=periods,
        index=periods.index(session.period_months) if session.period_months in periods else 0,
        format_func=lambda m: f"{m} mois",
        key="matchup_period",
    )
    if int(months) != ctl.session.period_months:
        run_sync(ctl.change_period(int(months)))

    for tag in (ctl.session.team_a, ctl.session.team_b):
        if tag:
            st.sidebar.markdown(f"[{ctl.team_label(tag)} sur le hub]({hub_team_url(tag)})")


# =============================================================================
# Panneaux de résultats
# =============================================================================


def _render_load_state(ctl: ComparisonSessionController, kind: str, side: Optional[Side]) -> bool:
    """Affiche l'état de chargement ; True si des données sont disponibles."""
    state = ctl.load_state(kind, side)
    if state.status == LoadStatus.PRESENT:
        return True
    if state.status == LoadStatus.LOADING:
        st.info("Chargement…")
    elif state.status == LoadStatus.ABSENT:
        st.info("Aucune partie sur la période.")
    elif state.status == LoadStatus.FAILED:
        st.error(f"Échec du chargement : {state.error}")
        if st.button("Réessayer", key=f"retry_{kind}_{_side_key(side)}"):
            run_sync(ctl.retry())
            st.rerun()
    else:
        st.caption("Sélectionne les équipes pour charger les parties.")
    return False


def _render_filters(ctl: ComparisonSessionController, side: Optional[Side]) -> None:
    key = _side_key(side)
    opts = ctl.filter_options(side)
    active = ctl.active_filters(side)
    cols = st.columns(3)

    maps = [""] + opts["maps"]
    chosen_map = cols[0].selectbox(
        "Carte",
        options=maps,
        index=maps.index(active.get("map") or ""),
        format_func=lambda m: m or "Toutes",
        key=f"filter_map_{key}",
    )
    if (chosen_map or None) != active.get("map"):
        ctl.filter_by_map(side, chosen_map or None)

    opponents = [""] + opts["opponents"]
    chosen_opp = cols[1].selectbox(
        "Adversaire",
        options=opponents,
        index=opponents.index(active.get("opponent") or ""),
        format_func=lambda o: ctl.team_label(o) if o else "Tous",
        key=f"filter_opp_{key}",
    )
    if (chosen_opp or None) != active.get("opponent"):
        ctl.filter_by_opponent(side, chosen_opp or None)

    sort = ctl.sort_state(side)
    columns = list(SortColumn)
    chosen_col = cols[2].selectbox(
        "Trier par",
        options=columns,
        index=columns.index(sort.column),
        format_func=lambda c: _SORT_LABELS[c],
        key=f"sort_col_{key}",
    )
    if chosen_col != sort.column:
        ctl.sort_by_column(side, chosen_col)
    arrow = "↓" if ctl.sort_state(side).direction == SortDirection.DESC else "↑"
    if cols[2].button(f"Inverser {arrow}", key=f"sort_flip_{key}"):
        ctl.sort_by_column(side, ctl.sort_state(side).column)
        st.rerun()


def _render_results_panel(ctl: ComparisonSessionController, side: Optional[Side], kind: str, title: str) -> None:
    st.markdown(f"#### {title}")
    if not _render_load_state(ctl, kind, side):
        return

    _render_filters(ctl, side)
    results = ctl.visible_results(side)
    rates = ctl.summary(side)
    st.caption(f"Bilan : {format_record(rates)}")

    df = results_to_frame(results)
    key = _side_key(side)
    styled = df.style.map(style_outcome_text, subset=["résultat"]).map(style_signed_number, subset=["écart"])
    event = st.dataframe(
        styled,
        hide_index=True,
        use_container_width=True,
        on_select="rerun",
        selection_mode="single-row",
        key=f"results_{key}",
        column_config={"id": None},
    )

    rows = list(getattr(getattr(event, "selection", None), "rows", []) or [])
    selected_id = str(df.iloc[rows[0]]["id"]) if rows and rows[0] < len(df) else None
    state = ctl.selection_state(side)
    pinned_id = state.target_id if state.mode == SelectionMode.STICKY else None

    if selected_id != pinned_id:
        if selected_id is not None:
            _apply_selection(ctl, side, selected_id, sticky=True)
        elif pinned_id is not None:
            # Clic sur la ligne épinglée : désépinglage.
            _apply_selection(ctl, side, pinned_id, sticky=True)

    # Aperçu sans épinglage (équivalent du survol).
    if ctl.selection_state(side).mode != SelectionMode.STICKY and not df.empty:
        ids = [""] + df["id"].astype(str).tolist()
        labels = dict(zip(df["id"].astype(str), df["date"] + " · " + df["carte"] + " · " + df["score"]))
        preview = st.selectbox(
            "Aperçu",
            options=ids,
            format_func=lambda i: labels.get(i, "-") if i else "-",
            key=f"preview_{key}",
        )
        current = ctl.selection_state(side)
        if preview and preview != current.target_id:
            _apply_selection(ctl, side, preview, sticky=False)
        elif not preview and current.mode == SelectionMode.HOVERED and current.target_id:
            ctl.clear_hover(side, current.target_id)

    _render_detail(ctl, side)


def _render_detail(ctl: ComparisonSessionController, side: Optional[Side]) -> None:
    state = ctl.selection_state(side)
    if state.mode == SelectionMode.NONE:
        st.caption("Sélectionne une partie pour afficher les stats détaillées.")
        return
    if state.stats_loading:
        st.info("Chargement des stats détaillées…")
        return
    if state.stats_error:
        st.warning(f"Stats détaillées indisponibles : {state.stats_error}")
        return
    if state.stats_blob is None:
        st.caption("Pas de stats détaillées pour cette partie.")
        return

    pin = "📌 " if state.mode == SelectionMode.STICKY else ""
    st.markdown(f"{pin}**Stats détaillées**")

    perf = ctl.team_aggregates("performance", side)
    metrics = []
    for tag in (ctl.session.team_a, ctl.session.team_b):
        agg = find_team_aggregate(perf, tag) if tag else None
        if agg is not None:
            metrics.append((ctl.team_label(tag), agg))
    if metrics:
        cols = st.columns(len(metrics))
        for col, (label, agg) in zip(cols, metrics):
            col.metric(f"Efficacité {label}", format_percent(agg.efficiency), f"{agg.frags} frags")

    tabs = st.tabs([_CATEGORY_LABELS[c] for c in STAT_CATEGORIES])
    for tab, category in zip(tabs, STAT_CATEGORIES):
        with tab:
            df = aggregates_to_frame(ctl.team_aggregates(category, side))
            if df.empty:
                st.caption("Pas de données.")
            else:
                st.dataframe(df, hide_index=True, use_container_width=True)


# =============================================================================
# Sous-modes
# =============================================================================


def _render_h2h(ctl: ComparisonSessionController) -> None:
    session = ctl.session
    if not (session.team_a and session.team_b):
        st.info("Choisis une équipe A et un adversaire.")
        return
    title = f"{ctl.team_label(session.team_a)} vs {ctl.team_label(session.team_b)}"
    _render_results_panel(ctl, None, "h2h", title)


def _render_form(ctl: ComparisonSessionController) -> None:
    session = ctl.session
    cols = st.columns(2)
    for col, side, tag in ((cols[0], Side.LEFT, session.team_a), (cols[1], Side.RIGHT, session.team_b)):
        with col:
            if not tag:
                st.caption("Aucune équipe.")
                continue
            _render_results_panel(ctl, side, "form", f"Forme de {ctl.team_label(tag)}")


def _render_maps(ctl: ComparisonSessionController) -> None:
    session = ctl.session
    label_a = ctl.team_label(session.team_a) or "A"
    label_b = ctl.team_label(session.team_b) or "B"

    for side, tag in ((Side.LEFT, session.team_a), (Side.RIGHT, session.team_b)):
        if tag:
            state = ctl.load_state("maps", side)
            if state.status == LoadStatus.FAILED:
                st.error(f"Cartes de {ctl.team_label(tag)} indisponibles : {state.error}")

    rows = ctl.merged_maps()
    if rows:
        st.plotly_chart(plot_map_strength(rows, label_a, label_b), use_container_width=True)
        st.dataframe(merged_maps_to_frame(rows, label_a, label_b), hide_index=True, use_container_width=True)
    else:
        _render_load_state(ctl, "maps", Side.LEFT)

    hist_cols = st.columns(2)
    for col, side, label in ((hist_cols[0], Side.LEFT, label_a), (hist_cols[1], Side.RIGHT, label_b)):
        stats = ctl.history_map_stats(side)
        if not stats:
            continue
        with col:
            st.markdown(f"**Cartes jouées par {label} (hub)**")
            st.dataframe(
                [
                    {
                        "carte": m.map,
                        "parties": m.games,
                        "victoires": m.wins,
                        "taux": format_percent(m.win_rate),
                        "écart moyen": m.avg_frag_diff,
                    }
                    for m in stats
                ],
                hide_index=True,
            )

    st.markdown("#### Activité")
    activity_a = ctl.weekly_activity(Side.LEFT)
    activity_b = ctl.weekly_activity(Side.RIGHT) if session.team_b else None
    st.plotly_chart(
        plot_weekly_activity(activity_a, activity_b, label_a=label_a, label_b=label_b),
        use_container_width=True,
    )
    for side in (Side.LEFT, Side.RIGHT):
        state = ctl.load_state("history", side)
        if state.status == LoadStatus.FAILED:
            st.warning(f"Historique indisponible : {state.error}")
            if st.button("Réessayer", key=f"retry_history_{side.value}"):
                run_sync(ctl.retry())
                st.rerun()


def _render_extras(ctl: ComparisonSessionController) -> None:
    session = ctl.session
    if not session.team_a:
        return
    with st.expander("Rosters et adversaires", expanded=False):
        c1, c2 = st.columns(2)
        if c1.button("Charger les rosters"):
            run_sync(ctl.load_rosters())
        if c2.button("Charger les adversaires"):
            run_sync(ctl.load_opponents())

        for side, tag in ((Side.LEFT, session.team_a), (Side.RIGHT, session.team_b)):
            if not tag:
                continue
            roster = ctl.load_state("roster", side)
            opponents = ctl.load_state("opponents", side)
            if roster.is_present:
                st.markdown(f"**Roster {ctl.team_label(tag)}**")
                st.dataframe(
                    [{"joueur": r.player, "parties": r.games} for r in roster.data],
                    hide_index=True,
                )
            if opponents.is_present:
                st.markdown(f"**Adversaires de {ctl.team_label(tag)}**")
                st.dataframe(
                    [
                        {
                            "adversaire": o.tag,
                            "parties": o.total,
                            "victoires": o.wins,
                            "défaites": o.losses,
                            "taux": format_percent(o.wins / o.total * 100 if o.total else None),
                        }
                        for o in opponents.data
                    ],
                    hide_index=True,
                )
            for state in (roster, opponents):
                if state.status == LoadStatus.FAILED:
                    st.warning(f"{ctl.team_label(tag)} : {state.error}")


def render_matchup_page(ctl: ComparisonSessionController) -> None:
    """Rend la page de comparaison complète."""
    render_matchup_sidebar(ctl)

    modes = list(SubMode)
    mode = st.radio(
        "Vue",
        options=modes,
        index=modes.index(ctl.session.sub_mode),
        format_func=lambda m: _SUB_MODE_LABELS[m],
        horizontal=True,
        key="matchup_sub_mode",
    )
    if mode != ctl.session.sub_mode:
        run_sync(ctl.switch_sub_mode(mode))

    if ctl.session.sub_mode == SubMode.H2H:
        _render_h2h(ctl)
    elif ctl.session.sub_mode == SubMode.FORM:
        _render_form(ctl)
    else:
        _render_maps(ctl)

    _render_extras(ctl)
