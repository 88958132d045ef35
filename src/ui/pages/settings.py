"""Page Paramètres (Settings)."""

from __future__ import annotations

from typing import Callable

import streamlit as st

from src.config import ALLOWED_PERIOD_MONTHS
from src.ui.settings import AppSettings, save_settings


def render_settings_page(
    settings: AppSettings,
    *,
    on_saved_fn: Callable[[], None],
) -> AppSettings:
    """Rend l'onglet Paramètres et retourne les settings (potentiellement modifiés).

    Parameters
    ----------
    settings : AppSettings
        Paramètres actuels de l'application.
    on_saved_fn : Callable[[], None]
        Appelée après un enregistrement réussi (reconstruction du contrôleur).

    Returns
    -------
    AppSettings
        Paramètres (modifiés ou non).
    """
    st.subheader("Paramètres")

    with st.expander("Comparaison", expanded=True):
        months = st.selectbox(
            "Période par défaut (mois)",
            options=list(ALLOWED_PERIOD_MONTHS),
            index=(
                list(ALLOWED_PERIOD_MONTHS).index(settings.default_period_months)
                if settings.default_period_months in ALLOWED_PERIOD_MONTHS
                else 0
            ),
        )
        h2h_limit = st.number_input("Confrontations max", min_value=1, max_value=100, value=int(settings.h2h_limit))
        form_limit = st.number_input("Parties de forme max", min_value=1, max_value=100, value=int(settings.form_limit))
        history_limit = st.number_input(
            "Historique hub max",
            min_value=1,
            max_value=500,
            value=int(settings.history_limit),
            help="Nombre de parties utilisées pour l'histogramme d'activité.",
        )

    with st.expander("Réseau", expanded=False):
        timeout = st.number_input(
            "Timeout des requêtes (s)", min_value=1, max_value=120, value=int(settings.request_timeout_seconds)
        )
        ttl = st.number_input(
            "Durée du cache des listes (s)",
            min_value=0,
            max_value=3600,
            value=int(settings.list_cache_ttl_seconds),
            help="0 = pas de cache : chaque affichage relance la requête.",
        )

    with st.expander("Sources (avancé)", expanded=False):
        st.caption("Optionnel: surcharge les URLs des API (sinon valeurs par défaut / variables d'environnement).")
        stats_api_base = st.text_input("API stats", value=settings.stats_api_base)
        hub_api_base = st.text_input("API hub (Supabase)", value=settings.hub_api_base)
        hub_api_key = st.text_input("Clé API hub", value=settings.hub_api_key, type="password")
        ktxstats_base = st.text_input("Serveur ktxstats", value=settings.ktxstats_base)
        teams_path = st.text_input(
            "Annuaire des équipes (json)",
            value=settings.teams_path,
            help="Override de QWMATCHUP_TEAMS_PATH. Laisse vide pour utiliser teams.json à la racine.",
        )

    new_settings = AppSettings(
        default_period_months=int(months),
        h2h_limit=int(h2h_limit),
        form_limit=int(form_limit),
        history_limit=int(history_limit),
        request_timeout_seconds=int(timeout),
        list_cache_ttl_seconds=int(ttl),
        stats_api_base=str(stats_api_base).strip().rstrip("/") or settings.stats_api_base,
        hub_api_base=str(hub_api_base).strip().rstrip("/") or settings.hub_api_base,
        hub_api_key=str(hub_api_key).strip(),
        ktxstats_base=str(ktxstats_base).strip().rstrip("/") or settings.ktxstats_base,
        teams_path=str(teams_path).strip(),
    )

    if st.button("Enregistrer", type="primary"):
        ok, err = save_settings(new_settings)
        if ok:
            st.success("Paramètres enregistrés.")
            on_saved_fn()
            return new_settings
        st.error(err)
    return settings
