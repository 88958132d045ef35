# -*- coding: utf-8 -*-
"""Fonctions de formatage pour l'interface utilisateur.

Ce module centralise les utilitaires de formatage :
- Dates en français (UTC)
- Scores et résultats
- Styles des tableaux de résultats
"""
from __future__ import annotations

import pandas as pd

from src.config import OUTCOME_CODES
from src.models import MatchResult, Outcome

__all__ = [
    "format_date_fr",
    "format_datetime_fr_hm",
    "format_score_label",
    "format_percent",
    "outcome_label",
    "style_outcome_text",
    "style_signed_number",
    "results_to_frame",
]

_JOURS = ["Lun.", "Mar.", "Mer.", "Jeu.", "Ven.", "Sam.", "Dim."]
_MOIS = [
    "janvier",
    "février",
    "mars",
    "avril",
    "mai",
    "juin",
    "juillet",
    "août",
    "septembre",
    "octobre",
    "novembre",
    "décembre",
]


def _to_utc_naive(dt_value):
    ts = pd.to_datetime(dt_value, errors="coerce", utc=True)
    if pd.isna(ts):
        return None
    return ts.tz_localize(None).to_pydatetime()


def format_date_fr(dt_value) -> str:
    """Formate une date en français, ex: 'Lun. 4 décembre 2025'.

    Args:
        dt_value: Valeur de date (datetime, Timestamp, str, etc.).

    Returns:
        Date formatée en français ou "-" si invalide.
    """
    if dt_value is None:
        return "-"
    d = _to_utc_naive(dt_value)
    if d is None:
        return "-"
    return f"{_JOURS[d.weekday()]} {d.day} {_MOIS[d.month - 1]} {d.year}"


def format_datetime_fr_hm(dt_value) -> str:
    """Formate une date avec heure UTC (ex: 'Lun. 4 décembre 2025 14:30')."""
    if dt_value is None:
        return "-"
    d = _to_utc_naive(dt_value)
    if d is None:
        return "-"
    return f"{format_date_fr(d)} {d:%H:%M}"


def format_score_label(our_score, opponent_score) -> str:
    """Formate le score d'une partie (ex: '212 - 188')."""
    if our_score is None or opponent_score is None:
        return "-"
    return f"{int(our_score)} - {int(opponent_score)}"


def format_percent(value: float | None, digits: int = 0) -> str:
    """Formate un pourcentage ("-" si absent)."""
    if value is None or value != value:
        return "-"
    return f"{float(value):.{digits}f}%"


def outcome_label(outcome: Outcome | str) -> str:
    """Label lisible d'un résultat (Victoire, Défaite, Égalité)."""
    code = outcome.value if isinstance(outcome, Outcome) else str(outcome or "")
    return OUTCOME_CODES.to_label(code)


def style_outcome_text(v: str) -> str:
    """Retourne le style CSS pour un résultat de partie.

    Args:
        v: Texte du résultat (Victoire, Défaite, Égalité).

    Returns:
        Chaîne de style CSS.
    """
    s = (v or "").strip().lower()
    if s == "victoire":
        return "color: #1B5E20; font-weight: 700;"
    if s in ("défaite", "defaite"):
        return "color: #B71C1C; font-weight: 700;"
    if s in ("égalité", "egalite"):
        return "color: #8E6CFF; font-weight: 700;"
    return ""


def style_signed_number(v) -> str:
    """Vert si positif, rouge si négatif."""
    try:
        x = float(v)
    except (TypeError, ValueError):
        return ""
    if x > 0:
        return "color: #1B5E20; font-weight: 700;"
    if x < 0:
        return "color: #B71C1C; font-weight: 700;"
    return "color: #424242;"


def results_to_frame(results: list[MatchResult]) -> pd.DataFrame:
    """Tableau d'affichage d'une liste de parties (ordre conservé)."""
    return pd.DataFrame(
        [
            {
                "id": r.id,
                "date": format_datetime_fr_hm(r.played_at),
                "carte": r.map,
                "adversaire": r.opponent_tag,
                "score": format_score_label(r.our_score, r.opponent_score),
                "écart": r.frag_diff,
                "résultat": outcome_label(r.result),
                "stats": "oui" if r.stats_ref else "-",
            }
            for r in results
        ],
        columns=["id", "date", "carte", "adversaire", "score", "écart", "résultat", "stats"],
    )
