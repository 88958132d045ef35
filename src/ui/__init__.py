"""Module UI - Paramètres et helpers d'interface."""

from src.ui.formatting import (
    format_date_fr,
    format_datetime_fr_hm,
    format_percent,
    format_score_label,
    outcome_label,
    results_to_frame,
)
from src.ui.settings import AppSettings, load_settings, save_settings

__all__ = [
    # formatting
    "format_date_fr",
    "format_datetime_fr_hm",
    "format_percent",
    "format_score_label",
    "outcome_label",
    "results_to_frame",
    # settings
    "AppSettings",
    "load_settings",
    "save_settings",
]
