"""Gestion des paramètres utilisateur (persistés).

Objectif:
- Régler la période par défaut, les limites de requêtes et les sources
  distantes sans toucher au code
- Permettre une exécution sur NAS/Docker avec un fichier de config monté

Le chemin est configurable via QWMATCHUP_SETTINGS_PATH.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from typing import Any

from src.config import (
    ALLOWED_PERIOD_MONTHS,
    DEFAULT_FORM_LIMIT,
    DEFAULT_H2H_LIMIT,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_PERIOD_MONTHS,
    HUB_API_BASE,
    HUB_API_KEY,
    KTXSTATS_BASE,
    LIST_CACHE_TTL_SECONDS,
    STATS_API_BASE,
    get_repo_root,
)


def get_settings_path() -> str:
    override = os.environ.get("QWMATCHUP_SETTINGS_PATH")
    if override and str(override).strip():
        return str(override).strip()
    return os.path.join(get_repo_root(), "app_settings.json")


@dataclass
class AppSettings:
    # Comparaison
    default_period_months: int = DEFAULT_PERIOD_MONTHS
    h2h_limit: int = DEFAULT_H2H_LIMIT
    form_limit: int = DEFAULT_FORM_LIMIT
    history_limit: int = DEFAULT_HISTORY_LIMIT

    # Réseau
    request_timeout_seconds: int = 12
    list_cache_ttl_seconds: int = LIST_CACHE_TTL_SECONDS

    # Sources (overrides optionnels)
    stats_api_base: str = STATS_API_BASE
    hub_api_base: str = HUB_API_BASE
    hub_api_key: str = HUB_API_KEY
    ktxstats_base: str = KTXSTATS_BASE
    teams_path: str = ""


def _coerce_int(v: Any, default: int) -> int:
    try:
        if v is None or isinstance(v, bool):
            return default
        x = int(v)
        return x
    except (TypeError, ValueError):
        return default


def _coerce_url(v: Any, default: str) -> str:
    s = str(v or "").strip().rstrip("/")
    if s.startswith("http://") or s.startswith("https://"):
        return s
    return default


def load_settings() -> AppSettings:
    path = get_settings_path()
    if not os.path.exists(path):
        return AppSettings()
    try:
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f) or {}
    except (OSError, ValueError):
        return AppSettings()

    if not isinstance(obj, dict):
        return AppSettings()

    s = AppSettings()
    months = _coerce_int(obj.get("default_period_months"), s.default_period_months)
    if months in ALLOWED_PERIOD_MONTHS:
        s.default_period_months = months
    s.h2h_limit = max(1, _coerce_int(obj.get("h2h_limit"), s.h2h_limit))
    s.form_limit = max(1, _coerce_int(obj.get("form_limit"), s.form_limit))
    s.history_limit = max(1, _coerce_int(obj.get("history_limit"), s.history_limit))

    s.request_timeout_seconds = max(1, _coerce_int(obj.get("request_timeout_seconds"), s.request_timeout_seconds))
    # 0 = cache des listes désactivé.
    s.list_cache_ttl_seconds = max(0, _coerce_int(obj.get("list_cache_ttl_seconds"), s.list_cache_ttl_seconds))

    s.stats_api_base = _coerce_url(obj.get("stats_api_base"), s.stats_api_base)
    s.hub_api_base = _coerce_url(obj.get("hub_api_base"), s.hub_api_base)
    s.hub_api_key = str(obj.get("hub_api_key") or s.hub_api_key).strip()
    s.ktxstats_base = _coerce_url(obj.get("ktxstats_base"), s.ktxstats_base)
    s.teams_path = str(obj.get("teams_path") or "").strip()
    return s


def save_settings(settings: AppSettings) -> tuple[bool, str]:
    path = get_settings_path()
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(asdict(settings), f, ensure_ascii=False, indent=2)
        return True, ""
    except OSError as e:
        return False, f"Impossible d'écrire {path}: {e}"
