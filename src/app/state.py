"""Gestion centralisée du state de l'application.

Ce module centralise :
- Un contrôleur de comparaison par session navigateur (st.session_state)
- Le pont synchrone vers le code asyncio (reruns Streamlit)
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from typing import Any, Awaitable, Optional, TypeVar

import streamlit as st

from src.api.cache import StatsCache
from src.api.client import StatsApiClient
from src.app.session import ComparisonSessionController
from src.db.teams import TeamDirectory
from src.ui.settings import AppSettings, load_settings

T = TypeVar("T")

_CONTROLLER_KEY = "matchup_controller"
_SETTINGS_KEY = "app_settings"


def run_sync(coro: Awaitable[T], *, timeout_seconds: float = 60.0) -> T:
    """Exécute une coroutine depuis du code synchrone.

    Certains environnements ont déjà une boucle active : on bascule alors
    sur un thread dédié.
    """
    try:
        return asyncio.run(coro)
    except RuntimeError as e:
        if "asyncio.run() cannot be called" not in str(e):
            raise
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as ex:
            fut = ex.submit(lambda: asyncio.run(coro))
            return fut.result(timeout=timeout_seconds)


async def settle(task: Optional[asyncio.Task]) -> None:
    """Attend la fin d'une tâche de sélection (si une requête a été lancée)."""
    if task is not None:
        await task


def get_settings() -> AppSettings:
    if _SETTINGS_KEY not in st.session_state:
        st.session_state[_SETTINGS_KEY] = load_settings()
    return st.session_state[_SETTINGS_KEY]


def build_controller(settings: AppSettings, *, client: Any = None) -> ComparisonSessionController:
    """Construit un contrôleur complet à partir des paramètres."""
    return ComparisonSessionController(
        client if client is not None else StatsApiClient(settings),
        stats_cache=StatsCache(),
        directory=TeamDirectory(path=settings.teams_path or None),
        settings=settings,
    )


def get_controller() -> ComparisonSessionController:
    """Contrôleur de la session navigateur courante (créé au premier appel)."""
    ctl = st.session_state.get(_CONTROLLER_KEY)
    if ctl is None:
        ctl = build_controller(get_settings())
        st.session_state[_CONTROLLER_KEY] = ctl
    return ctl


def reset_controller() -> None:
    """Oublie le contrôleur (nouvelle session complète, caches compris)."""
    st.session_state.pop(_CONTROLLER_KEY, None)
    st.session_state.pop(_SETTINGS_KEY, None)
