"""Sélection d'une partie dans une liste de résultats.

Un panneau (liste de résultats) a trois états :
- NONE : rien n'est affiché
- HOVERED : aperçu de la ligne survolée
- STICKY : ligne épinglée par un clic ; le survol ne change plus rien

Les stats détaillées sont récupérées en tâche de fond via le StatsCache.
Une requête n'est jamais annulée : à sa résolution, son résultat n'est
appliqué que si la clé (côté, id) affichée est toujours la même.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Awaitable, Callable, Iterable, Optional

from src.api.cache import StatsCache
from src.models import MatchResult, SelectionMode, SelectionState, Side, StatsBlob

logger = logging.getLogger(__name__)

Listener = Callable[[SelectionState], None]


class SelectionController:
    """Machine à états de sélection d'un panneau.

    Args:
        stats_cache: Cache partagé des blobs ktxstats.
        fetch_fn: Coroutine de récupération d'un blob par référence.
        side: Côté du panneau (None pour un panneau unique).
    """

    def __init__(
        self,
        stats_cache: StatsCache,
        fetch_fn: Callable[[str], Awaitable[StatsBlob]],
        side: Optional[Side] = None,
    ) -> None:
        self.stats_cache = stats_cache
        self.fetch_fn = fetch_fn
        self.side = side
        self._state = SelectionState(side=side)
        self._rows: dict[str, MatchResult] = {}
        # Ligne sous le pointeur, suivie même quand une ligne est épinglée.
        self._pointer: Optional[str] = None
        self._epoch = 0
        self._listeners: list[Listener] = []

    @property
    def state(self) -> SelectionState:
        return self._state

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        """Abonne un callback aux changements d'état.

        Returns:
            Fonction de désabonnement.
        """
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    def _set_state(self, state: SelectionState) -> None:
        self._state = state
        for cb in list(self._listeners):
            cb(state)

    def set_rows(self, rows: Iterable[MatchResult]) -> None:
        """Déclare les lignes du panneau (pour retrouver leur référence de stats)."""
        self._rows = {r.id: r for r in rows}

    def reset(self) -> None:
        """Retour à NONE ; les requêtes en vol deviennent obsolètes."""
        self._epoch += 1
        self._pointer = None
        self._set_state(SelectionState(side=self.side))

    # ------------------------------------------------------------------
    # Commandes
    # ------------------------------------------------------------------

    def hover_result(self, result_id: str) -> Optional[asyncio.Task]:
        self._pointer = result_id
        if self._state.mode == SelectionMode.STICKY:
            return None
        if self._state.mode == SelectionMode.HOVERED and self._state.target_id == result_id:
            return None
        return self._show(SelectionMode.HOVERED, result_id)

    def clear_hover(self, result_id: str) -> None:
        if self._pointer == result_id:
            self._pointer = None
        if self._state.mode == SelectionMode.HOVERED and self._state.target_id == result_id:
            self._set_state(SelectionState(side=self.side))

    def select_result(self, result_id: str) -> Optional[asyncio.Task]:
        """Épingle une ligne, ou la désépingle si elle l'est déjà.

        Au désépinglage, l'aperçu revient sur la ligne sous le pointeur.
        """
        if self._state.mode == SelectionMode.STICKY and self._state.target_id == result_id:
            self._set_state(SelectionState(side=self.side))
            if self._pointer is not None:
                return self._show(SelectionMode.HOVERED, self._pointer)
            return None
        return self._show(SelectionMode.STICKY, result_id)

    # ------------------------------------------------------------------
    # Récupération des stats
    # ------------------------------------------------------------------

    def _show(self, mode: SelectionMode, result_id: str) -> Optional[asyncio.Task]:
        row = self._rows.get(result_id)
        ref = row.stats_ref if row is not None else None
        base = SelectionState(mode=mode, side=self.side, target_id=result_id)

        # Pas de stats détaillées (anciens enregistrements) : pas une erreur.
        if not ref:
            self._set_state(base)
            return None

        blob = self.stats_cache.get(ref)
        if blob is not None:
            self._set_state(replace(base, stats_blob=blob))
            return None

        # Seul l'épinglage affiche un indicateur de chargement.
        self._set_state(replace(base, stats_loading=mode == SelectionMode.STICKY))
        return asyncio.ensure_future(self._load(ref, (self.side, result_id), self._epoch))

    def _is_current(self, key: tuple, epoch: int) -> bool:
        return epoch == self._epoch and self._state.key == key

    async def _load(self, ref: str, key: tuple, epoch: int) -> None:
        try:
            blob = await self.stats_cache.get_or_fetch(ref, self.fetch_fn)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not self._is_current(key, epoch):
                logger.debug("Échec obsolète ignoré pour %s: %s", key, e)
                return
            logger.warning("Stats détaillées indisponibles pour %s: %s", ref, e)
            self._set_state(replace(self._state, stats_loading=False, stats_error=str(e)))
            return

        if not self._is_current(key, epoch):
            logger.debug("Stats obsolètes ignorées pour %s", key)
            return
        self._set_state(replace(self._state, stats_blob=blob, stats_loading=False, stats_error=None))
