"""Caches mémoire des réponses distantes.

Deux niveaux :
1. StatsCache : blobs ktxstats adressés par contenu (sha256 de la démo).
   Immuables, donc jamais invalidés pendant la session.
2. ResponseCache : réponses des listes (h2h, forme, cartes...) avec TTL court,
   la source évoluant au fil des parties jouées.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Hashable

from src.config import LIST_CACHE_TTL_SECONDS
from src.models import StatsBlob, StatsCacheEntry

logger = logging.getLogger(__name__)

FetchFn = Callable[[str], Awaitable[StatsBlob]]


class StatsCache:
    """Mémoïsation des stats détaillées, clé = hash de contenu du match.

    Les appels concurrents pour une même clé partagent une seule requête
    en vol. Un échec ne peuple pas le cache : l'appel suivant retente.
    """

    def __init__(self) -> None:
        self._entries: dict[str, StatsCacheEntry] = {}
        self._inflight: dict[str, asyncio.Task] = {}
        # Incrémenté par clear() : une requête antérieure ne repeuple pas le cache.
        self._epoch = 0
        self.fetch_count = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> StatsBlob | None:
        entry = self._entries.get(key)
        return entry.blob if entry is not None else None

    def entries(self) -> list[StatsCacheEntry]:
        return list(self._entries.values())

    async def get_or_fetch(self, key: str, fetch_fn: FetchFn) -> StatsBlob:
        """Retourne le blob en cache, ou le récupère via fetch_fn.

        Args:
            key: Hash de contenu (référence de stats).
            fetch_fn: Coroutine de récupération, appelée au plus une fois
                par clé tant qu'une requête est en vol.
        """
        entry = self._entries.get(key)
        if entry is not None:
            return entry.blob

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(key, fetch_fn, self._epoch))
            self._inflight[key] = task
        # shield : l'annulation d'un appelant ne doit pas annuler les autres.
        return await asyncio.shield(task)

    async def _fetch(self, key: str, fetch_fn: FetchFn, epoch: int) -> StatsBlob:
        self.fetch_count += 1
        task = asyncio.current_task()
        logger.debug("Récupération des stats détaillées %s", key)
        try:
            blob = await fetch_fn(key)
            if epoch == self._epoch:
                self._entries[key] = StatsCacheEntry(key=key, blob=blob, fetched_at=time.time())
            return blob
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]

    def clear(self) -> None:
        """Vide le cache (réinitialisation complète de la session uniquement)."""
        self._epoch += 1
        self._entries.clear()
        self._inflight.clear()


class ResponseCache:
    """Cache TTL des réponses de listes, clé = paramètres normalisés."""

    def __init__(self, ttl_seconds: float = LIST_CACHE_TTL_SECONDS, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._data: dict[Hashable, tuple[float, Any]] = {}

    def get(self, key: Hashable) -> Any | None:
        hit = self._data.get(key)
        if hit is None:
            return None
        stored_at, value = hit
        if self.ttl_seconds <= 0 or self._clock() - stored_at >= self.ttl_seconds:
            self._data.pop(key, None)
            return None
        return value

    def set(self, key: Hashable, value: Any) -> None:
        self._data[key] = (self._clock(), value)

    def clear(self) -> None:
        self._data.clear()
