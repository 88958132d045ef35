"""Client des sources de statistiques QuakeWorld (lecture seule).

Trois sources :
- API stats (qw-api) : confrontations, forme, cartes, roster, adversaires.
- Hub (Supabase) : historique brut des parties 4on4 d'une équipe.
- ktxstats : stats détaillées par joueur d'une partie (blob immuable).

Les réponses des listes passent par un cache TTL court ; les blobs ktxstats
sont mis en cache par la session (StatsCache), pas ici.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping
from urllib.parse import quote

import aiohttp

from src.analysis.activity import period_start
from src.api.cache import ResponseCache
from src.config import HUB_GAMES_URL
from src.db.parsers import (
    normalize_tags,
    parse_form,
    parse_head_to_head,
    parse_hub_match,
    parse_maps,
    parse_opponents,
    parse_roster,
)
from src.models import HeadToHead, MapStat, MatchResult, OpponentSummary, RosterEntry, StatsBlob
from src.ui.settings import AppSettings

logger = logging.getLogger(__name__)

Tags = str | Iterable[str]


class StatsApiError(RuntimeError):
    """Échec transitoire d'une requête distante (réseau ou statut HTTP)."""

    def __init__(self, message: str, *, status: int | None = None, url: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.url = url


class StatsApiClient:
    """Accès asynchrone aux API de statistiques.

    Une session aiohttp est ouverte par requête : le client peut donc être
    utilisé depuis des boucles asyncio successives (reruns Streamlit).
    """

    def __init__(self, settings: AppSettings | None = None, *, response_cache: ResponseCache | None = None) -> None:
        self.settings = settings or AppSettings()
        self.response_cache = response_cache or ResponseCache(self.settings.list_cache_ttl_seconds)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _get_json(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        timeout = aiohttp.ClientTimeout(total=float(self.settings.request_timeout_seconds))
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, params=params, headers=headers) as resp:
                    if resp.status != 200:
                        raise StatsApiError(f"Erreur API {resp.status} sur {url}", status=resp.status, url=url)
                    return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise StatsApiError(f"Échec réseau sur {url}: {e}", url=url) from e

    async def _get_cached(self, key: tuple, url: str, params: Mapping[str, Any], headers: Mapping[str, str] | None = None) -> Any:
        cached = self.response_cache.get(key)
        if cached is not None:
            return cached
        data = await self._get_json(url, params=params, headers=headers)
        self.response_cache.set(key, data)
        return data

    def clear_cache(self) -> None:
        self.response_cache.clear()

    # ------------------------------------------------------------------
    # API stats
    # ------------------------------------------------------------------

    async def get_head_to_head(
        self,
        tag_a: Tags,
        tag_b: Tags,
        *,
        months: int,
        limit: int | None = None,
        map: str | None = None,
    ) -> HeadToHead:
        """Confrontations directes entre deux équipes (point de vue de A)."""
        a = normalize_tags(tag_a)
        b = normalize_tags(tag_b)
        lim = int(limit or self.settings.h2h_limit)
        params: dict[str, Any] = {"teamA": a, "teamB": b, "months": int(months), "limit": lim}
        if map:
            params["map"] = map
        # Clé dans l'ordre de la requête : la réponse est orientée A -> B.
        key = ("h2h", a, b, map or "", int(months), lim)
        data = await self._get_cached(key, f"{self.settings.stats_api_base}/api/h2h", params)
        return parse_head_to_head(data, a, b)

    async def get_form(self, tag: Tags, *, months: int, limit: int | None = None, map: str | None = None) -> list[MatchResult]:
        """Derniers résultats d'une équipe, tous adversaires confondus."""
        t = normalize_tags(tag)
        lim = int(limit or self.settings.form_limit)
        params: dict[str, Any] = {"team": t, "months": int(months), "limit": lim}
        if map:
            params["map"] = map
        key = ("form", t, map or "", int(months), lim)
        data = await self._get_cached(key, f"{self.settings.stats_api_base}/api/form", params)
        return parse_form(data, t)

    async def get_maps(self, tag: Tags, *, months: int, vs_team: Tags | None = None) -> list[MapStat]:
        """Bilan par carte d'une équipe (optionnellement contre un adversaire)."""
        t = normalize_tags(tag)
        vs = normalize_tags(vs_team)
        params: dict[str, Any] = {"team": t, "months": int(months)}
        if vs:
            params["vsTeam"] = vs
        key = ("maps", t, vs, int(months))
        data = await self._get_cached(key, f"{self.settings.stats_api_base}/api/maps", params)
        return parse_maps(data)

    async def get_roster(self, tag: Tags, *, months: int) -> list[RosterEntry]:
        t = normalize_tags(tag)
        params = {"team": t, "months": int(months)}
        data = await self._get_cached(("roster", t, int(months)), f"{self.settings.stats_api_base}/api/roster", params)
        return parse_roster(data)

    async def get_opponents(self, tag: Tags, *, months: int) -> list[OpponentSummary]:
        t = normalize_tags(tag)
        params = {"team": t, "months": int(months)}
        data = await self._get_cached(("opponents", t, int(months)), f"{self.settings.stats_api_base}/api/opponents", params)
        return parse_opponents(data)

    # ------------------------------------------------------------------
    # Hub
    # ------------------------------------------------------------------

    async def get_match_history(self, tag: Tags, period_months: int, *, limit: int | None = None) -> list[MatchResult]:
        """Parties 4on4 d'une équipe sur la période, de la plus récente à la plus ancienne.

        Le hub ne filtre que sur un nom d'équipe : pour une équipe à plusieurs
        tags, chaque tag est interrogé et les résultats sont fusionnés.
        """
        tags = [t for t in normalize_tags(tag).split(",") if t]
        if not tags:
            return []
        lim = int(limit or self.settings.history_limit)
        batches = await asyncio.gather(*(self._get_hub_history(t, period_months, lim) for t in tags))

        by_id: dict[str, MatchResult] = {}
        for batch in batches:
            for m in batch:
                by_id.setdefault(m.id, m)
        out = sorted(by_id.values(), key=lambda m: m.played_at, reverse=True)
        return out[:lim]

    async def _get_hub_history(self, api_tag: str, period_months: int, lim: int) -> list[MatchResult]:
        since = period_start(period_months).strftime("%Y-%m-%d")
        params = {
            "select": "id,timestamp,map,teams,demo_sha256",
            "mode": "eq.4on4",
            "team_names": f"cs.{{{api_tag}}}",
            "timestamp": f"gte.{since}",
            "order": "timestamp.desc",
            "limit": str(lim),
        }
        headers = {"apikey": self.settings.hub_api_key} if self.settings.hub_api_key else None
        key = ("history", api_tag, int(period_months), lim)
        rows = await self._get_cached(key, self.settings.hub_api_base, params, headers=headers)
        out: list[MatchResult] = []
        for raw in rows if isinstance(rows, list) else []:
            m = parse_hub_match(raw, api_tag)
            if m is not None:
                out.append(m)
        return out

    # ------------------------------------------------------------------
    # ktxstats
    # ------------------------------------------------------------------

    def game_stats_url(self, stats_ref: str) -> str:
        ref = str(stats_ref or "").strip()
        return f"{self.settings.ktxstats_base}/{ref[:3]}/{ref}.mvd.ktxstats.json"

    async def get_game_stats(self, stats_ref: str) -> StatsBlob:
        """Stats détaillées d'une partie (blob ktxstats)."""
        if not str(stats_ref or "").strip():
            raise ValueError("Référence de stats vide.")
        data = await self._get_json(self.game_stats_url(stats_ref))
        if not isinstance(data, dict):
            raise StatsApiError(f"Blob ktxstats invalide pour {stats_ref}", url=self.game_stats_url(stats_ref))
        return data


def hub_team_url(tag: str) -> str:
    """URL du hub filtrée sur les parties 4on4 d'une équipe."""
    return f"{HUB_GAMES_URL}/?mode=4on4&team={quote(str(tag or ''))}"
