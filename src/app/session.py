"""Session de comparaison de deux équipes.

La session porte l'équipe A, l'adversaire B, la période et le sous-mode
actif (confrontations directes, forme, cartes). Chaque sous-mode charge ses
données à la demande ; un changement d'équipe ou de période incrémente une
génération et toute réponse d'une génération antérieure est ignorée.

Les blobs ktxstats (StatsCache) survivent aux changements : ils sont
adressés par contenu et ne dépendent pas de la session.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from src.analysis.activity import bucket_weekly_activity
from src.analysis.aggregation import team_aggregates
from src.analysis.filters import SortColumn, SortState, filter_options, filter_results, sort_results
from src.analysis.maps import compute_map_stats, merge_map_stats
from src.analysis.stats import compute_outcome_rates
from src.api.cache import StatsCache
from src.app.selection import SelectionController
from src.db.teams import TeamDirectory
from src.models import (
    ActivityBucket,
    Loadable,
    LoadStatus,
    MapStat,
    MatchResult,
    MergedMapRow,
    OutcomeRates,
    SelectionState,
    Side,
    TeamAggregate,
)
from src.ui.settings import AppSettings

logger = logging.getLogger(__name__)


class SubMode(str, Enum):
    H2H = "h2h"
    FORM = "form"
    MAPS = "maps"


@dataclass(frozen=True)
class ComparisonSession:
    """Paramètres courants de la comparaison."""
    team_a: str = ""
    team_b: str = ""
    period_months: int = 3
    sub_mode: SubMode = SubMode.H2H


# Emplacements de données : (type, côté). Le panneau h2h n'a pas de côté.
Slot = tuple[str, Optional[Side]]

def _check_period(period_months: Any) -> int:
    if isinstance(period_months, bool) or not isinstance(period_months, int) or period_months <= 0:
        raise ValueError(f"Période invalide: {period_months!r} (entier positif attendu)")
    return period_months


class ComparisonSessionController:
    """Orchestration des requêtes, caches et sélections d'une comparaison.

    Args:
        client: Client des API (StatsApiClient ou équivalent).
        stats_cache: Cache des stats détaillées (partagé si fourni).
        directory: Annuaire des équipes pour les libellés.
        settings: Paramètres (période par défaut, limites).
    """

    def __init__(
        self,
        client: Any,
        *,
        stats_cache: StatsCache | None = None,
        directory: TeamDirectory | None = None,
        settings: AppSettings | None = None,
    ) -> None:
        self.client = client
        self.settings = settings or AppSettings()
        self.stats_cache = stats_cache if stats_cache is not None else StatsCache()
        self.directory = directory if directory is not None else TeamDirectory(path=self.settings.teams_path or None)

        self._session = ComparisonSession(period_months=int(self.settings.default_period_months))
        self._generation = 0
        self._data: Dict[Slot, Loadable] = {}
        self._filters: Dict[Optional[Side], Dict[str, Optional[str]]] = {}
        self._sorts: Dict[Optional[Side], SortState] = {}
        self._labels: Dict[str, str] = {}

        fetch = self.client.get_game_stats
        self._selections: Dict[Optional[Side], SelectionController] = {
            None: SelectionController(self.stats_cache, fetch, side=None),
            Side.LEFT: SelectionController(self.stats_cache, fetch, side=Side.LEFT),
            Side.RIGHT: SelectionController(self.stats_cache, fetch, side=Side.RIGHT),
        }

    # ------------------------------------------------------------------
    # Accesseurs
    # ------------------------------------------------------------------

    @property
    def session(self) -> ComparisonSession:
        return self._session

    @property
    def generation(self) -> int:
        return self._generation

    def selection_controller(self, side: Optional[Side] = None) -> SelectionController:
        return self._selections[side]

    def selection_state(self, side: Optional[Side] = None) -> SelectionState:
        return self._selections[side].state

    def load_state(self, kind: str, side: Optional[Side] = None) -> Loadable:
        """État de chargement d'une donnée ("h2h", "form", "maps", "history", "roster", "opponents")."""
        return self._data.get((kind, side), Loadable.not_loaded())

    def _panel_results(self, side: Optional[Side]) -> List[MatchResult]:
        kind = "h2h" if side is None else "form"
        state = self.load_state(kind, side)
        return list(state.data or []) if state.is_present else []

    def visible_results(self, side: Optional[Side] = None) -> List[MatchResult]:
        """Liste affichée d'un panneau : filtrée puis triée."""
        f = self._filters.get(side, {})
        rows = filter_results(self._panel_results(side), map=f.get("map"), opponent=f.get("opponent"))
        sort = self.sort_state(side)
        return sort_results(rows, sort.column, sort.direction)

    def sort_state(self, side: Optional[Side] = None) -> SortState:
        return self._sorts.get(side, SortState())

    def active_filters(self, side: Optional[Side] = None) -> Dict[str, Optional[str]]:
        return dict(self._filters.get(side, {}))

    def filter_options(self, side: Optional[Side] = None) -> Dict[str, List[str]]:
        return filter_options(self._panel_results(side))

    def summary(self, side: Optional[Side] = None) -> OutcomeRates:
        """Bilan des parties visibles du panneau."""
        return compute_outcome_rates(self.visible_results(side))

    def team_aggregates(self, category: str, side: Optional[Side] = None) -> Dict[str, Optional[TeamAggregate]]:
        """Agrégats par équipe de la partie affichée dans le panneau."""
        blob = self.selection_state(side).stats_blob
        if blob is None:
            return {}
        return team_aggregates(blob, category)

    def merged_maps(self) -> List[MergedMapRow]:
        maps_a = self.load_state("maps", Side.LEFT)
        maps_b = self.load_state("maps", Side.RIGHT)
        if not (maps_a.is_present or maps_b.is_present):
            return []
        return merge_map_stats(
            maps_a.data or [],
            maps_b.data or [],
            self._session.team_a,
            self._session.team_b,
        )

    def history_map_stats(self, side: Side = Side.LEFT) -> List[MapStat]:
        """Bilan par carte recalculé depuis l'historique du hub."""
        state = self.load_state("history", side)
        return compute_map_stats(state.data or []) if state.is_present else []

    def weekly_activity(self, side: Side = Side.LEFT) -> List[ActivityBucket]:
        state = self.load_state("history", side)
        # Aucune partie : semaines à zéro ; pas encore chargé : rien.
        if state.status not in (LoadStatus.PRESENT, LoadStatus.ABSENT):
            return []
        return bucket_weekly_activity(state.data or [], self._session.period_months)

    def team_label(self, tag: str) -> str:
        """Nom d'affichage d'une équipe (mémoïsé pour la session)."""
        key = str(tag or "").strip()
        if not key:
            return ""
        if key not in self._labels:
            team = self.directory.get(key)
            self._labels[key] = team.name if team is not None else key
        return self._labels[key]

    # ------------------------------------------------------------------
    # Commandes de session
    # ------------------------------------------------------------------

    async def select_team_a(self, tag: str) -> None:
        t = str(tag or "").strip()
        if t == self._session.team_a:
            return
        team_b = self._session.team_b
        # A et B identiques : l'adversaire est retiré.
        if team_b and team_b.casefold() == t.casefold():
            team_b = ""
        self._session = replace(self._session, team_a=t, team_b=team_b)
        logger.info("Équipe A: %s", t or "-")
        self._invalidate()
        await self._fetch_active()

    async def select_opponent(self, tag: str | None) -> None:
        t = str(tag or "").strip()
        if t and t.casefold() == self._session.team_a.casefold():
            t = ""
        if t == self._session.team_b:
            return
        self._session = replace(self._session, team_b=t)
        logger.info("Adversaire: %s", t or "-")
        self._invalidate()
        await self._fetch_active()

    async def change_period(self, period_months: int) -> None:
        months = _check_period(period_months)
        if months == self._session.period_months:
            return
        self._session = replace(self._session, period_months=months)
        logger.info("Période: %d mois", months)
        self._invalidate()
        await self._fetch_active()

    async def switch_sub_mode(self, sub_mode: SubMode | str) -> None:
        mode = SubMode(sub_mode)
        self._session = replace(self._session, sub_mode=mode)
        await self._fetch_active()

    async def retry(self) -> None:
        """Relance uniquement les moitiés en échec (ou jamais chargées) du sous-mode actif."""
        await self._fetch_active()

    async def load_rosters(self) -> None:
        await self._fetch_slots(self._side_slots("roster"))

    async def load_opponents(self) -> None:
        await self._fetch_slots(self._side_slots("opponents"))

    # ------------------------------------------------------------------
    # Commandes de panneau
    # ------------------------------------------------------------------

    def hover_result(self, side: Optional[Side], result_id: str) -> Optional[asyncio.Task]:
        return self._selections[side].hover_result(result_id)

    def clear_hover(self, side: Optional[Side], result_id: str) -> None:
        self._selections[side].clear_hover(result_id)

    def select_result(self, side: Optional[Side], result_id: str) -> Optional[asyncio.Task]:
        return self._selections[side].select_result(result_id)

    def filter_by_map(self, side: Optional[Side], map_name: Optional[str]) -> None:
        self._filters.setdefault(side, {})["map"] = map_name or None

    def filter_by_opponent(self, side: Optional[Side], opponent: Optional[str]) -> None:
        self._filters.setdefault(side, {})["opponent"] = opponent or None

    def sort_by_column(self, side: Optional[Side], column: SortColumn | str) -> SortState:
        state = self.sort_state(side).toggled(column)
        self._sorts[side] = state
        return state

    # ------------------------------------------------------------------
    # Chargement
    # ------------------------------------------------------------------

    def _invalidate(self) -> None:
        self._generation += 1
        for ctl in self._selections.values():
            ctl.reset()
        self._data.clear()
        # Le tri est conservé, pas les filtres (valeurs propres aux anciennes listes).
        self._filters.clear()

    def _side_slots(self, kind: str) -> List[Slot]:
        out: List[Slot] = []
        if self._session.team_a:
            out.append((kind, Side.LEFT))
        if self._session.team_b:
            out.append((kind, Side.RIGHT))
        return out

    def _active_slots(self) -> List[Slot]:
        mode = self._session.sub_mode
        if mode == SubMode.H2H:
            if self._session.team_a and self._session.team_b:
                return [("h2h", None)]
            return []
        if mode == SubMode.FORM:
            return self._side_slots("form")
        return self._side_slots("maps") + self._side_slots("history")

    def _tag_for(self, side: Optional[Side]) -> str:
        return self._session.team_b if side == Side.RIGHT else self._session.team_a

    def _query_tags(self, tag: str) -> str | List[str]:
        """Tags envoyés aux API : tous les tags connus de l'équipe, sinon le tag saisi."""
        team = self.directory.get(tag)
        if team is None or len(team.all_tags) < 2:
            return tag
        return list(team.all_tags)

    def _request(self, slot: Slot) -> Callable[[], Awaitable[Any]]:
        kind, side = slot
        months = self._session.period_months
        tag = self._query_tags(self._tag_for(side))
        c = self.client
        if kind == "h2h":
            team_a = self._query_tags(self._session.team_a)
            team_b = self._query_tags(self._session.team_b)
            return lambda: c.get_head_to_head(team_a, team_b, months=months)
        if kind == "form":
            return lambda: c.get_form(tag, months=months)
        if kind == "maps":
            return lambda: c.get_maps(tag, months=months)
        if kind == "history":
            return lambda: c.get_match_history(tag, months)
        if kind == "roster":
            return lambda: c.get_roster(tag, months=months)
        if kind == "opponents":
            return lambda: c.get_opponents(tag, months=months)
        raise ValueError(f"Donnée inconnue: {kind!r}")

    async def _fetch_active(self) -> None:
        await self._fetch_slots(self._active_slots())

    async def _fetch_slots(self, slots: List[Slot]) -> None:
        todo = [s for s in slots if self.load_state(*s).needs_fetch]
        if not todo:
            return
        gen = self._generation
        for s in todo:
            self._data[s] = Loadable.loading()
        await asyncio.gather(*(self._load_slot(s, self._request(s), gen) for s in todo))

    async def _load_slot(self, slot: Slot, request: Callable[[], Awaitable[Any]], gen: int) -> None:
        try:
            data = await request()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if gen != self._generation:
                logger.debug("Échec obsolète ignoré (%s, génération %d)", slot, gen)
                return
            logger.warning("Échec du chargement %s: %s", slot, e)
            self._data[slot] = Loadable.failed(str(e))
            return

        if gen != self._generation:
            logger.debug("Réponse obsolète ignorée (%s, génération %d)", slot, gen)
            return

        kind, side = slot
        if kind == "h2h":
            data = list(getattr(data, "games", data) or [])
        else:
            data = list(data or [])

        if kind in ("h2h", "form"):
            self._selections[side].set_rows(data)

        self._data[slot] = Loadable.present(data) if data else Loadable.absent()
