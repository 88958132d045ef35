"""Filtrage et tri des listes de résultats."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from src.models import MatchResult


class SortColumn(str, Enum):
    DATE = "date"
    MAP = "map"
    OUR_SCORE = "our_score"
    OPPONENT_SCORE = "opponent_score"
    OPPONENT = "opponent"
    RESULT = "result"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


_SORT_KEYS: Dict[SortColumn, Callable[[MatchResult], Any]] = {
    SortColumn.DATE: lambda r: r.played_at,
    SortColumn.MAP: lambda r: str(r.map).casefold(),
    SortColumn.OUR_SCORE: lambda r: r.our_score,
    SortColumn.OPPONENT_SCORE: lambda r: r.opponent_score,
    SortColumn.OPPONENT: lambda r: str(r.opponent_tag).casefold(),
    # Victoire > Égalité > Défaite
    SortColumn.RESULT: lambda r: r.result.ordinal,
}


@dataclass(frozen=True)
class SortState:
    """Tri courant d'une liste (par défaut : date décroissante)."""
    column: SortColumn = SortColumn.DATE
    direction: SortDirection = SortDirection.DESC

    def toggled(self, column: SortColumn | str) -> "SortState":
        """Nouvel état après un clic sur l'en-tête `column`.

        Même colonne : inverse le sens. Nouvelle colonne : décroissant.
        """
        col = SortColumn(column)
        if col == self.column:
            flipped = SortDirection.ASC if self.direction == SortDirection.DESC else SortDirection.DESC
            return SortState(col, flipped)
        return SortState(col, SortDirection.DESC)


def filter_results(
    results: Iterable[MatchResult],
    map: Optional[str] = None,
    opponent: Optional[str] = None,
) -> List[MatchResult]:
    """Garde les parties correspondant exactement aux filtres fournis.

    Un filtre à None (ou vide) n'impose aucune contrainte.
    """
    out = []
    for r in results:
        if map and r.map != map:
            continue
        if opponent and r.opponent_tag != opponent:
            continue
        out.append(r)
    return out


def sort_results(
    results: Iterable[MatchResult],
    column: SortColumn | str = SortColumn.DATE,
    direction: SortDirection | str = SortDirection.DESC,
) -> List[MatchResult]:
    """Trie une liste de parties sans modifier l'entrée.

    Le tri est stable : à clé égale, l'ordre d'origine est conservé, dans
    les deux sens.
    """
    key = _SORT_KEYS[SortColumn(column)]
    reverse = SortDirection(direction) == SortDirection.DESC
    return sorted(results, key=key, reverse=reverse)


def filter_options(results: Iterable[MatchResult]) -> Dict[str, List[str]]:
    """Valeurs distinctes proposées dans les sélecteurs de filtre.

    Returns:
        {"maps": [...], "opponents": [...]} triés alphabétiquement.
    """
    maps: set[str] = set()
    opponents: set[str] = set()
    for r in results:
        if r.map:
            maps.add(r.map)
        if r.opponent_tag:
            opponents.add(r.opponent_tag)
    return {
        "maps": sorted(maps, key=str.lower),
        "opponents": sorted(opponents, key=str.lower),
    }
