"""Modèles de données (dataclasses) du projet."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

# Blob ktxstats brut (JSON décodé), jamais modifié.
StatsBlob = Dict[str, Any]

T = TypeVar("T")


class Outcome(str, Enum):
    """Résultat d'une partie du point de vue de "notre" équipe."""

    WIN = "W"
    LOSS = "L"
    DRAW = "D"

    @property
    def ordinal(self) -> int:
        """Ordre de tri : Win=2, Draw=1, Loss=0."""
        return {Outcome.WIN: 2, Outcome.DRAW: 1, Outcome.LOSS: 0}[self]

    @classmethod
    def from_scores(cls, ours: int, theirs: int) -> "Outcome":
        if ours > theirs:
            return cls.WIN
        if ours < theirs:
            return cls.LOSS
        return cls.DRAW


class Side(str, Enum):
    """Côté d'une comparaison (équipe A à gauche, équipe B à droite)."""

    LEFT = "left"
    RIGHT = "right"


class SelectionMode(str, Enum):
    NONE = "none"
    HOVERED = "hovered"
    STICKY = "sticky"


@dataclass(frozen=True)
class MatchResult:
    """Une partie terminée.

    Attributes:
        id: Identifiant opaque de la partie.
        map: Nom de la carte (ex: dm3, e1m2).
        played_at: Date/heure de la partie (UTC).
        our_tag: Tag de l'équipe de référence.
        opponent_tag: Tag de l'adversaire.
        our_score: Frags de l'équipe de référence.
        opponent_score: Frags de l'adversaire.
        result: Résultat (W/L/D) du point de vue de our_tag.
        stats_ref: Référence (sha256 de la démo) des stats détaillées, absente
            pour les anciens enregistrements.
    """
    id: str
    map: str
    played_at: datetime
    our_tag: str
    opponent_tag: str
    our_score: int
    opponent_score: int
    result: Outcome
    stats_ref: Optional[str] = None

    @property
    def frag_diff(self) -> int:
        return self.our_score - self.opponent_score


@dataclass(frozen=True)
class WeaponStat:
    """Statistiques d'une arme pour un joueur ou une équipe."""
    hits: int = 0
    attempts: int = 0
    kills: int = 0
    pickups: int = 0
    drops: int = 0

    @property
    def accuracy(self) -> float:
        """Précision en % (0 si aucun tir)."""
        if self.attempts <= 0:
            return 0.0
        return self.hits / self.attempts * 100.0


@dataclass(frozen=True)
class PlayerGameStat:
    """Performance d'un joueur dans une partie, pour une catégorie donnée.

    Les champs hors catégorie restent à zéro.
    """
    name: str
    team: str
    category: str
    frags: int = 0
    deaths: int = 0
    kills: int = 0
    team_kills: int = 0
    suicides: int = 0
    dmg_given: int = 0
    dmg_taken: int = 0
    to_die: float = 0.0
    weapons: Dict[str, WeaponStat] = field(default_factory=dict)
    items: Dict[str, int] = field(default_factory=dict)

    @property
    def efficiency(self) -> float:
        """Efficacité frags / (frags + morts) en %."""
        total = self.frags + self.deaths
        if total <= 0:
            return 0.0
        return self.frags / total * 100.0


@dataclass(frozen=True)
class TeamAggregate:
    """Agrégat d'équipe pour une catégorie de statistiques.

    Les champs de taux (efficiency, précision des armes) sont recalculés à
    partir des sommes ; to_die est une moyenne par joueur.
    """
    team: str
    category: str
    players: int
    frags: int = 0
    deaths: int = 0
    kills: int = 0
    team_kills: int = 0
    suicides: int = 0
    dmg_given: int = 0
    dmg_taken: int = 0
    efficiency: float = 0.0
    to_die: float = 0.0
    weapons: Dict[str, WeaponStat] = field(default_factory=dict)
    items: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class MapStat:
    """Bilan d'une équipe sur une carte."""
    map: str
    games: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0
    avg_frag_diff: float = 0.0


@dataclass(frozen=True)
class MergedMapRow:
    """Ligne de comparaison par carte (jointure externe A/B)."""
    map: str
    a: Optional[MapStat]
    b: Optional[MapStat]
    label: str

    @property
    def total_games(self) -> int:
        return (self.a.games if self.a else 0) + (self.b.games if self.b else 0)


@dataclass
class OutcomeRates:
    """Bilan victoires/défaites sur un ensemble de parties.

    Attributes:
        wins: Nombre de victoires.
        losses: Nombre de défaites.
        draws: Nombre d'égalités.
        total: Nombre total de parties.
    """
    wins: int = 0
    losses: int = 0
    draws: int = 0
    total: int = 0

    @property
    def win_rate(self) -> Optional[float]:
        """Taux de victoire en % (None si aucune partie)."""
        if self.total <= 0:
            return None
        return self.wins / self.total * 100.0


@dataclass(frozen=True)
class ActivityBucket:
    """Nombre de parties jouées sur une semaine (lundi 00:00 UTC)."""
    week_start: date
    games: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0


@dataclass(frozen=True)
class HeadToHead:
    """Confrontations directes, du point de vue de team_a."""
    team_a: str
    team_b: str
    games: List[MatchResult] = field(default_factory=list)


@dataclass(frozen=True)
class RosterEntry:
    player: str
    games: int = 0


@dataclass(frozen=True)
class OpponentSummary:
    tag: str
    total: int = 0
    wins: int = 0
    losses: int = 0


@dataclass(frozen=True)
class TeamInfo:
    """Métadonnées d'affichage d'une équipe (annuaire en lecture seule)."""
    id: str
    name: str
    tag: str
    logo_url: Optional[str] = None
    tags: tuple[str, ...] = ()

    @property
    def all_tags(self) -> tuple[str, ...]:
        """Tag principal + tags secondaires, sans doublon."""
        seen: list[str] = []
        for t in (self.tag, *self.tags):
            if t and t not in seen:
                seen.append(t)
        return tuple(seen)


class LoadStatus(str, Enum):
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    ABSENT = "absent"
    PRESENT = "present"
    FAILED = "failed"


@dataclass(frozen=True)
class Loadable(Generic[T]):
    """Variante étiquetée pour une donnée distante.

    - NOT_LOADED : jamais demandée
    - LOADING : requête en cours
    - ABSENT : la source a répondu "rien" (état vide valide)
    - PRESENT : donnée disponible
    - FAILED : échec transitoire, peut être relancé
    """
    status: LoadStatus = LoadStatus.NOT_LOADED
    data: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def not_loaded(cls) -> "Loadable[T]":
        return cls()

    @classmethod
    def loading(cls) -> "Loadable[T]":
        return cls(status=LoadStatus.LOADING)

    @classmethod
    def absent(cls) -> "Loadable[T]":
        return cls(status=LoadStatus.ABSENT)

    @classmethod
    def present(cls, data: T) -> "Loadable[T]":
        return cls(status=LoadStatus.PRESENT, data=data)

    @classmethod
    def failed(cls, error: str) -> "Loadable[T]":
        return cls(status=LoadStatus.FAILED, error=error)

    @property
    def is_present(self) -> bool:
        return self.status is LoadStatus.PRESENT

    @property
    def needs_fetch(self) -> bool:
        """True si la donnée doit être (re)demandée."""
        return self.status in (LoadStatus.NOT_LOADED, LoadStatus.FAILED)


@dataclass(frozen=True)
class SelectionState:
    """État de sélection d'un panneau (aperçu au survol ou épinglé)."""
    mode: SelectionMode = SelectionMode.NONE
    side: Optional[Side] = None
    target_id: Optional[str] = None
    stats_loading: bool = False
    stats_blob: Optional[StatsBlob] = None
    stats_error: Optional[str] = None

    @property
    def key(self) -> Optional[tuple[Optional[Side], str]]:
        if self.target_id is None:
            return None
        return (self.side, self.target_id)


@dataclass(frozen=True)
class StatsCacheEntry:
    key: str
    blob: StatsBlob
    fetched_at: float
