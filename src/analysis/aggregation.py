"""Agrégation des statistiques détaillées (blobs ktxstats).

Deux étapes :
1. extract_player_stat : normalise un joueur brut pour une catégorie
   (performance, weapons, resources).
2. aggregate_team : combine les joueurs d'une équipe en une ligne.

Règle d'agrégation : les champs de taux (efficacité, précision) sont
recalculés à partir des numérateurs et dénominateurs sommés sur l'équipe,
jamais moyennés joueur par joueur. to_die est une vraie moyenne par joueur.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

import pandas as pd

from src.config import ITEMS, STAT_CATEGORIES, WEAPONS
from src.db.parsers import coerce_int, coerce_number, qw_to_ascii
from src.models import PlayerGameStat, StatsBlob, TeamAggregate, WeaponStat


def _section(raw: Any, key: str) -> dict:
    v = raw.get(key) if isinstance(raw, dict) else None
    return v if isinstance(v, dict) else {}


def _check_category(category: str) -> str:
    if category not in STAT_CATEGORIES:
        raise ValueError(f"Catégorie inconnue: {category!r} (attendu: {', '.join(STAT_CATEGORIES)})")
    return category


def participating_players(blob: StatsBlob | None) -> List[dict]:
    """Joueurs réellement présents dans la partie.

    Un ping à 0 signale un slot fictif (non-participant) : ces joueurs sont
    exclus avant toute extraction.
    """
    if not isinstance(blob, dict):
        return []
    out = []
    for p in blob.get("players") or []:
        if not isinstance(p, dict):
            continue
        if coerce_int(p.get("ping")) == 0:
            continue
        out.append(p)
    return out


def _extract_weapon(raw_weapon: dict) -> WeaponStat:
    acc = _section(raw_weapon, "acc")
    kills = _section(raw_weapon, "kills")
    pickups = _section(raw_weapon, "pickups")
    enemy_kills = kills.get("enemy")
    return WeaponStat(
        hits=coerce_int(acc.get("hits")),
        attempts=coerce_int(acc.get("attacks")),
        kills=coerce_int(enemy_kills if enemy_kills is not None else kills.get("total")),
        pickups=coerce_int(pickups.get("taken")),
        drops=coerce_int(pickups.get("dropped")),
    )


def extract_player_stat(raw_player: dict, category: str) -> PlayerGameStat:
    """Extrait la ligne normalisée d'un joueur pour une catégorie.

    Les champs absents du blob valent 0 (bots, observateurs, blobs partiels).

    Args:
        raw_player: Entrée brute de blob["players"].
        category: "performance", "weapons" ou "resources".

    Returns:
        PlayerGameStat ; seuls les champs de la catégorie sont renseignés.
    """
    _check_category(category)
    raw = raw_player if isinstance(raw_player, dict) else {}
    name = qw_to_ascii(str(raw.get("name") or ""))
    team = qw_to_ascii(str(raw.get("team") or ""))

    if category == "performance":
        stats = _section(raw, "stats")
        dmg = _section(raw, "dmg")
        return PlayerGameStat(
            name=name,
            team=team,
            category=category,
            frags=coerce_int(stats.get("frags")),
            deaths=coerce_int(stats.get("deaths")),
            kills=coerce_int(stats.get("kills")),
            team_kills=coerce_int(stats.get("tk")),
            suicides=coerce_int(stats.get("suicides")),
            dmg_given=coerce_int(dmg.get("given")),
            dmg_taken=coerce_int(dmg.get("taken")),
            to_die=float(coerce_number(dmg.get("taken-to-die")) or 0.0),
        )

    if category == "weapons":
        weapons = _section(raw, "weapons")
        return PlayerGameStat(
            name=name,
            team=team,
            category=category,
            weapons={w: _extract_weapon(_section(weapons, w)) for w in WEAPONS},
        )

    items = _section(raw, "items")
    return PlayerGameStat(
        name=name,
        team=team,
        category=category,
        items={i: coerce_int(_section(items, i).get("took")) for i in ITEMS},
    )


def _rate(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100.0


def aggregate_team(players: Iterable[PlayerGameStat], category: str) -> Optional[TeamAggregate]:
    """Combine les joueurs d'une équipe en une ligne d'agrégat.

    Args:
        players: Lignes joueur (même catégorie).
        category: Catégorie de statistiques.

    Returns:
        TeamAggregate, ou None si aucun joueur (l'appelant affiche
        "pas de données" plutôt qu'une ligne de zéros).
    """
    _check_category(category)
    rows = list(players)
    if not rows:
        return None

    teams = {p.team for p in rows if p.team}
    team = next(iter(teams)) if len(teams) == 1 else "/".join(sorted(teams))
    n = len(rows)

    frags = sum(p.frags for p in rows)
    deaths = sum(p.deaths for p in rows)

    weapons: dict[str, WeaponStat] = {}
    if category == "weapons":
        for w in WEAPONS:
            ws = [p.weapons.get(w, WeaponStat()) for p in rows]
            weapons[w] = WeaponStat(
                hits=sum(x.hits for x in ws),
                attempts=sum(x.attempts for x in ws),
                kills=sum(x.kills for x in ws),
                pickups=sum(x.pickups for x in ws),
                drops=sum(x.drops for x in ws),
            )

    items: dict[str, int] = {}
    if category == "resources":
        items = {i: sum(p.items.get(i, 0) for p in rows) for i in ITEMS}

    return TeamAggregate(
        team=team,
        category=category,
        players=n,
        frags=frags,
        deaths=deaths,
        kills=sum(p.kills for p in rows),
        team_kills=sum(p.team_kills for p in rows),
        suicides=sum(p.suicides for p in rows),
        dmg_given=sum(p.dmg_given for p in rows),
        dmg_taken=sum(p.dmg_taken for p in rows),
        efficiency=_rate(frags, frags + deaths),
        # Moyenne par joueur (pas un ratio de deux sommes).
        to_die=sum(p.to_die for p in rows) / n,
        weapons=weapons,
        items=items,
    )


def team_aggregates(blob: StatsBlob | None, category: str) -> dict[str, Optional[TeamAggregate]]:
    """Agrège chaque équipe présente dans un blob.

    Returns:
        {nom d'équipe décodé: TeamAggregate}, dans l'ordre d'apparition.
    """
    _check_category(category)
    by_team: dict[str, list[PlayerGameStat]] = {}
    for raw in participating_players(blob):
        p = extract_player_stat(raw, category)
        by_team.setdefault(p.team, []).append(p)
    return {team: aggregate_team(rows, category) for team, rows in by_team.items()}


def find_team_aggregate(aggregates: dict[str, Optional[TeamAggregate]], tag: str) -> Optional[TeamAggregate]:
    """Retrouve l'agrégat d'une équipe par tag (insensible à la casse)."""
    low = str(tag or "").strip().casefold()
    for team, agg in aggregates.items():
        if team.strip().casefold() == low:
            return agg
    return None


def aggregates_to_frame(aggregates: dict[str, Optional[TeamAggregate]]) -> pd.DataFrame:
    """Convertit des agrégats en DataFrame d'affichage (une ligne par équipe).

    Les équipes sans données sont omises.
    """
    rows: list[dict] = []
    for team, agg in aggregates.items():
        if agg is None:
            continue
        row: dict[str, Any] = {"team": team, "players": agg.players}
        if agg.category == "performance":
            row.update(
                {
                    "frags": agg.frags,
                    "deaths": agg.deaths,
                    "efficiency": round(agg.efficiency, 1),
                    "dmg_given": agg.dmg_given,
                    "dmg_taken": agg.dmg_taken,
                    "to_die": round(agg.to_die, 1),
                    "team_kills": agg.team_kills,
                }
            )
        elif agg.category == "weapons":
            for w, ws in agg.weapons.items():
                row[f"{w}_acc"] = round(ws.accuracy, 1)
                row[f"{w}_kills"] = ws.kills
                row[f"{w}_took"] = ws.pickups
                row[f"{w}_drop"] = ws.drops
        else:
            row.update(agg.items)
        rows.append(row)
    return pd.DataFrame(rows)
