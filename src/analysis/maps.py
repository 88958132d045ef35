"""Analyse par carte (map) : bilans et comparaison A/B."""

from __future__ import annotations

from typing import Iterable, List, Optional

import pandas as pd

from src.config import MAP_STRENGTH_THRESHOLDS, MapStrengthThresholds
from src.models import MapStat, MatchResult, MergedMapRow, Outcome


def classify_map_strength(
    a: Optional[MapStat],
    b: Optional[MapStat],
    tag_a: str,
    tag_b: str,
    thresholds: MapStrengthThresholds = MAP_STRENGTH_THRESHOLDS,
) -> str:
    """Qualifie l'avantage d'une équipe sur une carte.

    Les règles sont évaluées dans l'ordre, la première qui s'applique gagne :
    1. un seul côté a joué la carte
    2. les deux équipes sont fortes (>= strong)
    3. écart >= dominates dans un sens
    4. écart >= favors dans un sens
    5. les deux équipes sont faibles (< weak)
    6. sinon : équilibré

    Args:
        a: Bilan de l'équipe A sur la carte (None si jamais jouée).
        b: Bilan de l'équipe B sur la carte (None si jamais jouée).
        tag_a: Libellé de l'équipe A.
        tag_b: Libellé de l'équipe B.

    Returns:
        Libellé du classement.
    """
    if a is None and b is None:
        return ""
    if b is None:
        return f"{tag_a} plays, {tag_b} doesn't"
    if a is None:
        return f"{tag_b} plays, {tag_a} doesn't"

    wa = float(a.win_rate)
    wb = float(b.win_rate)
    diff = wa - wb

    if wa >= thresholds.strong and wb >= thresholds.strong:
        return "Both teams strong"
    if diff >= thresholds.dominates:
        return f"{tag_a} dominates"
    if diff <= -thresholds.dominates:
        return f"{tag_b} dominates"
    if diff >= thresholds.favors:
        return f"{tag_a} favors"
    if diff <= -thresholds.favors:
        return f"{tag_b} favors"
    if wa < thresholds.weak and wb < thresholds.weak:
        return "Neither team favors"
    return "Even"


def merge_map_stats(
    maps_a: Iterable[MapStat],
    maps_b: Iterable[MapStat],
    tag_a: str,
    tag_b: str,
) -> List[MergedMapRow]:
    """Jointure externe des bilans par carte de deux équipes.

    Chaque carte jouée par au moins une équipe apparaît exactement une fois.
    Tri : nombre de parties cumulé décroissant, puis nom de carte.
    """
    by_a = {m.map: m for m in maps_a}
    by_b = {m.map: m for m in maps_b}

    rows = [
        MergedMapRow(
            map=name,
            a=by_a.get(name),
            b=by_b.get(name),
            label=classify_map_strength(by_a.get(name), by_b.get(name), tag_a, tag_b),
        )
        for name in set(by_a) | set(by_b)
    ]
    rows.sort(key=lambda r: (-r.total_games, r.map))
    return rows


def compute_map_stats(results: Iterable[MatchResult]) -> List[MapStat]:
    """Calcule le bilan par carte à partir d'un historique brut.

    Args:
        results: Parties d'une équipe (point de vue our_tag).

    Returns:
        Liste de MapStat triée par nombre de parties décroissant.
    """
    rows = [
        {
            "map": r.map,
            "win": int(r.result == Outcome.WIN),
            "loss": int(r.result == Outcome.LOSS),
            "diff": r.frag_diff,
        }
        for r in results
        if str(r.map or "").strip()
    ]
    if not rows:
        return []

    df = pd.DataFrame(rows)
    g = df.groupby("map").agg(
        games=("win", "size"),
        wins=("win", "sum"),
        losses=("loss", "sum"),
        avg_frag_diff=("diff", "mean"),
    )
    g = g.reset_index().sort_values(["games", "map"], ascending=[False, True])

    return [
        MapStat(
            map=str(row["map"]),
            games=int(row["games"]),
            wins=int(row["wins"]),
            losses=int(row["losses"]),
            win_rate=int(row["wins"]) / int(row["games"]) * 100.0,
            avg_frag_diff=round(float(row["avg_frag_diff"]), 1),
        )
        for _, row in g.iterrows()
    ]


def merged_maps_to_frame(rows: List[MergedMapRow], tag_a: str, tag_b: str) -> pd.DataFrame:
    """DataFrame d'affichage de la comparaison par carte."""

    def _fmt(m: Optional[MapStat]) -> tuple:
        if m is None:
            return (None, None, None)
        return (m.games, round(m.win_rate, 1), m.avg_frag_diff)

    out = []
    for r in rows:
        ga, wa, da = _fmt(r.a)
        gb, wb, db = _fmt(r.b)
        out.append(
            {
                "map": r.map,
                f"{tag_a} games": ga,
                f"{tag_a} win %": wa,
                f"{tag_a} diff": da,
                f"{tag_b} games": gb,
                f"{tag_b} win %": wb,
                f"{tag_b} diff": db,
                "verdict": r.label,
            }
        )
    return pd.DataFrame(out)
