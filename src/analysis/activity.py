"""Histogramme d'activité hebdomadaire.

Les semaines sont alignées sur les semaines ISO : lundi 00:00 UTC.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Iterable, List, Optional

import pandas as pd

from src.models import ActivityBucket, MatchResult, Outcome


def _utc_naive(ts: pd.Timestamp) -> pd.Timestamp:
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def period_start(period_months: int, now: Optional[datetime] = None) -> pd.Timestamp:
    """Début de la période de recul (mois calendaires), en UTC naïf.

    Args:
        period_months: Nombre de mois de recul.
        now: Instant de référence (défaut: maintenant, UTC).
    """
    ref = _utc_naive(pd.Timestamp(now if now is not None else datetime.now(timezone.utc)))
    return ref - pd.DateOffset(months=int(period_months))


def week_start(value) -> date:
    """Lundi (UTC) de la semaine contenant value."""
    ts = _utc_naive(pd.Timestamp(value)).normalize()
    return (ts - pd.Timedelta(days=int(ts.weekday()))).date()


def bucket_weekly_activity(
    results: Iterable[MatchResult],
    period_months: int,
    now: Optional[datetime] = None,
) -> List[ActivityBucket]:
    """Répartit les parties en semaines sur la période.

    Toutes les semaines de la période sont présentes (à zéro si aucune
    partie), de la semaine contenant `now - period_months` jusqu'à la
    semaine courante incluse. Les parties hors période sont ignorées.

    Args:
        results: Parties datées.
        period_months: Période de recul en mois.
        now: Instant de référence (défaut: maintenant).

    Returns:
        Liste de ActivityBucket triée par semaine croissante.
    """
    ref = _utc_naive(pd.Timestamp(now if now is not None else datetime.now(timezone.utc)))
    first = pd.Timestamp(week_start(period_start(period_months, ref)))
    last = pd.Timestamp(week_start(ref))
    weeks = pd.date_range(first, last, freq="7D")

    rows = [
        {"played_at": _utc_naive(pd.Timestamp(r.played_at)), "result": r.result}
        for r in results
    ]
    counts = pd.DataFrame(0, index=weeks, columns=["games", "wins", "losses", "draws"])

    if rows:
        df = pd.DataFrame(rows)
        df = df.loc[(df["played_at"] >= first) & (df["played_at"] <= ref)]
        if not df.empty:
            df = df.copy()
            df["week"] = df["played_at"].dt.normalize() - pd.to_timedelta(df["played_at"].dt.weekday, unit="D")
            df["games"] = 1
            df["wins"] = (df["result"] == Outcome.WIN).astype(int)
            df["losses"] = (df["result"] == Outcome.LOSS).astype(int)
            df["draws"] = (df["result"] == Outcome.DRAW).astype(int)
            agg = df.groupby("week")[["games", "wins", "losses", "draws"]].sum()
            counts = agg.reindex(weeks, fill_value=0)

    return [
        ActivityBucket(
            week_start=idx.date(),
            games=int(row["games"]),
            wins=int(row["wins"]),
            losses=int(row["losses"]),
            draws=int(row["draws"]),
        )
        for idx, row in counts.iterrows()
    ]


def activity_to_frame(buckets: List[ActivityBucket]) -> pd.DataFrame:
    """Convertit l'histogramme en DataFrame (pour les graphiques)."""
    return pd.DataFrame(
        [
            {
                "week_start": b.week_start,
                "games": b.games,
                "wins": b.wins,
                "losses": b.losses,
                "draws": b.draws,
            }
            for b in buckets
        ],
        columns=["week_start", "games", "wins", "losses", "draws"],
    )
