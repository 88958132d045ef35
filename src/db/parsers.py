"""Fonctions de parsing des réponses des API QW (stats, hub, ktxstats)."""

import re
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from src.models import (
    HeadToHead,
    MapStat,
    MatchResult,
    OpponentSummary,
    Outcome,
    RosterEntry,
)

_SHORT_OFFSET_RE = re.compile(r"\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?[+-]\d{2}$")


def parse_iso_utc(s: str) -> datetime:
    """Parse une date ISO 8601 en datetime UTC.

    Gère les formats vus dans les API : 2026-01-02T20:18:01.293Z,
    2026-01-02 20:18:01+00 (Postgres) ou une date seule.

    Args:
        s: Chaîne de date au format ISO 8601.

    Returns:
        datetime en timezone UTC.
    """
    s = s.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    # Postgres abrège l'offset ("+00") : fromisoformat veut "+00:00".
    if _SHORT_OFFSET_RE.search(s):
        s = s + ":00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def coerce_number(v: Any) -> Optional[float]:
    """Convertit une valeur en float de manière robuste.

    Args:
        v: Valeur à convertir (nombre, chaîne numérique).

    Returns:
        La valeur en float, ou None si la conversion échoue.
    """
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return float(v) if v == v else None
    if isinstance(v, str):
        try:
            return float(v)
        except ValueError:
            return None
    return None


def coerce_int(v: Any, default: int = 0) -> int:
    x = coerce_number(v)
    return int(x) if x is not None else default


def coerce_datetime(v: Any) -> Optional[datetime]:
    """Convertit un timestamp (ISO 8601 ou epoch s/ms) en datetime UTC."""
    if isinstance(v, datetime):
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)
    if isinstance(v, str) and v.strip():
        try:
            return parse_iso_utc(v)
        except ValueError:
            pass
    x = coerce_number(v)
    if x is None:
        return None
    # Epoch en millisecondes au-delà de l'an 2286 en secondes.
    if x > 1e11:
        x = x / 1000.0
    return datetime.fromtimestamp(x, tz=timezone.utc)


def _first(raw: dict, *keys: str) -> Any:
    for k in keys:
        if k in raw and raw[k] is not None:
            return raw[k]
    return None


# =============================================================================
# Noms QuakeWorld
# =============================================================================

_QW_CHAR_LOOKUP = {
    0: "=", 2: "=", 5: "•", 10: " ", 14: "•", 15: "•",
    16: "[", 17: "]", 18: "0", 19: "1", 20: "2", 21: "3", 22: "4",
    23: "5", 24: "6", 25: "7", 26: "8", 27: "9", 28: "•",
    29: "=", 30: "=", 31: "=",
}


def qw_to_ascii(name: str) -> str:
    """Convertit un nom encodé QuakeWorld en ASCII lisible.

    Les noms ktxstats utilisent les caractères >= 128 pour le texte "coloré"
    (on retranche 128) et 0-31 pour des symboles ([], chiffres, puces).
    """
    out = []
    for ch in str(name or ""):
        code = ord(ch)
        if 128 <= code < 256:
            code -= 128
        if code >= 32:
            out.append(chr(code))
        else:
            out.append(_QW_CHAR_LOOKUP.get(code, "?"))
    return "".join(out)


def normalize_tags(tags: str | Iterable[str] | None) -> str:
    """Normalise un ou plusieurs tags en chaîne "a,b" minuscule."""
    if not tags:
        return ""
    if isinstance(tags, str):
        items = [tags]
    else:
        items = list(tags)
    return ",".join(str(t).strip().lower() for t in items if str(t).strip())


# =============================================================================
# Parties
# =============================================================================


def _parse_outcome(v: Any, ours: int, theirs: int) -> Outcome:
    s = str(v or "").strip().upper()
    if s in ("W", "WIN"):
        return Outcome.WIN
    if s in ("L", "LOSS"):
        return Outcome.LOSS
    if s in ("D", "DRAW", "T", "TIE"):
        return Outcome.DRAW
    return Outcome.from_scores(ours, theirs)


def parse_stats_game(raw: dict, *, our_tag: str, opponent_tag: str | None = None) -> Optional[MatchResult]:
    """Parse une partie de l'API stats (h2h ou forme).

    Les clés varient selon les endpoints ; les champs manquants sont
    remplacés par 0 et le résultat est déduit des scores si absent.

    Returns:
        MatchResult, ou None si l'entrée n'a ni identifiant ni date.
    """
    if not isinstance(raw, dict):
        return None
    gid = _first(raw, "id", "gameId", "game_id")
    played_at = coerce_datetime(_first(raw, "playedAt", "played_at", "timestamp", "date"))
    if gid is None or played_at is None:
        return None

    ours = coerce_int(_first(raw, "teamAFrags", "team_a_frags", "AFrags", "teamFrags", "ourScore", "ourFrags"))
    theirs = coerce_int(_first(raw, "teamBFrags", "team_b_frags", "BFrags", "oppFrags", "opponentScore", "opponentFrags"))
    opp = opponent_tag or _first(raw, "opponent", "opponentTag", "opponent_tag", "teamB")
    ref = _first(raw, "demoSha256", "demo_sha256", "statsRef", "stats_ref")

    return MatchResult(
        id=str(gid),
        map=str(_first(raw, "map") or "").strip(),
        played_at=played_at,
        our_tag=str(our_tag),
        opponent_tag=str(opp or "???"),
        our_score=ours,
        opponent_score=theirs,
        result=_parse_outcome(raw.get("result"), ours, theirs),
        stats_ref=str(ref) if ref else None,
    )


def parse_head_to_head(payload: Any, tag_a: str, tag_b: str) -> HeadToHead:
    """Parse la réponse /api/h2h (point de vue de l'équipe A)."""
    obj = payload if isinstance(payload, dict) else {}
    team_a = str(obj.get("teamA") or tag_a)
    team_b = str(obj.get("teamB") or tag_b)
    games = [
        g
        for g in (parse_stats_game(raw, our_tag=team_a, opponent_tag=team_b) for raw in obj.get("games") or [])
        if g is not None
    ]
    return HeadToHead(team_a=team_a, team_b=team_b, games=games)


def parse_form(payload: Any, tag: str) -> list[MatchResult]:
    """Parse la réponse /api/form."""
    obj = payload if isinstance(payload, dict) else {}
    team = str(obj.get("team") or tag)
    out = []
    for raw in obj.get("games") or []:
        g = parse_stats_game(raw, our_tag=team)
        if g is not None:
            out.append(g)
    return out


def parse_hub_match(raw: dict, our_tag: str) -> Optional[MatchResult]:
    """Transforme une ligne brute du hub (Supabase) en MatchResult.

    Le hub stocke les noms d'équipe en minuscules ; "notre" équipe est celle
    dont le nom correspond au tag, l'autre est l'adversaire.
    """
    if not isinstance(raw, dict):
        return None
    played_at = coerce_datetime(raw.get("timestamp"))
    if raw.get("id") is None or played_at is None:
        return None

    tag = our_tag.lower()
    teams = [t for t in (raw.get("teams") or []) if isinstance(t, dict)]
    ours = next((t for t in teams if str(t.get("name", "")).lower() == tag), None)
    theirs = next((t for t in teams if str(t.get("name", "")).lower() != tag), None)

    our_score = coerce_int(ours.get("frags")) if ours else 0
    opp_score = coerce_int(theirs.get("frags")) if theirs else 0
    if ours is not None and theirs is not None:
        result = Outcome.from_scores(our_score, opp_score)
    else:
        result = Outcome.DRAW

    return MatchResult(
        id=str(raw["id"]),
        map=str(raw.get("map") or ""),
        played_at=played_at,
        our_tag=str(ours.get("name")) if ours else our_tag,
        opponent_tag=str(theirs.get("name")) if theirs else "???",
        our_score=our_score,
        opponent_score=opp_score,
        result=result,
        stats_ref=raw.get("demo_sha256") or None,
    )


# =============================================================================
# Cartes, roster, adversaires
# =============================================================================


def parse_map_stat(raw: Any) -> Optional[MapStat]:
    """Parse une entrée de /api/maps ; le taux est recalculé s'il manque."""
    if not isinstance(raw, dict):
        return None
    name = str(raw.get("map") or "").strip()
    if not name:
        return None
    games = coerce_int(_first(raw, "games", "total"))
    wins = coerce_int(raw.get("wins"))
    losses = coerce_int(raw.get("losses"))
    rate = coerce_number(_first(raw, "winRate", "win_rate"))
    if rate is None:
        rate = (wins / games * 100.0) if games > 0 else 0.0
    diff = coerce_number(_first(raw, "avgFragDiff", "avg_frag_diff")) or 0.0
    return MapStat(map=name, games=games, wins=wins, losses=losses, win_rate=float(rate), avg_frag_diff=float(diff))


def parse_maps(payload: Any) -> list[MapStat]:
    obj = payload if isinstance(payload, dict) else {}
    return [m for m in (parse_map_stat(raw) for raw in obj.get("maps") or []) if m is not None]


def parse_roster(payload: Any) -> list[RosterEntry]:
    obj = payload if isinstance(payload, dict) else {}
    out: list[RosterEntry] = []
    for raw in obj.get("players") or []:
        if not isinstance(raw, dict):
            continue
        name = str(_first(raw, "player", "name") or "").strip()
        if name:
            out.append(RosterEntry(player=name, games=coerce_int(raw.get("games"))))
    return out


def parse_opponents(payload: Any) -> list[OpponentSummary]:
    obj = payload if isinstance(payload, dict) else {}
    out: list[OpponentSummary] = []
    for raw in obj.get("opponents") or []:
        if not isinstance(raw, dict):
            continue
        tag = str(raw.get("tag") or "").strip()
        if tag:
            out.append(
                OpponentSummary(
                    tag=tag,
                    total=coerce_int(raw.get("total")),
                    wins=coerce_int(raw.get("wins")),
                    losses=coerce_int(raw.get("losses")),
                )
            )
    return out
