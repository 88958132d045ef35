# -*- coding: utf-8 -*-
"""Annuaire des équipes (lecture seule).

Ce module charge les métadonnées d'affichage des équipes (nom, tag court,
logo) depuis un fichier JSON exporté de l'annuaire. Il ne sert qu'à
l'étiquetage : aucune mutation n'est faite ici.

Format attendu :
    {"teams": [{"id": "t1", "name": "Foo Fighters", "tag": "FOO",
                "tags": ["foo2"], "logoUrl": "https://..."}]}
"""
from __future__ import annotations

import json
import os
from functools import lru_cache
from typing import Any, Optional

from src.config import get_teams_file_path
from src.models import TeamInfo

__all__ = [
    "TeamDirectory",
    "load_teams",
]


def _safe_mtime(path: str) -> float | None:
    try:
        return os.path.getmtime(path)
    except OSError:
        return None


def load_teams(path: str | None = None) -> list[TeamInfo]:
    """Charge les équipes depuis le fichier JSON.

    Returns:
        Liste des équipes valides. Liste vide si le fichier n'existe pas
        ou est invalide.
    """
    p = path or get_teams_file_path()
    return list(_load_teams_cached(p, _safe_mtime(p)))


@lru_cache(maxsize=8)
def _load_teams_cached(path: str, mtime: float | None) -> tuple[TeamInfo, ...]:
    if not os.path.exists(path):
        return ()
    try:
        with open(path, "r", encoding="utf-8") as f:
            obj: Any = json.load(f) or {}
    except (OSError, ValueError):
        return ()

    teams = obj.get("teams") if isinstance(obj, dict) else obj
    if not isinstance(teams, list):
        return ()

    out: list[TeamInfo] = []
    for v in teams:
        if not isinstance(v, dict):
            continue
        tag = str(v.get("tag") or v.get("teamTag") or "").strip()
        if not tag:
            continue
        extra = v.get("tags") or []
        out.append(
            TeamInfo(
                id=str(v.get("id") or tag),
                name=str(v.get("name") or v.get("teamName") or tag).strip(),
                tag=tag,
                logo_url=(str(v.get("logoUrl") or v.get("logo_url") or "").strip() or None),
                tags=tuple(str(t).strip() for t in extra if isinstance(t, str) and t.strip()),
            )
        )
    return tuple(out)


class TeamDirectory:
    """Recherche d'équipe par identifiant ou par tag (insensible à la casse)."""

    def __init__(self, teams: list[TeamInfo] | None = None, *, path: str | None = None) -> None:
        self._teams = list(teams) if teams is not None else load_teams(path)

    @property
    def teams(self) -> list[TeamInfo]:
        return list(self._teams)

    def get(self, id_or_tag: str) -> Optional[TeamInfo]:
        key = str(id_or_tag or "").strip()
        if not key:
            return None
        for t in self._teams:
            if t.id == key:
                return t
        low = key.casefold()
        for t in self._teams:
            if any(tag.casefold() == low for tag in t.all_tags):
                return t
        return None
