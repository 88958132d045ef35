#!/usr/bin/env python3
"""Rapport de comparaison en ligne de commande.

Utilise le même contrôleur que le dashboard : confrontations directes,
forme récente ou bilan par carte, avec les stats détaillées d'une partie.

Usage:
    python scripts/matchup_report.py FOO BAR                  # Confrontations
    python scripts/matchup_report.py FOO BAR --mode form      # Forme des deux équipes
    python scripts/matchup_report.py FOO BAR --mode maps      # Bilan par carte
    python scripts/matchup_report.py FOO BAR --game 12345     # + stats détaillées
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

# Ajouter le répertoire parent au path pour les imports
REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT))

from src.analysis import aggregates_to_frame, format_record, merged_maps_to_frame
from src.app.session import ComparisonSessionController, SubMode
from src.app.state import build_controller
from src.config import ALLOWED_PERIOD_MONTHS, STAT_CATEGORIES
from src.models import LoadStatus, Side
from src.ui.formatting import results_to_frame
from src.ui.settings import load_settings

# Configuration du logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def _print_panel(ctl: ComparisonSessionController, kind: str, side: Optional[Side], title: str) -> None:
    print(f"\n=== {title} ===")
    state = ctl.load_state(kind, side)
    if state.status == LoadStatus.FAILED:
        print(f"Échec : {state.error}")
        return
    if state.status != LoadStatus.PRESENT:
        print("Aucune partie sur la période.")
        return
    print(f"Bilan : {format_record(ctl.summary(side))}")
    print(results_to_frame(ctl.visible_results(side)).to_string(index=False))


async def _print_game(ctl: ComparisonSessionController, side: Optional[Side], game_id: str) -> None:
    task = ctl.select_result(side, game_id)
    if task is not None:
        await task
    state = ctl.selection_state(side)
    print(f"\n=== Partie {game_id} ===")
    if state.stats_error:
        print(f"Stats détaillées indisponibles : {state.stats_error}")
        return
    if state.stats_blob is None:
        print("Pas de stats détaillées pour cette partie.")
        return
    for category in STAT_CATEGORIES:
        df = aggregates_to_frame(ctl.team_aggregates(category, side))
        print(f"\n--- {category} ---")
        print(df.to_string(index=False) if not df.empty else "Pas de données.")


async def _run(args: argparse.Namespace) -> int:
    ctl = build_controller(load_settings())
    await ctl.change_period(args.months)
    await ctl.switch_sub_mode(args.mode)
    await ctl.select_team_a(args.team_a)
    await ctl.select_opponent(args.team_b)

    label_a = ctl.team_label(args.team_a)
    label_b = ctl.team_label(args.team_b)
    mode = ctl.session.sub_mode

    if mode == SubMode.H2H:
        _print_panel(ctl, "h2h", None, f"{label_a} vs {label_b} ({args.months} mois)")
        if args.game:
            await _print_game(ctl, None, args.game)
    elif mode == SubMode.FORM:
        _print_panel(ctl, "form", Side.LEFT, f"Forme de {label_a}")
        _print_panel(ctl, "form", Side.RIGHT, f"Forme de {label_b}")
        if args.game:
            side = Side.RIGHT if any(r.id == args.game for r in ctl.visible_results(Side.RIGHT)) else Side.LEFT
            await _print_game(ctl, side, args.game)
    else:
        rows = ctl.merged_maps()
        print(f"\n=== Cartes ({args.months} mois) ===")
        if rows:
            print(merged_maps_to_frame(rows, label_a, label_b).to_string(index=False))
        else:
            print("Aucune carte.")
        for side, label in ((Side.LEFT, label_a), (Side.RIGHT, label_b)):
            active = [b for b in ctl.weekly_activity(side) if b.games]
            print(f"\nSemaines actives de {label} : {len(active)}")

    failed = [
        s
        for s in (ctl.load_state(k, side) for k in ("h2h", "form", "maps", "history") for side in (None, Side.LEFT, Side.RIGHT))
        if s.status == LoadStatus.FAILED
    ]
    return 1 if failed else 0


def main() -> int:
    """Point d'entrée principal."""
    parser = argparse.ArgumentParser(
        description="Rapport de comparaison entre deux équipes QuakeWorld (4on4)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("team_a", help="Tag de l'équipe A")
    parser.add_argument("team_b", help="Tag de l'adversaire")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in SubMode],
        default=SubMode.H2H.value,
        help="Vue à afficher (défaut: h2h)",
    )
    parser.add_argument(
        "--months",
        type=int,
        choices=list(ALLOWED_PERIOD_MONTHS),
        default=load_settings().default_period_months,
        help="Période de recul en mois",
    )
    parser.add_argument("--game", default=None, help="Identifiant d'une partie à détailler")
    parser.add_argument("-v", "--verbose", action="store_true", help="Logs détaillés")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        logger.info("Interrompu.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
