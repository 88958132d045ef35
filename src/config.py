"""Configuration centralisée et constantes du projet."""

import os
from dataclasses import dataclass
from typing import Dict


def get_repo_root() -> str:
    """Retourne le répertoire racine du repo (parent de `src/`)."""
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


# =============================================================================
# Sources distantes (lecture seule)
# =============================================================================

STATS_API_BASE = (os.environ.get("QWMATCHUP_STATS_API") or "https://qw-api.poker-affiliate.org").rstrip("/")
HUB_API_BASE = (
    os.environ.get("QWMATCHUP_HUB_API") or "https://ncsphkjfominimxztjip.supabase.co/rest/v1/v1_games"
).rstrip("/")
HUB_API_KEY = (os.environ.get("QWMATCHUP_HUB_KEY") or "").strip()
KTXSTATS_BASE = (os.environ.get("QWMATCHUP_KTXSTATS_BASE") or "https://d.quake.world").rstrip("/")

HUB_GAMES_URL = "https://hub.quakeworld.nu/games"


def get_teams_file_path() -> str:
    """Retourne le chemin de l'annuaire des équipes (JSON)."""
    override = os.environ.get("QWMATCHUP_TEAMS_PATH")
    if override and override.strip():
        return override.strip()
    return os.path.join(get_repo_root(), "teams.json")


# =============================================================================
# Périodes et limites
# =============================================================================

ALLOWED_PERIOD_MONTHS: tuple[int, ...] = (1, 3, 6, 12)
DEFAULT_PERIOD_MONTHS = 3
DEFAULT_H2H_LIMIT = 10
DEFAULT_FORM_LIMIT = 10
DEFAULT_HISTORY_LIMIT = 50
LIST_CACHE_TTL_SECONDS = 5 * 60


# =============================================================================
# Statistiques détaillées (ktxstats)
# =============================================================================

STAT_CATEGORIES: tuple[str, ...] = ("performance", "weapons", "resources")

# Armes suivies dans les blobs ktxstats (ordre d'affichage).
WEAPONS: tuple[str, ...] = ("sg", "ssg", "ng", "sng", "gl", "rl", "lg")

# Objets ramassables : armures (ga/ya/ra), mega-health, quad, pent, ring.
ITEMS: tuple[str, ...] = ("ga", "ya", "ra", "mh", "q", "p", "r")


@dataclass(frozen=True)
class MapStrengthThresholds:
    """Seuils (en points de % de victoire) du classement par carte."""
    strong: float = 60.0
    dominates: float = 30.0
    favors: float = 15.0
    weak: float = 40.0


MAP_STRENGTH_THRESHOLDS = MapStrengthThresholds()


# =============================================================================
# Codes de résultat (Outcome)
# =============================================================================

@dataclass(frozen=True)
class OutcomeCodes:
    """Codes de résultat tels qu'exposés par les API QW."""
    WIN: str = "W"
    LOSS: str = "L"
    DRAW: str = "D"

    def to_label(self, code: str) -> str:
        """Convertit un code en label lisible."""
        labels = {
            self.WIN: "Victoire",
            self.LOSS: "Défaite",
            self.DRAW: "Égalité",
        }
        return labels.get(code, "?")


OUTCOME_CODES = OutcomeCodes()


# =============================================================================
# Palette de couleurs
# =============================================================================

@dataclass(frozen=True)
class MatchupColors:
    """Palette de couleurs du dashboard."""
    cyan: str = "#35D0FF"
    violet: str = "#8E6CFF"
    green: str = "#3DFFB5"
    red: str = "#FF4D6D"
    amber: str = "#FFB703"
    slate: str = "#A8B2D1"

    def as_dict(self) -> Dict[str, str]:
        """Retourne les couleurs sous forme de dictionnaire."""
        return {
            "cyan": self.cyan,
            "violet": self.violet,
            "green": self.green,
            "red": self.red,
            "amber": self.amber,
            "slate": self.slate,
        }


COLORS = MatchupColors()


@dataclass(frozen=True)
class ThemeColors:
    """Couleurs de fond et de texte des graphiques."""
    bg_plot_rgb: tuple[int, int, int] = (29, 35, 40)
    text_primary: str = "#E6EDF3"
    border: str = "rgba(255,255,255,0.18)"

    def bg_plot_rgba(self, alpha: float) -> str:
        r, g, b = self.bg_plot_rgb
        return f"rgba({r},{g},{b},{alpha})"


THEME_COLORS = ThemeColors()


# =============================================================================
# Configuration des graphiques
# =============================================================================

@dataclass
class PlotConfig:
    """Configuration par défaut des graphiques."""
    default_height: int = 360
    tall_height: int = 520
    short_height: int = 280

    bar_opacity: float = 0.85
    bar_opacity_secondary: float = 0.65

    margin_left: int = 40
    margin_right: int = 20
    margin_top: int = 30
    margin_bottom: int = 40


PLOT_CONFIG = PlotConfig()
