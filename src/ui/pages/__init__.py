"""Pages UI du dashboard."""

from src.ui.pages.matchup import render_matchup_page
from src.ui.pages.settings import render_settings_page

__all__ = [
    "render_matchup_page",
    "render_settings_page",
]
