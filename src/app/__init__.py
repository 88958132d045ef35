"""Module application - Orchestration de la comparaison.

- selection.py : sélection d'une partie (survol / épinglage) par panneau
- session.py : session de comparaison (équipes, période, sous-modes)
- state.py : contrôleur par session Streamlit et pont asyncio
"""

from __future__ import annotations

from src.app.selection import SelectionController
from src.app.session import ComparisonSession, ComparisonSessionController, SubMode

__all__ = [
    "SelectionController",
    "ComparisonSession",
    "ComparisonSessionController",
    "SubMode",
]
