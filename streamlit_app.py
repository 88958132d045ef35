"""QW Matchup - Dashboard Streamlit.

Comparaison de deux équipes QuakeWorld (4on4) : confrontations directes,
forme récente, bilan par carte et stats détaillées par partie.

Lancement:
    streamlit run streamlit_app.py
"""

import logging

import streamlit as st

from src.app.state import get_controller, get_settings, reset_controller
from src.ui.pages import render_matchup_page, render_settings_page

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


# =============================================================================
# Application principale
# =============================================================================

def main() -> None:
    """Point d'entrée principal de l'application Streamlit."""
    st.set_page_config(page_title="QW Matchup", layout="wide")
    st.title("QW Matchup")

    page = st.sidebar.radio("Page", options=["Comparaison", "Paramètres"], key="page")

    if page == "Comparaison":
        render_matchup_page(get_controller())
    elif page == "Paramètres":
        render_settings_page(get_settings(), on_saved_fn=reset_controller)


if __name__ == "__main__":
    main()
