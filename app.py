#!/usr/bin/env python3
"""
Zen Academy - video course platform (Streamlit)

Usage:
    streamlit run app.py
"""

import logging
import streamlit as st

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)

from academy.errors import ConfigError
from academy.persistence import CONFIG_FILE
from academy.routing import resolve, navigation_links, LOGIN_PATH
from streamlit_modules.ui.styles import apply_custom_css
from streamlit_modules.ui.components import render_loading_screen
from streamlit_modules.session import (
    init_session_state, get_session_manager, get_route, set_route, navigate, logout
)
from streamlit_modules.page_registry import render_page

APP_NAME = "Zen Academy"

# ============================================================================
# PAGE CONFIG
# ============================================================================

st.set_page_config(
    page_title=APP_NAME,
    page_icon="🎓",
    layout="wide",
    initial_sidebar_state="expanded"
)

apply_custom_css()

# Initialize session state
try:
    init_session_state()
except ConfigError as e:
    logger.error(f"Configuration error: {e}")
    st.error(f"⚙️ {e}")
    st.info(f"Create `{CONFIG_FILE}` with `backend_url=...` and `anon_key=...` and reload.")
    st.stop()

# ============================================================================
# SHELL
# ============================================================================

def render_sidebar(state, current_path):
    with st.sidebar:
        st.header(f"🎓 {APP_NAME}")
        user = state.user or {}
        st.caption(f"Hello, {user.get('name') or 'User'}")

        st.divider()
        for path, label in navigation_links(state):
            if st.button(
                label,
                key=f"nav_{path}",
                type="primary" if path == current_path else "secondary",
                use_container_width=True,
            ):
                navigate(path)

        st.divider()
        if st.button("↩️ Logout", key="logout_btn", use_container_width=True):
            logout()


# ============================================================================
# MAIN APP
# ============================================================================

def main():
    manager = get_session_manager()
    state = manager.state

    requested = get_route()
    target = resolve(state, requested)
    if target is None:
        render_loading_screen(APP_NAME)
        return

    if target != requested:
        logger.info(f"Redirecting {requested} -> {target}")
        set_route(target)

    if target == LOGIN_PATH:
        render_page(target, manager)
        return

    render_sidebar(state, target)
    render_page(target, manager)


if __name__ == "__main__":
    main()
