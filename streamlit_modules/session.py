"""
Session state management for Streamlit app.
Owns the per-browser SessionManager and the current route.
"""

import logging
import uuid
import streamlit as st

from academy.auth import AuthClient, FileSessionStore, MemorySessionStore
from academy.backend import BackendClient
from academy.persistence import load_settings
from academy.routing import normalize_path
from academy.session_manager import SessionManager

logger = logging.getLogger(__name__)

ROUTE_PARAM = 'path'


def create_session_manager(config=None, session_id=None):
    """
    Wire backend, auth client and session manager from the config file.

    The login lives in memory unless persist_session is on; the file store is
    then keyed by session_id so browsers never share a login.
    """
    config = config or load_settings()
    backend = BackendClient(config)
    if config.persist_session:
        store = FileSessionStore(session_id or uuid.uuid4().hex)
    else:
        store = MemorySessionStore()
    auth = AuthClient(backend, store)
    return SessionManager(auth, backend)


def init_session_state():
    """Initialize all session state variables"""
    defaults = {
        'route': normalize_path(st.query_params.get(ROUTE_PARAM, '/')),
        'page_route': None,
        'page_controller': None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value

    if 'browser_id' not in st.session_state:
        st.session_state.browser_id = uuid.uuid4().hex

    if 'session_manager' not in st.session_state:
        manager = create_session_manager(session_id=st.session_state.browser_id)
        st.session_state.session_manager = manager
        logger.info("Initializing session...")
        manager.initialize()


def get_session_manager():
    """Get the session manager of this browser session"""
    return st.session_state.get('session_manager')


def get_route():
    return st.session_state.get('route', '/')


def set_route(path):
    """Record the route without triggering a rerun"""
    path = normalize_path(path)
    st.session_state.route = path
    st.query_params[ROUTE_PARAM] = path


def navigate(path):
    """Go to another route"""
    set_route(path)
    st.rerun()


def close_page():
    """Tear down the controller of the page being left"""
    controller = st.session_state.get('page_controller')
    if controller is not None:
        controller.close()
    st.session_state.page_controller = None
    st.session_state.page_route = None


def logout():
    """Sign out and drop everything tied to the user"""
    manager = get_session_manager()
    close_page()
    error = manager.logout()
    if error is not None:
        st.error(f"Logout failed: {error}")
        return
    navigate('/login')
