"""
Page registry for route-based navigation.
Maps every route to its renderer and controller factory, loaded lazily.
"""
import importlib
import logging

import streamlit as st

from streamlit_modules.session import close_page

logger = logging.getLogger(__name__)

# Page registry with metadata for each route
PAGE_REGISTRY = {
    '/login': {
        'title': 'Login',
        'module': 'streamlit_modules.pages.login',
        'function': 'render_login_page',
        'controller': None,
    },
    '/learn': {
        'title': 'Learn',
        'module': 'streamlit_modules.pages.learn',
        'function': 'render_learn_page',
        'controller': 'create_controller',
    },
    '/settings': {
        'title': 'Settings',
        'module': 'streamlit_modules.pages.settings',
        'function': 'render_settings_page',
        'controller': 'create_controller',
    },
    '/manage-course': {
        'title': 'Manage Course',
        'module': 'streamlit_modules.pages.manage_course',
        'function': 'render_manage_course_page',
        'controller': 'create_controller',
    },
    '/manage-users': {
        'title': 'Manage Users',
        'module': 'streamlit_modules.pages.manage_users',
        'function': 'render_manage_users_page',
        'controller': 'create_controller',
    },
}


def get_page_info(path):
    """Get metadata for a specific route"""
    return PAGE_REGISTRY.get(path)


def _load(path, attr_key):
    info = PAGE_REGISTRY.get(path)
    if not info or not info.get(attr_key):
        return None
    module = importlib.import_module(info['module'])
    return getattr(module, info[attr_key])


def get_page_renderer(path):
    """Lazy load and return the renderer of a route"""
    return _load(path, 'function')


def mount_page(path, manager):
    """
    Return the controller of the page at path, creating it when the route changed.

    The previous page's controller is closed so its pending results are dropped.
    """
    if st.session_state.get('page_route') == path:
        return st.session_state.page_controller

    close_page()
    factory = _load(path, 'controller')
    controller = factory(manager) if factory else None
    st.session_state.page_route = path
    st.session_state.page_controller = controller
    if controller is not None and hasattr(controller, 'load'):
        logger.info(f"Loading page {path}")
        controller.load()
    return controller


def render_page(path, manager):
    if get_page_info(path) is None:
        st.error(f"No page registered for {path}")
        return
    renderer = get_page_renderer(path)
    controller = mount_page(path, manager)
    renderer(manager, controller)
