from academy.routing import ROUTES, LOGIN_PATH
from streamlit_modules.page_registry import PAGE_REGISTRY, get_page_renderer, get_page_info, _load


def test_every_route_has_a_page():
    assert set(ROUTES) | {LOGIN_PATH} == set(PAGE_REGISTRY)


def test_renderers_load_lazily():
    for path in PAGE_REGISTRY:
        assert callable(get_page_renderer(path))


def test_controller_factories(manager):
    assert _load(LOGIN_PATH, 'controller') is None
    for path in ROUTES:
        controller = _load(path, 'controller')(manager)
        assert controller.token.alive
        controller.close()
        assert controller.closed


def test_unknown_route():
    assert get_page_info('/nowhere') is None
    assert get_page_renderer('/nowhere') is None
