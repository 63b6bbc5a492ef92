"""
Route guard: decides, from the session state alone, whether a path may be
shown or where to redirect instead. Evaluated before any page is built.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

LOGIN_PATH = "/login"
ROOT_PATH = "/"
LANDING_PATH = "/learn"

# path -> (label, admin only)
ROUTES = {
    "/learn": ("Learn", False),
    "/manage-course": ("Manage Course", True),
    "/manage-users": ("Manage Users", True),
    "/settings": ("Settings", False),
}

MAX_REDIRECTS = 5


class RouteKind(str, Enum):
    LOADING = "loading"
    ALLOW = "allow"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class RouteDecision:
    kind: RouteKind
    path: Optional[str] = None

    @classmethod
    def loading(cls):
        return cls(RouteKind.LOADING)

    @classmethod
    def allow(cls, path):
        return cls(RouteKind.ALLOW, path)

    @classmethod
    def redirect(cls, path):
        return cls(RouteKind.REDIRECT, path)


def normalize_path(path):
    if not path:
        return ROOT_PATH
    path = "/" + path.strip().strip("/")
    return path.lower()


def is_admin_route(path):
    route = ROUTES.get(normalize_path(path))
    return bool(route and route[1])


def decide(state, path):
    """
    Map (session state, requested path) to a routing decision.

    Args:
        state: SessionState snapshot
        path: Requested path, e.g. '/manage-course'

    Returns:
        RouteDecision
    """
    if not state.is_initialized:
        return RouteDecision.loading()

    path = normalize_path(path)

    if not state.is_authenticated:
        if path == LOGIN_PATH:
            return RouteDecision.allow(path)
        return RouteDecision.redirect(LOGIN_PATH)

    if path == LOGIN_PATH:
        return RouteDecision.redirect(ROOT_PATH)
    if path == ROOT_PATH:
        return RouteDecision.redirect(LANDING_PATH)
    if path not in ROUTES:
        return RouteDecision.redirect(ROOT_PATH)
    if is_admin_route(path) and not state.is_admin:
        return RouteDecision.redirect(ROOT_PATH)
    return RouteDecision.allow(path)


def resolve(state, path):
    """Follow redirects; returns the path to render, or None while loading"""
    for _ in range(MAX_REDIRECTS):
        decision = decide(state, path)
        if decision.kind == RouteKind.LOADING:
            return None
        if decision.kind == RouteKind.ALLOW:
            return decision.path
        path = decision.path
    raise RuntimeError(f"Too many redirects resolving {path}")


def navigation_links(state):
    """Sidebar links visible for the session, as (path, label) pairs"""
    if not state.is_authenticated:
        return []
    return [
        (path, label)
        for path, (label, admin_only) in ROUTES.items()
        if state.is_admin or not admin_only
    ]
