"""
Navigation state and the page access gate.

Page paths here are the client's routes (``/kernel/new``, ``/kernel/<id>/fork``),
not API routes. The API answers with where the client should go.
"""

import re
from typing import Optional
from urllib.parse import urlencode

from worldkernel.core.models.profile import Profile
from worldkernel.schemas.navigation import NavigationResponse, NavLink
from worldkernel.schemas.profile import ProfileResponse

LOGIN_PATH = "/auth/login"
SIGNUP_PATH = "/auth/signup"
NEW_KERNEL_PATH = "/kernel/new"

_PROTECTED_PATTERNS = (
    re.compile(r"^/kernel/new(/.*)?$"),
    re.compile(r"^/kernel/[^/]+/fork$"),
    re.compile(r"^/kernel/[^/]+/edit$"),
)
_AUTH_PAGES = frozenset((LOGIN_PATH, SIGNUP_PATH))


def is_protected_path(path: str) -> bool:
    """Pages that require a signed-in caller."""
    return any(pattern.match(path) for pattern in _PROTECTED_PATTERNS)


def login_redirect(path: str) -> str:
    """Login page URL that returns to ``path`` afterwards."""
    return f"{LOGIN_PATH}?{urlencode({'redirect': path})}"


def access_redirect(path: str, authenticated: bool) -> Optional[str]:
    """
    Where a caller must be sent instead of ``path``, if anywhere.

    Anonymous callers on protected pages go to login; signed-in callers on
    the login or signup page go home.
    """
    if not authenticated and is_protected_path(path):
        return login_redirect(path)
    if authenticated and path in _AUTH_PAGES:
        return "/"
    return None


def build_navigation(
    profile: Optional[Profile],
    current_path: str = "/",
    brand: str = "World-Kernel",
) -> NavigationResponse:
    """Navigation bar for a caller on a page."""
    if profile is None:
        return NavigationResponse(
            brand=brand,
            authenticated=False,
            redirect_to=access_redirect(current_path, authenticated=False),
            links=[
                NavLink(label="Log In", href=LOGIN_PATH, style="outline"),
                NavLink(label="Sign Up", href=SIGNUP_PATH),
            ],
        )

    links = []
    if current_path != NEW_KERNEL_PATH:
        links.append(NavLink(label="New Kernel", href=NEW_KERNEL_PATH))
    links.append(NavLink(label=f"@{profile.username}", href=f"/profile/{profile.username}", style="link"))
    links.append(NavLink(label="Logout", href="/auth/logout", style="outline"))

    return NavigationResponse(
        brand=brand,
        authenticated=True,
        redirect_to=access_redirect(current_path, authenticated=True),
        profile=ProfileResponse.model_validate(profile),
        links=links,
    )
