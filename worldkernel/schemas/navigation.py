"""
Navigation bar schemas.
"""

from typing import List, Optional

from pydantic import BaseModel

from worldkernel.schemas.profile import ProfileResponse


class NavLink(BaseModel):
    label: str
    href: str
    style: str = "primary"  # primary | outline | link


class NavigationResponse(BaseModel):
    """What the navigation bar shows for the current caller and page."""

    brand: str
    home_href: str = "/"
    authenticated: bool
    profile: Optional[ProfileResponse] = None
    links: List[NavLink]
    redirect_to: Optional[str] = None
