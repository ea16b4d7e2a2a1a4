"""
Navigation bar endpoint.
"""

from fastapi import APIRouter, Query

from worldkernel.api.deps import OptionalProfile
from worldkernel.navigation import build_navigation
from worldkernel.schemas.navigation import NavigationResponse

router = APIRouter()


@router.get("/navigation", response_model=NavigationResponse, tags=["Navigation"])
async def navigation(
    viewer: OptionalProfile,
    path: str = Query("/", description="Client page the bar is rendered on"),
):
    """Links the navigation bar shows, and a redirect if the page is off-limits."""
    return build_navigation(viewer, current_path=path)
