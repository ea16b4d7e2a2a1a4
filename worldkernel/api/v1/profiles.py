"""
Profile and tag pages.
"""

from typing import Optional

from fastapi import APIRouter, Query

from worldkernel.api.deps import DbSession, clamp_limit
from worldkernel.kernels.listing import ListingAssembler
from worldkernel.schemas.kernel import FeedItemResponse, ProfilePageResponse, TagPageResponse
from worldkernel.schemas.profile import ProfileResponse

router = APIRouter()


@router.get("/profiles/{username}", response_model=ProfilePageResponse, tags=["Profiles"])
async def get_profile(
    username: str,
    db: DbSession,
    limit: Optional[int] = Query(None, ge=1),
):
    """A profile and the kernels it has published."""
    profile, items = await ListingAssembler(db).build_author_feed(username, clamp_limit(limit))
    return ProfilePageResponse(
        profile=ProfileResponse.model_validate(profile),
        kernels=[FeedItemResponse.from_item(item) for item in items],
    )


@router.get("/tags/{tag}", response_model=TagPageResponse, tags=["Tags"])
async def get_tag(
    tag: str,
    db: DbSession,
    limit: Optional[int] = Query(None, ge=1),
):
    """Kernels carrying a tag. Matching is case-insensitive."""
    normalized = tag.strip().lower()
    items = await ListingAssembler(db).build_tag_feed(normalized, clamp_limit(limit))
    return TagPageResponse(
        tag=normalized,
        kernels=[FeedItemResponse.from_item(item) for item in items],
    )
