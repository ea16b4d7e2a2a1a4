"""
Kernel endpoints.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Query, Response, status

from worldkernel.api.deps import CurrentProfile, DbSession, OptionalProfile, clamp_limit
from worldkernel.core.datastore import commit
from worldkernel.kernels.fork_resolver import ForkResolver
from worldkernel.kernels.form_validator import parse_tags_input, validate_kernel_form
from worldkernel.kernels.listing import ListingAssembler
from worldkernel.kernels.repository import KernelRepository
from worldkernel.schemas.kernel import (
    FeedItemResponse,
    KernelDetailResponse,
    KernelFormSubmission,
    KernelResponse,
    KernelUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=List[FeedItemResponse])
async def list_kernels(
    db: DbSession,
    limit: Optional[int] = Query(None, ge=1, description="Number of kernels (default 20)"),
):
    """Newest kernels with their authors and fork counts."""
    items = await ListingAssembler(db).build_feed(clamp_limit(limit))
    return [FeedItemResponse.from_item(item) for item in items]


@router.post("", response_model=KernelResponse, status_code=status.HTTP_201_CREATED)
async def create_kernel(
    data: KernelFormSubmission,
    profile: CurrentProfile,
    db: DbSession,
):
    """Publish a new kernel."""
    form = validate_kernel_form(data.title, data.description, data.tags, data.license)
    kernel = await KernelRepository(db).create(
        title=form.title,
        description=form.description,
        tags=form.tags,
        license=form.license,
        author_id=profile.id,
    )
    await commit(db)
    return KernelResponse.from_kernel(kernel)


@router.get("/{kernel_id}", response_model=KernelDetailResponse)
async def get_kernel(
    kernel_id: uuid.UUID,
    viewer: OptionalProfile,
    db: DbSession,
):
    """Kernel page: the kernel, the kernel it was forked from and its forks."""
    detail = await ListingAssembler(db).build_detail(
        kernel_id,
        viewer_id=viewer.id if viewer else None,
    )
    return KernelDetailResponse.from_detail(detail)


@router.patch("/{kernel_id}", response_model=KernelResponse)
async def update_kernel(
    kernel_id: uuid.UUID,
    data: KernelUpdateRequest,
    profile: CurrentProfile,
    db: DbSession,
):
    """Edit a kernel. Only its author may do this."""
    fields = {
        name: value
        for name, value in data.model_dump(exclude_unset=True).items()
        if value is not None
    }
    if "tags" in fields:
        fields["tags"] = parse_tags_input(fields["tags"])

    kernel = await KernelRepository(db).update(kernel_id, fields, caller_id=profile.id)
    await commit(db)
    return KernelResponse.from_kernel(kernel)


@router.delete("/{kernel_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_kernel(
    kernel_id: uuid.UUID,
    profile: CurrentProfile,
    db: DbSession,
):
    """Delete a kernel. Its forks are kept and become roots."""
    await KernelRepository(db).delete(kernel_id, caller_id=profile.id)
    await commit(db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{kernel_id}/fork", response_model=KernelResponse, status_code=status.HTTP_201_CREATED)
async def fork_kernel(
    kernel_id: uuid.UUID,
    data: KernelFormSubmission,
    profile: CurrentProfile,
    db: DbSession,
):
    """Publish a derivative of an existing kernel."""
    form = validate_kernel_form(data.title, data.description, data.tags, data.license)
    kernel = await KernelRepository(db).create(
        title=form.title,
        description=form.description,
        tags=form.tags,
        license=form.license,
        author_id=profile.id,
        parent_id=kernel_id,
    )
    await commit(db)
    return KernelResponse.from_kernel(kernel)


@router.get("/{kernel_id}/children", response_model=List[KernelResponse])
async def list_forks(kernel_id: uuid.UUID, db: DbSession):
    """Direct forks of a kernel, newest first."""
    await KernelRepository(db).get_by_id(kernel_id)
    children = await ForkResolver(db).get_children(kernel_id)
    return [KernelResponse.from_kernel(child) for child in children]
