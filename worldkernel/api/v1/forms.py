"""
Kernel form endpoints.

Each returns the state for one form mode. Anonymous callers are redirected
to login with a return path instead of getting an error.
"""

import uuid

from fastapi import APIRouter, status
from fastapi.responses import RedirectResponse

from worldkernel.api.deps import DbSession, OptionalProfile
from worldkernel.config import get_settings
from worldkernel.errors import ForbiddenError
from worldkernel.kernels.form_state import FormMode, KernelFormState, build_form_state
from worldkernel.kernels.repository import KernelRepository
from worldkernel.navigation import login_redirect

router = APIRouter()

_REDIRECT_RESPONSES = {
    status.HTTP_303_SEE_OTHER: {"description": "Not signed in; redirect to login"},
}


def _to_login(page_path: str) -> RedirectResponse:
    return RedirectResponse(login_redirect(page_path), status_code=status.HTTP_303_SEE_OTHER)


@router.get("/new", response_model=KernelFormState, responses=_REDIRECT_RESPONSES)
async def new_kernel_form(profile: OptionalProfile):
    """Empty form for a new kernel."""
    if profile is None:
        return _to_login("/kernel/new")
    return build_form_state(FormMode.CREATE, api_prefix=get_settings().api_v1_prefix)


@router.get("/{kernel_id}/fork", response_model=KernelFormState, responses=_REDIRECT_RESPONSES)
async def fork_kernel_form(kernel_id: uuid.UUID, profile: OptionalProfile, db: DbSession):
    """Form pre-filled from the kernel being forked."""
    if profile is None:
        return _to_login(f"/kernel/{kernel_id}/fork")

    parent = await KernelRepository(db).get_by_id(kernel_id)
    return build_form_state(FormMode.FORK, parent, api_prefix=get_settings().api_v1_prefix)


@router.get("/{kernel_id}/edit", response_model=KernelFormState, responses=_REDIRECT_RESPONSES)
async def edit_kernel_form(kernel_id: uuid.UUID, profile: OptionalProfile, db: DbSession):
    """Form pre-filled from the caller's own kernel."""
    if profile is None:
        return _to_login(f"/kernel/{kernel_id}/edit")

    kernel = await KernelRepository(db).get_by_id(kernel_id)
    if kernel.author_id != profile.id:
        raise ForbiddenError("Only the author can edit this kernel")
    return build_form_state(FormMode.EDIT, kernel, api_prefix=get_settings().api_v1_prefix)
