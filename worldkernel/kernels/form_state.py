"""
Kernel form modes.

The form has three modes. They differ only in labels, the pre-filled
values and where the submission goes; validation is shared.
"""

import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from worldkernel.core.models.kernel import Kernel, KernelLicense


class FormMode(str, Enum):
    CREATE = "create"
    FORK = "fork"
    EDIT = "edit"


class FormInitialValues(BaseModel):
    title: str = ""
    description: str = ""
    tags_input: str = ""
    license: str = KernelLicense.OPEN.value


class FormParent(BaseModel):
    id: uuid.UUID
    title: str


class KernelFormState(BaseModel):
    """Everything a client needs to render the kernel form."""

    mode: FormMode
    heading: str
    subheading: str
    submit_label: str
    submit_method: str
    submit_path: str
    initial: FormInitialValues
    parent: Optional[FormParent] = None
    kernel_id: Optional[uuid.UUID] = None


def _initial_from(kernel: Kernel) -> FormInitialValues:
    return FormInitialValues(
        title=kernel.title,
        description=kernel.description,
        tags_input=", ".join(kernel.tags or []),
        license=kernel.license,
    )


def build_form_state(
    mode: FormMode,
    kernel: Optional[Kernel] = None,
    api_prefix: str = "",
) -> KernelFormState:
    """
    Build the form state for a mode.

    ``kernel`` is the parent for FORK and the kernel being changed for EDIT;
    it is ignored for CREATE.
    """
    if mode == FormMode.CREATE:
        return KernelFormState(
            mode=mode,
            heading="Create New Kernel",
            subheading="Share your world-building idea with the community",
            submit_label="Create Kernel",
            submit_method="POST",
            submit_path=f"{api_prefix}/kernels",
            initial=FormInitialValues(),
        )

    if kernel is None:
        raise ValueError(f"{mode.value} form requires a kernel")

    if mode == FormMode.FORK:
        return KernelFormState(
            mode=mode,
            heading=f"Fork: {kernel.title}",
            subheading=f'Create a derivative work based on "{kernel.title}"',
            submit_label="Fork Kernel",
            submit_method="POST",
            submit_path=f"{api_prefix}/kernels/{kernel.id}/fork",
            initial=_initial_from(kernel),
            parent=FormParent(id=kernel.id, title=kernel.title),
        )

    return KernelFormState(
        mode=mode,
        heading="Edit Kernel",
        subheading="Update your kernel",
        submit_label="Save Changes",
        submit_method="PATCH",
        submit_path=f"{api_prefix}/kernels/{kernel.id}",
        initial=_initial_from(kernel),
        kernel_id=kernel.id,
    )
