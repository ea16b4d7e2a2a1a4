"""
Kernel services: form validation, persistence, forks and listings.
"""

from worldkernel.kernels.form_validator import (
    KernelFormData,
    normalize_tags,
    parse_tags_input,
    validate_kernel_fields,
    validate_kernel_form,
)
from worldkernel.kernels.form_state import FormMode, KernelFormState, build_form_state
from worldkernel.kernels.repository import KernelRepository
from worldkernel.kernels.fork_resolver import ForkResolver
from worldkernel.kernels.listing import (
    AuthoredKernel,
    FeedItem,
    KernelDetail,
    ListingAssembler,
)

__all__ = [
    "KernelFormData",
    "normalize_tags",
    "parse_tags_input",
    "validate_kernel_fields",
    "validate_kernel_form",
    "FormMode",
    "KernelFormState",
    "build_form_state",
    "KernelRepository",
    "ForkResolver",
    "AuthoredKernel",
    "FeedItem",
    "KernelDetail",
    "ListingAssembler",
]
