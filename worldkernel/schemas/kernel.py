"""
Kernel schemas.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from worldkernel.core.models.kernel import Kernel, KernelLicense, license_label
from worldkernel.kernels.listing import AuthoredKernel, FeedItem, KernelDetail
from worldkernel.schemas.common import UtcDatetime
from worldkernel.schemas.profile import ProfileResponse

EXCERPT_LENGTH = 150


def make_excerpt(text: str, max_length: int = EXCERPT_LENGTH) -> str:
    """Shorten a description for cards and link lists."""
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."


class KernelFormSubmission(BaseModel):
    """
    Kernel form submission, shared by create and fork.

    Lengths and tags are checked by the form validator so that users see
    its messages; only presence is enforced here.
    """

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    tags: str = Field("", description="Comma-separated tags (max 10, 30 characters each)")
    license: str = KernelLicense.OPEN.value


class KernelUpdateRequest(BaseModel):
    """Edit form submission. Omitted fields keep their value."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    tags: Optional[str] = Field(None, description="Comma-separated tags")
    license: Optional[str] = None


class KernelResponse(BaseModel):
    """Kernel row."""

    id: uuid.UUID
    title: str
    description: str
    author_id: uuid.UUID
    parent_id: Optional[uuid.UUID] = None
    tags: List[str]
    license: str
    license_label: str
    is_fork: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime

    @classmethod
    def from_kernel(cls, kernel: Kernel) -> "KernelResponse":
        return cls(
            id=kernel.id,
            title=kernel.title,
            description=kernel.description,
            author_id=kernel.author_id,
            parent_id=kernel.parent_id,
            tags=list(kernel.tags or []),
            license=kernel.license,
            license_label=license_label(kernel.license),
            is_fork=kernel.parent_id is not None,
            created_at=kernel.created_at,
            updated_at=kernel.updated_at,
        )


class FeedItemResponse(BaseModel):
    """Kernel card in a listing."""

    kernel: KernelResponse
    author: ProfileResponse
    excerpt: str
    fork_count: int = 0

    @classmethod
    def from_item(cls, item: FeedItem) -> "FeedItemResponse":
        return cls(
            kernel=KernelResponse.from_kernel(item.kernel),
            author=ProfileResponse.model_validate(item.author),
            excerpt=make_excerpt(item.kernel.description),
            fork_count=item.fork_count,
        )


class KernelLinkResponse(BaseModel):
    """Parent or child kernel shown on a kernel page."""

    id: uuid.UUID
    title: str
    excerpt: str
    author: ProfileResponse
    created_at: UtcDatetime

    @classmethod
    def from_authored(cls, authored: AuthoredKernel) -> "KernelLinkResponse":
        return cls(
            id=authored.kernel.id,
            title=authored.kernel.title,
            excerpt=make_excerpt(authored.kernel.description),
            author=ProfileResponse.model_validate(authored.author),
            created_at=authored.kernel.created_at,
        )


class KernelDetailResponse(BaseModel):
    """Kernel page."""

    kernel: KernelResponse
    author: ProfileResponse
    parent: Optional[KernelLinkResponse] = None
    children: List[KernelLinkResponse]
    fork_count: int
    is_author: bool

    @classmethod
    def from_detail(cls, detail: KernelDetail) -> "KernelDetailResponse":
        return cls(
            kernel=KernelResponse.from_kernel(detail.kernel),
            author=ProfileResponse.model_validate(detail.author),
            parent=KernelLinkResponse.from_authored(detail.parent) if detail.parent else None,
            children=[KernelLinkResponse.from_authored(child) for child in detail.children],
            fork_count=detail.fork_count,
            is_author=detail.is_author,
        )


class ProfilePageResponse(BaseModel):
    """Profile page: the profile and its newest kernels."""

    profile: ProfileResponse
    kernels: List[FeedItemResponse]


class TagPageResponse(BaseModel):
    """Kernels carrying one tag."""

    tag: str
    kernels: List[FeedItemResponse]
