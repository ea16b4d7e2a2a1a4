"""
Listing assembler: kernels joined with their authors and fork counts.

Each listing costs a fixed number of queries regardless of its length:
one for the kernels, one for their authors, one grouped count of forks.
"""

import uuid
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from worldkernel.core.datastore import datastore_call
from worldkernel.core.models.kernel import Kernel, license_label
from worldkernel.core.models.profile import Profile
from worldkernel.errors import NotFoundError
from worldkernel.kernels.fork_resolver import ForkResolver
from worldkernel.kernels.repository import DEFAULT_LIST_LIMIT, KernelRepository


@dataclass
class FeedItem:
    kernel: Kernel
    author: Profile
    fork_count: int = 0


@dataclass
class AuthoredKernel:
    kernel: Kernel
    author: Profile


@dataclass
class KernelDetail:
    """Everything the kernel page shows."""

    kernel: Kernel
    author: Profile
    parent: Optional[AuthoredKernel]
    children: List[AuthoredKernel] = field(default_factory=list)
    is_author: bool = False

    @property
    def fork_count(self) -> int:
        return len(self.children)

    @property
    def license_label(self) -> str:
        return license_label(self.kernel.license)


class ListingAssembler:
    """Builds feeds and detail views for display."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repository = KernelRepository(session)
        self.forks = ForkResolver(session)

    @datastore_call
    async def _authors_for(self, kernels: Iterable[Kernel]) -> Dict[uuid.UUID, Profile]:
        author_ids = {kernel.author_id for kernel in kernels}
        if not author_ids:
            return {}
        result = await self.session.execute(
            select(Profile).where(Profile.id.in_(author_ids))
        )
        return {profile.id: profile for profile in result.scalars().all()}

    async def _assemble(self, kernels: List[Kernel]) -> List[FeedItem]:
        authors = await self._authors_for(kernels)
        counts = await self.forks.count_children_bulk(kernel.id for kernel in kernels)
        return [
            FeedItem(
                kernel=kernel,
                author=authors[kernel.author_id],
                fork_count=counts.get(kernel.id, 0),
            )
            for kernel in kernels
            if kernel.author_id in authors
        ]

    async def build_feed(self, limit: int = DEFAULT_LIST_LIMIT) -> List[FeedItem]:
        """Newest kernels with author and fork count."""
        kernels = await self.repository.list_recent(limit)
        return await self._assemble(kernels)

    async def build_tag_feed(self, tag: str, limit: int = DEFAULT_LIST_LIMIT) -> List[FeedItem]:
        """Newest kernels carrying a tag."""
        kernels = await self.repository.list_by_tag(tag, limit)
        return await self._assemble(kernels)

    @datastore_call
    async def build_author_feed(
        self,
        username: str,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> tuple[Profile, List[FeedItem]]:
        """A profile and its newest kernels. Raises NotFoundError."""
        result = await self.session.execute(
            select(Profile).where(Profile.username == username)
        )
        profile = result.scalar_one_or_none()
        if profile is None:
            raise NotFoundError("profile", username)

        kernels = await self.repository.list_by_author(profile.id, limit)
        return profile, await self._assemble(kernels)

    async def build_detail(
        self,
        kernel_id: uuid.UUID,
        viewer_id: Optional[uuid.UUID] = None,
    ) -> KernelDetail:
        """Kernel page: the kernel, its parent and its direct forks."""
        kernel = await self.repository.get_by_id(kernel_id)
        parent = await self.forks.get_parent(kernel)
        children = await self.forks.get_children(kernel.id)

        related = [kernel] + ([parent] if parent else []) + children
        authors = await self._authors_for(related)

        return KernelDetail(
            kernel=kernel,
            author=authors[kernel.author_id],
            parent=AuthoredKernel(parent, authors[parent.author_id]) if parent else None,
            children=[
                AuthoredKernel(child, authors[child.author_id])
                for child in children
                if child.author_id in authors
            ],
            is_author=viewer_id is not None and viewer_id == kernel.author_id,
        )
