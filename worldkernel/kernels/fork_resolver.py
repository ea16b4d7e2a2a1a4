"""
Fork relationships between kernels.

A kernel's parent is stored on the kernel; its children are whatever
kernels currently point at it. Only one level is ever resolved.
"""

import uuid
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from worldkernel.core.datastore import datastore_call
from worldkernel.core.models.kernel import Kernel
from worldkernel.kernels.repository import newest_first
from worldkernel.logging_config import get_logger

logger = get_logger(__name__)


class ForkResolver:
    """Parent, children and fork counts for kernels."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @datastore_call
    async def get_parent(self, kernel: Kernel) -> Optional[Kernel]:
        """
        The kernel this one was forked from.

        Returns None for root kernels and when the parent no longer exists.
        """
        if kernel.parent_id is None:
            return None

        result = await self.session.execute(
            select(Kernel).where(Kernel.id == kernel.parent_id)
        )
        parent = result.scalar_one_or_none()
        if parent is None:
            logger.warning(
                "Kernel references a missing parent",
                extra={"kernel_id": str(kernel.id), "parent_id": str(kernel.parent_id)},
            )
        return parent

    @datastore_call
    async def get_children(self, kernel_id: uuid.UUID) -> List[Kernel]:
        """Direct forks of a kernel, newest first."""
        query = newest_first(select(Kernel).where(Kernel.parent_id == kernel_id))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    @datastore_call
    async def count_children(self, kernel_id: uuid.UUID) -> int:
        """Number of direct forks of a kernel."""
        result = await self.session.execute(
            select(func.count(Kernel.id)).where(Kernel.parent_id == kernel_id)
        )
        return result.scalar() or 0

    @datastore_call
    async def count_children_bulk(
        self,
        kernel_ids: Iterable[uuid.UUID],
    ) -> Dict[uuid.UUID, int]:
        """
        Fork counts for many kernels in a single grouped query.

        Every requested id is present in the result; kernels without forks
        map to 0.
        """
        ids = list(dict.fromkeys(kernel_ids))
        counts: Dict[uuid.UUID, int] = {kernel_id: 0 for kernel_id in ids}
        if not ids:
            return counts

        query = (
            select(Kernel.parent_id, func.count(Kernel.id))
            .where(Kernel.parent_id.in_(ids))
            .group_by(Kernel.parent_id)
        )
        result = await self.session.execute(query)
        for parent_id, count in result.all():
            counts[parent_id] = count
        return counts
