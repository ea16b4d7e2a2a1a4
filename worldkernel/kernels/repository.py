"""
Kernel repository: persistence and ownership rules for kernels.

Every method is a direct datastore round trip. Nothing is cached, so reads
always see the latest committed state. Ownership is checked here rather
than trusted from the client.
"""

import json
import uuid
from typing import Any, List, Mapping, Optional, Union

from sqlalchemy import String, cast, func, select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession

from worldkernel.core.datastore import datastore_call
from worldkernel.core.events.event_store import EventStore
from worldkernel.core.models.base import utcnow
from worldkernel.core.models.event_log import EventType
from worldkernel.core.models.kernel import Kernel, KernelLicense
from worldkernel.errors import AuthError, ForbiddenError, NotFoundError, ValidationError
from worldkernel.kernels.form_validator import validate_kernel_fields
from worldkernel.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_LIST_LIMIT = 20

UPDATABLE_FIELDS = frozenset(("title", "description", "tags", "license"))


def newest_first(query):
    """Listing order: created_at descending, id ascending for equal timestamps."""
    return query.order_by(Kernel.created_at.desc(), Kernel.id.asc())


def _like_escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class KernelRepository:
    """CRUD operations on kernels."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)

    @datastore_call
    async def create(
        self,
        title: str,
        description: str,
        tags: List[str],
        license: Union[str, KernelLicense],
        author_id: Optional[uuid.UUID],
        parent_id: Optional[uuid.UUID] = None,
    ) -> Kernel:
        """
        Persist a new kernel.

        Args:
            title: At most 200 characters
            description: At most 5000 characters
            tags: At most 10 tags of at most 30 characters each
            license: open, attribution or permission
            author_id: Profile id of the authenticated caller
            parent_id: Kernel this one is forked from, if any

        Returns:
            The new kernel, with created_at equal to updated_at

        Raises:
            AuthError: If there is no caller
            ValidationError: If a field is out of bounds
            NotFoundError: If parent_id names no kernel
        """
        if author_id is None:
            raise AuthError("You must be logged in to create a kernel")

        data = validate_kernel_fields(title, description, tags, license)

        if parent_id is not None and await self.find_by_id(parent_id) is None:
            raise NotFoundError("kernel", parent_id)

        now = utcnow()
        kernel = Kernel(
            title=data.title,
            description=data.description,
            tags=data.tags,
            license=data.license,
            author_id=author_id,
            parent_id=parent_id,
            created_at=now,
            updated_at=now,
        )
        self.session.add(kernel)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.KERNEL_FORKED if parent_id else EventType.KERNEL_CREATED,
            entity_type="kernel",
            entity_id=kernel.id,
            user_id=author_id,
            payload={"title": kernel.title, "parent_id": parent_id, "tags": kernel.tags},
        )
        logger.info(
            "Kernel created",
            extra={
                "kernel_id": str(kernel.id),
                "author_id": str(author_id),
                "parent_id": str(parent_id) if parent_id else None,
            },
        )

        return kernel

    @datastore_call
    async def update(
        self,
        kernel_id: uuid.UUID,
        fields: Mapping[str, Any],
        caller_id: Optional[uuid.UUID],
    ) -> Kernel:
        """
        Apply changes to a kernel owned by the caller.

        Only title, description, tags and license may change. The merged
        result is validated exactly like a new kernel.

        Raises:
            AuthError: If there is no caller
            NotFoundError: If the kernel does not exist
            ForbiddenError: If the caller is not the author
            ValidationError: If a field is out of bounds or not updatable
        """
        if caller_id is None:
            raise AuthError("You must be logged in to edit a kernel")

        kernel = await self.get_by_id(kernel_id)
        if kernel.author_id != caller_id:
            raise ForbiddenError("Only the author can edit this kernel")

        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            name = sorted(unknown)[0]
            raise ValidationError(f"Field '{name}' cannot be changed", field=name)

        data = validate_kernel_fields(
            title=fields.get("title", kernel.title),
            description=fields.get("description", kernel.description),
            tags=fields.get("tags", kernel.tags),
            license=fields.get("license", kernel.license),
        )

        changed = [
            name for name in UPDATABLE_FIELDS
            if name in fields and getattr(data, name) != getattr(kernel, name)
        ]
        kernel.title = data.title
        kernel.description = data.description
        kernel.tags = data.tags
        kernel.license = data.license
        kernel.updated_at = utcnow()
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.KERNEL_UPDATED,
            entity_type="kernel",
            entity_id=kernel.id,
            user_id=caller_id,
            payload={"changed": sorted(changed)},
        )
        logger.info(
            "Kernel updated",
            extra={"kernel_id": str(kernel.id), "changed": sorted(changed)},
        )

        return kernel

    @datastore_call
    async def delete(self, kernel_id: uuid.UUID, caller_id: Optional[uuid.UUID]) -> None:
        """
        Delete a kernel owned by the caller.

        Forks of the deleted kernel become roots: their parent_id is cleared
        in the same transaction.
        """
        if caller_id is None:
            raise AuthError("You must be logged in to delete a kernel")

        kernel = await self.get_by_id(kernel_id)
        if kernel.author_id != caller_id:
            raise ForbiddenError("Only the author can delete this kernel")

        orphaned = await self.session.execute(
            sql_update(Kernel)
            .where(Kernel.parent_id == kernel_id)
            .values(parent_id=None)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.delete(kernel)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.KERNEL_DELETED,
            entity_type="kernel",
            entity_id=kernel_id,
            user_id=caller_id,
            payload={"title": kernel.title, "orphaned_forks": orphaned.rowcount},
        )
        logger.info(
            "Kernel deleted",
            extra={"kernel_id": str(kernel_id), "orphaned_forks": orphaned.rowcount},
        )

    @datastore_call
    async def find_by_id(self, kernel_id: uuid.UUID) -> Optional[Kernel]:
        """Get a kernel by ID, or None."""
        result = await self.session.execute(select(Kernel).where(Kernel.id == kernel_id))
        return result.scalar_one_or_none()

    async def get_by_id(self, kernel_id: uuid.UUID) -> Kernel:
        """Get a kernel by ID. Raises NotFoundError."""
        kernel = await self.find_by_id(kernel_id)
        if kernel is None:
            raise NotFoundError("kernel", kernel_id)
        return kernel

    @datastore_call
    async def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> List[Kernel]:
        """First page of kernels, newest first."""
        result = await self.session.execute(newest_first(select(Kernel)).limit(limit))
        return list(result.scalars().all())

    @datastore_call
    async def list_by_author(
        self,
        author_id: uuid.UUID,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> List[Kernel]:
        """Kernels written by one profile, newest first."""
        query = newest_first(select(Kernel).where(Kernel.author_id == author_id))
        result = await self.session.execute(query.limit(limit))
        return list(result.scalars().all())

    @datastore_call
    async def list_by_tag(self, tag: str, limit: int = DEFAULT_LIST_LIMIT) -> List[Kernel]:
        """
        Kernels carrying a tag, newest first.

        Tags live in a JSON array, so the query matches the JSON-encoded tag
        as a quoted substring and the result is then checked exactly.
        """
        tag = tag.strip().lower()
        if not tag:
            return []

        needle = f"%{_like_escape(json.dumps(tag))}%"
        query = newest_first(
            select(Kernel).where(cast(Kernel.tags, String).like(needle, escape="\\"))
        )
        result = await self.session.execute(query.limit(limit))
        return [kernel for kernel in result.scalars().all() if tag in (kernel.tags or [])]

    @datastore_call
    async def count(self) -> int:
        """Total number of kernels."""
        result = await self.session.execute(select(func.count(Kernel.id)))
        return result.scalar() or 0
