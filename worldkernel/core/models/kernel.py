"""
Kernel model: a published world-building document.

Forks point at their source through ``parent_id``. The reverse direction
(children, fork counts) is never stored; it is queried on every read.
"""

import uuid
from enum import Enum
from typing import List, Optional

from sqlalchemy import ForeignKey, Index, JSON, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from worldkernel.core.models.base import Base, TimestampMixin, generate_uuid


TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 5000
MAX_TAGS = 10
TAG_MAX_LENGTH = 30


class KernelLicense(str, Enum):
    """How others may reuse a kernel. Advisory only."""
    OPEN = "open"
    ATTRIBUTION = "attribution"
    PERMISSION = "permission"


LICENSE_LABELS = {
    KernelLicense.OPEN.value: "Open for remixing",
    KernelLicense.ATTRIBUTION.value: "Attribution required",
    KernelLicense.PERMISSION.value: "Ask permission",
}


def license_label(value: str) -> str:
    """Human-readable license; unknown values are shown as stored."""
    return LICENSE_LABELS.get(value, value)


class Kernel(Base, TimestampMixin):
    """Published document, optionally forked from another kernel."""

    __tablename__ = "kernels"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    title: Mapped[str] = mapped_column(
        String(TITLE_MAX_LENGTH),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id"),
        nullable=False,
        index=True,
    )
    parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("kernels.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    tags: Mapped[List[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    license: Mapped[str] = mapped_column(
        String(50),
        default=KernelLicense.OPEN.value,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_kernels_created_at", "created_at"),
    )

    @property
    def is_fork(self) -> bool:
        return self.parent_id is not None

    def __repr__(self) -> str:
        return f"<Kernel {self.title[:50]}>"
