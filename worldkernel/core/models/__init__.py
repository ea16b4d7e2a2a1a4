"""
Core Data Models

SQLAlchemy models for accounts, profiles, kernels and the audit log.
"""

from worldkernel.core.models.base import Base, TimestampMixin, generate_uuid, utcnow
from worldkernel.core.models.user import User
from worldkernel.core.models.profile import Profile
from worldkernel.core.models.kernel import (
    Kernel,
    KernelLicense,
    LICENSE_LABELS,
    license_label,
    TITLE_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    MAX_TAGS,
    TAG_MAX_LENGTH,
)
from worldkernel.core.models.event_log import EventLog, EventType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "utcnow",
    # Identity
    "User",
    "Profile",
    # Kernels
    "Kernel",
    "KernelLicense",
    "LICENSE_LABELS",
    "license_label",
    "TITLE_MAX_LENGTH",
    "DESCRIPTION_MAX_LENGTH",
    "MAX_TAGS",
    "TAG_MAX_LENGTH",
    # Event Log
    "EventLog",
    "EventType",
]
