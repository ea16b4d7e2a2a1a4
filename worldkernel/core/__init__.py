"""
Core Layer

Foundational components shared by every feature:
- Data models (accounts, profiles, kernels, audit log)
- Identity (password hashing, bearer tokens, signup/login)
- Append-only event log

Every mutation is logged in the same transaction as the change.
"""

from worldkernel.core.models import (
    User,
    Profile,
    Kernel,
    KernelLicense,
    EventLog,
    EventType,
)

__all__ = [
    "User",
    "Profile",
    "Kernel",
    "KernelLicense",
    "EventLog",
    "EventType",
]
