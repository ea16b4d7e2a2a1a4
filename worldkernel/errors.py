"""
Domain error taxonomy.

Services raise these; the API layer maps them to HTTP responses in
``worldkernel.main``.
"""

from typing import Optional


class WorldKernelError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(WorldKernelError):
    """User-correctable input problem. Never mutates state."""

    status_code = 422

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class AuthError(WorldKernelError):
    """Missing caller identity."""

    status_code = 401


class ForbiddenError(AuthError):
    """Caller identity does not match the resource owner."""

    status_code = 403


class NotFoundError(WorldKernelError):
    """Referenced kernel or profile does not exist."""

    status_code = 404

    def __init__(self, entity_type: str, identifier: object):
        super().__init__(f"{entity_type.capitalize()} not found")
        self.entity_type = entity_type
        self.identifier = identifier


class ConflictError(WorldKernelError):
    """Unique value (email, username) already taken."""

    status_code = 409


class DatastoreError(WorldKernelError):
    """Datastore unreachable, timed out, or a query failed. Retryable."""

    status_code = 503
    retryable = True
