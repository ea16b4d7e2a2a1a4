"""
Identity Core - Authentication and profile lookup.
"""

from worldkernel.core.identity.password import PasswordHasher, verify_password, hash_password
from worldkernel.core.identity.jwt import (
    JWTManager,
    IssuedToken,
    AccessTokenPayload,
    create_access_token,
    verify_access_token,
)
from worldkernel.core.identity.identity_service import IdentityService

__all__ = [
    "PasswordHasher",
    "verify_password",
    "hash_password",
    "JWTManager",
    "IssuedToken",
    "AccessTokenPayload",
    "create_access_token",
    "verify_access_token",
    "IdentityService",
]
