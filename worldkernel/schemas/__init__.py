"""
Pydantic schemas for API request/response validation.
"""

from worldkernel.schemas.auth import SignupRequest, LoginRequest, TokenResponse
from worldkernel.schemas.common import ErrorResponse, HealthResponse
from worldkernel.schemas.kernel import (
    KernelFormSubmission,
    KernelUpdateRequest,
    KernelResponse,
    FeedItemResponse,
    KernelLinkResponse,
    KernelDetailResponse,
    ProfilePageResponse,
    TagPageResponse,
)
from worldkernel.schemas.navigation import NavLink, NavigationResponse
from worldkernel.schemas.profile import ProfileResponse

__all__ = [
    # Auth
    "SignupRequest",
    "LoginRequest",
    "TokenResponse",
    # Common
    "ErrorResponse",
    "HealthResponse",
    # Kernels
    "KernelFormSubmission",
    "KernelUpdateRequest",
    "KernelResponse",
    "FeedItemResponse",
    "KernelLinkResponse",
    "KernelDetailResponse",
    "ProfilePageResponse",
    "TagPageResponse",
    # Navigation
    "NavLink",
    "NavigationResponse",
    # Profiles
    "ProfileResponse",
]
