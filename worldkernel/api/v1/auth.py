"""
Authentication endpoints.
"""

from fastapi import APIRouter, HTTPException, status

from worldkernel.api.deps import CurrentProfile, DbSession
from worldkernel.core.datastore import commit
from worldkernel.core.identity.identity_service import IdentityService
from worldkernel.schemas.auth import LoginRequest, SignupRequest, TokenResponse
from worldkernel.schemas.profile import ProfileResponse

router = APIRouter()


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(data: SignupRequest, db: DbSession):
    """
    Create an account and its profile.

    Returns an access token so the client is signed in immediately.
    """
    identity_service = IdentityService(db)
    profile = await identity_service.signup(
        email=data.email,
        password=data.password,
        username=data.username,
        display_name=data.display_name,
        bio=data.bio,
    )
    await commit(db)

    token = identity_service.jwt_manager.create_access_token(
        user_id=profile.id,
        username=profile.username,
    )

    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
        profile=ProfileResponse.model_validate(profile),
    )


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: DbSession):
    """Authenticate with email and password."""
    result = await IdentityService(db).authenticate(
        email=data.email,
        password=data.password,
    )

    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    await commit(db)
    profile, token = result
    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
        profile=ProfileResponse.model_validate(profile),
    )


@router.get("/me", response_model=ProfileResponse)
async def me(profile: CurrentProfile):
    """Profile of the signed-in caller."""
    return ProfileResponse.model_validate(profile)
