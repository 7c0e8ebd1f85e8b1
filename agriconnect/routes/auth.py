"""Authentication routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from ..auth import AUTH_COOKIE_NAME, CurrentUser, create_access_token
from ..config import Settings, get_settings
from ..database import AuthSvc
from ..logging_config import get_logger
from ..models import (
    AuthUser,
    CurrentUserResponse,
    Profile,
    ProfileUpdate,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
)
from ..rate_limit import limiter
from ..services import AuthenticationError

logger = get_logger("agriconnect.routes.auth")
router = APIRouter(prefix="/auth", tags=["auth"])


def set_auth_cookie(response: Response, token: str, settings: Settings):
    """Set httpOnly auth cookie."""
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.jwt_expire_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )


def clear_auth_cookie(response: Response, settings: Settings):
    response.delete_cookie(
        key=AUTH_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def _issue_session(
    response: Response, user: AuthUser, provider_token: str | None, settings: Settings
) -> SessionResponse:
    token = create_access_token(
        settings,
        user_id=user.id,
        role=user.role,
        email=user.email,
        full_name=user.full_name,
        provider_token=provider_token,
    )
    set_auth_cookie(response, token, settings)
    return SessionResponse(
        access_token=token,
        expires_in=settings.jwt_expire_minutes * 60,
        user=user,
    )


@router.post("/signup", response_model=SessionResponse, status_code=201)
@limiter.limit("5/minute")
async def sign_up(
    request: Request,
    response: Response,
    signup_request: SignUpRequest,
    auth_service: AuthSvc,
    settings: Annotated[Settings, Depends(get_settings)],
):
    """
    Create a farmer or labourer account.

    Also creates the profile and the role-specific record, and signs the new
    user in.
    """
    user, provider_token = await auth_service.sign_up(signup_request)
    return _issue_session(response, user, provider_token, settings)


@router.post("/signin", response_model=SessionResponse)
@limiter.limit("10/minute")
async def sign_in(
    request: Request,
    response: Response,
    signin_request: SignInRequest,
    auth_service: AuthSvc,
    settings: Annotated[Settings, Depends(get_settings)],
):
    """Sign in with email and password."""
    user, provider_token = await auth_service.sign_in(signin_request)
    return _issue_session(response, user, provider_token, settings)


@router.post("/signout")
async def sign_out(
    response: Response,
    auth: CurrentUser,
    auth_service: AuthSvc,
    settings: Annotated[Settings, Depends(get_settings)],
):
    """Revoke the provider session and clear the auth cookie."""
    await auth_service.sign_out(auth)
    clear_auth_cookie(response, settings)
    return {"status": "signed_out"}


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(auth: CurrentUser, auth_service: AuthSvc):
    """Current session user and profile."""
    user = await auth_service.get_current_user(auth)
    if user is None:
        raise AuthenticationError("Session is no longer valid")
    profile = await auth_service.get_user_profile(user.id)
    return CurrentUserResponse(user=user, profile=profile)


@router.patch("/me/profile", response_model=Profile)
async def update_my_profile(
    updates: ProfileUpdate,
    auth: CurrentUser,
    auth_service: AuthSvc,
):
    """Update the signed-in user's profile."""
    changes = updates.model_dump(exclude_unset=True)
    logger.info(f"PATCH /auth/me/profile | user={auth.user_id} | fields={sorted(changes)}")
    return await auth_service.update_profile(auth.user_id, changes)
