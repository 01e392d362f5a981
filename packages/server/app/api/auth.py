"""
Authentication endpoints.

POST  /auth/signup    Create an account (new org, or join via invite token)
POST  /auth/login     Email/password login
POST  /auth/logout    Revoke the session
GET   /auth/me        Current user, organization and membership
PATCH /auth/me        Update name / model preference
POST  /auth/password  Change password
"""

from __future__ import annotations

import jwt
import structlog
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import (
    CSRF_COOKIE,
    SESSION_COOKIE,
    AuthenticatedUser,
    create_jwt,
    decode_jwt,
    extract_session_token,
    generate_csrf_token,
    require_auth,
    revoke_session,
)
from app.core.config import get_settings
from app.core.database import get_session
from app.services import users as user_service
from parley_shared.schemas.users import (
    AuthResponse,
    LoginRequest,
    MembershipSummary,
    MeResponse,
    OrganizationSummary,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    SignupRequest,
    UserResponse,
)

log = structlog.get_logger()
settings = get_settings()
router = APIRouter()

SESSION_MAX_AGE = settings.session_expire_days * 24 * 60 * 60


def _set_session_cookies(response: Response, token: str, csrf: str) -> None:
    """Set the session JWT and CSRF cookies on a response."""
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        httponly=True,
        secure=not settings.debug,  # allow non-HTTPS in dev
        samesite="lax",
        path="/",
        max_age=SESSION_MAX_AGE,
    )
    response.set_cookie(
        key=CSRF_COOKIE,
        value=csrf,
        httponly=False,  # JS must read this
        secure=not settings.debug,
        samesite="lax",
        path="/",
        max_age=SESSION_MAX_AGE,
    )


def _start_session(response: Response, user_id) -> str:
    token, _jti = create_jwt(user_id)
    _set_session_cookies(response, token, generate_csrf_token())
    return token


def _me(auth: AuthenticatedUser) -> MeResponse:
    organization = None
    membership = None
    if auth.organization is not None:
        organization = OrganizationSummary(
            id=auth.organization.id,
            name=auth.organization.name,
            onboarding_completed=auth.organization.onboarding_completed,
        )
    if auth.membership is not None:
        membership = MembershipSummary(
            id=auth.membership.id,
            organization_id=auth.membership.organization_id,
            role=auth.membership.role,
            is_deactivated=auth.membership.is_deactivated,
        )
    return MeResponse(
        user=UserResponse.model_validate(auth.user),
        organization=organization,
        membership=membership,
    )


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(
    body: SignupRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """Register with email/password. Without an invite token the user owns a new org."""
    user = await user_service.signup(body, session)
    _start_session(response, user.id)
    return AuthResponse(user_id=str(user.id), email=user.email, message="Signup successful")


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """Authenticate with email/password and receive a JWT session."""
    user = await user_service.authenticate(body.email, body.password, session)
    _start_session(response, user.id)
    log.info("auth.login_success", user_id=str(user.id))
    return AuthResponse(user_id=str(user.id), email=user.email, message="Login successful")


@router.post("/logout")
async def logout(request: Request, response: Response):
    """Invalidate the current session."""
    token = extract_session_token(request)
    if token:
        try:
            await revoke_session(decode_jwt(token))
        except jwt.PyJWTError:
            log.info("auth.logout_invalid_session")

    response.delete_cookie(SESSION_COOKIE, path="/")
    response.delete_cookie(CSRF_COOKIE, path="/")
    return {"message": "Logged out"}


@router.get("/me", response_model=MeResponse)
async def me(auth: AuthenticatedUser = Depends(require_auth)):
    return _me(auth)


@router.patch("/me", response_model=MeResponse)
async def update_me(
    body: ProfileUpdateRequest,
    auth: AuthenticatedUser = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
):
    await user_service.update_profile(auth.user, body, session)
    return _me(auth)


@router.post("/password", status_code=204)
async def change_password(
    body: PasswordChangeRequest,
    auth: AuthenticatedUser = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
):
    await user_service.change_password(auth.user, body, session)
