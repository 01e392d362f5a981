"""
User service: account creation, credential checks and profile updates.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import hash_password, verify_password
from app.models.user import User
from app.services import invitations as invitation_service
from app.services import organizations as org_service
from parley_shared.schemas.users import (
    PasswordChangeRequest,
    ProfileUpdateRequest,
    SignupRequest,
)

log = structlog.get_logger()

MIN_PASSWORD_LENGTH = 8


def _check_password_strength(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )


async def get_user_by_email(email: str, session: AsyncSession) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def signup(req: SignupRequest, session: AsyncSession) -> User:
    """Create a user. With an invite token they join that org, otherwise they own a new one."""
    _check_password_strength(req.password)

    if await get_user_by_email(req.email, session):
        raise HTTPException(status_code=409, detail="Email already registered")

    if req.invite_token and not await invitation_service.get_invitation_by_token(
        req.invite_token, session
    ):
        raise HTTPException(status_code=400, detail="Invitation is invalid or has expired")

    user = User(
        id=uuid.uuid4(),
        email=req.email.lower(),
        name=req.name,
        password_hash=hash_password(req.password),
    )
    session.add(user)
    await session.flush()

    if req.invite_token:
        await invitation_service.accept_invitation(req.invite_token, user.id, session)
    else:
        await org_service.create_organization(user.id, session)

    log.info("user.signed_up", user_id=str(user.id), via_invitation=bool(req.invite_token))
    return user


async def authenticate(email: str, password: str, session: AsyncSession) -> User:
    user = await get_user_by_email(email, session)
    if not user or not verify_password(password, user.password_hash):
        log.warning("auth.login_failure", email=email.lower())
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return user


async def update_profile(
    user: User, req: ProfileUpdateRequest, session: AsyncSession
) -> User:
    if req.name is not None:
        user.name = req.name
    if req.model_preference is not None:
        user.model_preference = req.model_preference

    session.add(user)
    await session.flush()
    log.info("user.updated", user_id=str(user.id))
    return user


async def change_password(
    user: User, req: PasswordChangeRequest, session: AsyncSession
) -> None:
    if not verify_password(req.current_password, user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    _check_password_strength(req.new_password)

    user.password_hash = hash_password(req.new_password)
    session.add(user)
    await session.flush()
    log.info("user.password_changed", user_id=str(user.id))
