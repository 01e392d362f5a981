"""
Invitation service: single-use, expiring invitation tokens.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import timedelta
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.permissions import can_create_invitation_with_role
from app.models.base import utcnow
from app.models.invitation import Invitation
from app.models.member import Member
from app.models.organization import Organization
from parley_shared.schemas.common import Role

log = structlog.get_logger()
settings = get_settings()


def generate_invitation_token() -> str:
    """64 hex characters (32 random bytes)."""
    return secrets.token_hex(32)


async def create_invitation(
    org_id: uuid.UUID,
    role: Role,
    caller_role: Optional[str],
    session: AsyncSession,
) -> Invitation:
    if not can_create_invitation_with_role(caller_role, role):
        raise HTTPException(status_code=403, detail=f"Not allowed to invite with role '{role.value}'")

    invitation = Invitation(
        organization_id=org_id,
        token=generate_invitation_token(),
        role=role.value,
        expires_at=utcnow() + timedelta(hours=settings.invitation_expiry_hours),
    )
    session.add(invitation)
    await session.flush()

    log.info("invitation.created", invitation_id=str(invitation.id), org_id=str(org_id), role=role.value)
    return invitation


async def get_invitation_by_token(
    token: str, session: AsyncSession
) -> Optional[Invitation]:
    """The invitation for ``token`` if it has not expired."""
    result = await session.execute(
        select(Invitation).where(Invitation.token == token, Invitation.expires_at > utcnow())
    )
    return result.scalar_one_or_none()


async def lookup_invitation(token: str, session: AsyncSession) -> dict:
    invitation = await get_invitation_by_token(token, session)
    if not invitation:
        raise HTTPException(status_code=404, detail="Invitation not found or expired")
    result = await session.execute(
        select(Organization).where(Organization.id == invitation.organization_id)
    )
    org = result.scalar_one()
    return {
        "organization_id": org.id,
        "organization_name": org.name,
        "role": invitation.role,
        "expires_at": invitation.expires_at,
    }


async def list_invitations(org_id: uuid.UUID, session: AsyncSession) -> list[Invitation]:
    """Unexpired invitations of an org, oldest first."""
    result = await session.execute(
        select(Invitation)
        .where(Invitation.organization_id == org_id, Invitation.expires_at > utcnow())
        .order_by(Invitation.created_at)
    )
    return list(result.scalars().all())


async def revoke_invitation(
    invitation_id: uuid.UUID, org_id: uuid.UUID, session: AsyncSession
) -> None:
    result = await session.execute(
        select(Invitation).where(
            Invitation.id == invitation_id, Invitation.organization_id == org_id
        )
    )
    invitation = result.scalar_one_or_none()
    if not invitation:
        raise HTTPException(status_code=404, detail="Invitation not found")

    await session.delete(invitation)
    await session.flush()
    log.info("invitation.revoked", invitation_id=str(invitation_id), org_id=str(org_id))


async def accept_invitation(
    token: str, user_id: uuid.UUID, session: AsyncSession
) -> bool:
    """Join the invitation's org with its role and consume the token.

    Returns False when the token is unknown or expired. A user who is
    already a member keeps their membership; the token is still consumed.
    """
    invitation = await get_invitation_by_token(token, session)
    if not invitation:
        return False

    result = await session.execute(
        select(Member).where(
            Member.user_id == user_id,
            Member.organization_id == invitation.organization_id,
        )
    )
    if result.scalar_one_or_none() is None:
        session.add(
            Member(
                user_id=user_id,
                organization_id=invitation.organization_id,
                role=invitation.role,
            )
        )
        log.info(
            "member.joined",
            user_id=str(user_id),
            org_id=str(invitation.organization_id),
            role=invitation.role,
        )

    await session.delete(invitation)
    await session.flush()
    log.info("invitation.accepted", invitation_id=str(invitation.id), user_id=str(user_id))
    return True
