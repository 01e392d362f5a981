"""
Organization service: org lookup/update and membership management.
"""

from __future__ import annotations

import uuid
from typing import Optional, Union

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.permissions import as_role, can_deactivate_member, can_manage_organization
from app.models.base import utcnow
from app.models.member import Member
from app.models.organization import Organization
from app.models.user import User
from parley_shared.schemas.common import Role
from parley_shared.schemas.organizations import OrgUpdateRequest

log = structlog.get_logger()


def _member_dict(member: Member, user: User) -> dict:
    return {
        "id": member.id,
        "user_id": member.user_id,
        "organization_id": member.organization_id,
        "role": member.role,
        "is_deactivated": member.is_deactivated,
        "deactivated_at": member.deactivated_at,
        "created_at": member.created_at,
        "user": {"id": user.id, "email": user.email, "name": user.name},
    }


def _coerce_uuid(value: Union[str, uuid.UUID]) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

async def create_organization(
    owner_id: uuid.UUID, session: AsyncSession, name: str = "My Organization"
) -> tuple[Organization, Member]:
    """Create an org and make ``owner_id`` its owner."""
    org = Organization(name=name)
    session.add(org)
    await session.flush()

    membership = Member(user_id=owner_id, organization_id=org.id, role=Role.OWNER.value)
    session.add(membership)
    await session.flush()

    log.info("org.created", org_id=str(org.id), owner_id=str(owner_id))
    return org, membership


async def update_organization(
    org: Organization, req: OrgUpdateRequest, session: AsyncSession
) -> Organization:
    if req.name is not None:
        org.name = req.name
    if req.onboarding_completed is not None:
        org.onboarding_completed = req.onboarding_completed

    org.updated_at = utcnow()
    session.add(org)
    await session.flush()

    log.info("org.updated", org_id=str(org.id))
    return org


# ---------------------------------------------------------------------------
# Membership lookups
# ---------------------------------------------------------------------------

async def is_user_in_org(
    user_id: Union[str, uuid.UUID], org_id: uuid.UUID, session: AsyncSession
) -> bool:
    """True when ``user_id`` holds a membership in ``org_id``. Malformed ids are never members."""
    uid = _coerce_uuid(user_id)
    if uid is None:
        return False
    result = await session.execute(
        select(Member.id).where(Member.user_id == uid, Member.organization_id == org_id)
    )
    return result.first() is not None


async def get_members(org_id: uuid.UUID, session: AsyncSession) -> list[dict]:
    """All members of an org with their user info, oldest membership first."""
    result = await session.execute(
        select(Member, User)
        .join(User, User.id == Member.user_id)
        .where(Member.organization_id == org_id)
        .order_by(Member.created_at)
    )
    return [_member_dict(member, user) for member, user in result.all()]


async def _get_member_row(
    member_id: uuid.UUID, org_id: uuid.UUID, session: AsyncSession
) -> Member:
    result = await session.execute(
        select(Member).where(Member.id == member_id, Member.organization_id == org_id)
    )
    member = result.scalar_one_or_none()
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    return member


async def _with_user(member: Member, session: AsyncSession) -> dict:
    result = await session.execute(select(User).where(User.id == member.user_id))
    return _member_dict(member, result.scalar_one())


# ---------------------------------------------------------------------------
# Membership management
# ---------------------------------------------------------------------------

async def update_member_role(
    org_id: uuid.UUID,
    member_id: uuid.UUID,
    new_role: Role,
    caller_role: Optional[str],
    session: AsyncSession,
) -> dict:
    """Change a member's role. Owners keep their role; admins may only assign member."""
    if not can_manage_organization(caller_role):
        raise HTTPException(status_code=403, detail="Owner or admin access required")
    if new_role == Role.OWNER:
        raise HTTPException(status_code=400, detail="Ownership cannot be assigned")
    if as_role(caller_role) == Role.ADMIN and new_role != Role.MEMBER:
        raise HTTPException(status_code=403, detail="Admins can only assign the member role")

    member = await _get_member_row(member_id, org_id, session)
    if member.role == Role.OWNER.value:
        raise HTTPException(status_code=409, detail="Cannot change owner's role")

    member.role = new_role.value
    session.add(member)
    await session.flush()

    log.info("member.role_updated", member_id=str(member_id), org_id=str(org_id), role=new_role.value)
    return await _with_user(member, session)


async def deactivate_member(
    org_id: uuid.UUID,
    member_id: uuid.UUID,
    caller_user_id: uuid.UUID,
    caller_role: Optional[str],
    session: AsyncSession,
) -> dict:
    """Deactivate a member. Their session stays valid but is refused as inactive."""
    member = await _get_member_row(member_id, org_id, session)

    if member.user_id == caller_user_id:
        raise HTTPException(status_code=400, detail="Cannot deactivate yourself")
    if member.role == Role.OWNER.value:
        raise HTTPException(status_code=409, detail="Cannot deactivate the owner")
    if not can_deactivate_member(caller_role, member.role):
        raise HTTPException(status_code=403, detail="Not allowed to deactivate this member")

    member.deactivated_at = utcnow()
    session.add(member)
    await session.flush()

    log.info("member.deactivated", member_id=str(member_id), org_id=str(org_id))
    return await _with_user(member, session)


async def reactivate_member(
    org_id: uuid.UUID, member_id: uuid.UUID, session: AsyncSession
) -> dict:
    member = await _get_member_row(member_id, org_id, session)
    member.deactivated_at = None
    session.add(member)
    await session.flush()

    log.info("member.reactivated", member_id=str(member_id), org_id=str(org_id))
    return await _with_user(member, session)
