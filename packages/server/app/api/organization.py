"""
Organization and membership endpoints (scoped to the caller's organization).

GET   /api/organization                                  Current org
PATCH /api/organization                                  Update org (owner/admin)
GET   /api/organization/members                          List members
PATCH /api/organization/members/{memberId}               Change role (owner/admin)
POST  /api/organization/members/{memberId}/deactivate    Deactivate (owner/admin)
POST  /api/organization/members/{memberId}/reactivate    Reactivate (owner/admin)
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, require_manager, require_member
from app.core.database import get_session
from app.services import organizations as org_service
from parley_shared.schemas.organizations import (
    MemberListResponse,
    MemberResponse,
    MemberRoleUpdateRequest,
    OrgResponse,
    OrgUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=OrgResponse)
async def get_organization(auth: AuthenticatedUser = Depends(require_member)):
    return OrgResponse.model_validate(auth.organization)


@router.patch("", response_model=OrgResponse)
async def update_organization(
    body: OrgUpdateRequest,
    auth: AuthenticatedUser = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    """Rename the org or mark onboarding complete (owner/admin)."""
    org = await org_service.update_organization(auth.organization, body, session)
    return OrgResponse.model_validate(org)


@router.get("/members", response_model=MemberListResponse)
async def list_members(
    auth: AuthenticatedUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    items = await org_service.get_members(auth.org_id, session)
    return MemberListResponse(data=[MemberResponse(**item) for item in items])


@router.patch("/members/{memberId}", response_model=MemberResponse)
async def update_member_role(
    memberId: uuid.UUID,
    body: MemberRoleUpdateRequest,
    auth: AuthenticatedUser = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    info = await org_service.update_member_role(
        auth.org_id, memberId, body.role, auth.role, session
    )
    return MemberResponse(**info)


@router.post("/members/{memberId}/deactivate", response_model=MemberResponse)
async def deactivate_member(
    memberId: uuid.UUID,
    auth: AuthenticatedUser = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    info = await org_service.deactivate_member(
        auth.org_id,
        memberId,
        caller_user_id=auth.user_id,
        caller_role=auth.role,
        session=session,
    )
    return MemberResponse(**info)


@router.post("/members/{memberId}/reactivate", response_model=MemberResponse)
async def reactivate_member(
    memberId: uuid.UUID,
    auth: AuthenticatedUser = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    info = await org_service.reactivate_member(auth.org_id, memberId, session)
    return MemberResponse(**info)
