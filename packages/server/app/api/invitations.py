"""
Invitation endpoints.

POST   /api/invitations                   Create (role limited by caller's role)
GET    /api/invitations                   List unexpired (owner/admin)
DELETE /api/invitations/{invitationId}    Revoke (owner/admin)
GET    /api/invitations/{token}/details   Public lookup
POST   /api/invitations/{token}/accept    Join the org as the current user
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, require_auth, require_manager
from app.core.database import get_session
from app.services import invitations as invitation_service
from parley_shared.schemas.organizations import (
    InvitationCreateRequest,
    InvitationListResponse,
    InvitationLookupResponse,
    InvitationResponse,
)

router = APIRouter()


@router.post("", response_model=InvitationResponse, status_code=201)
async def create_invitation(
    body: InvitationCreateRequest,
    auth: AuthenticatedUser = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    invitation = await invitation_service.create_invitation(
        auth.org_id, body.role, auth.role, session
    )
    return InvitationResponse.model_validate(invitation)


@router.get("", response_model=InvitationListResponse)
async def list_invitations(
    auth: AuthenticatedUser = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    invitations = await invitation_service.list_invitations(auth.org_id, session)
    return InvitationListResponse(
        data=[InvitationResponse.model_validate(i) for i in invitations]
    )


@router.delete("/{invitationId}", status_code=204)
async def revoke_invitation(
    invitationId: uuid.UUID,
    auth: AuthenticatedUser = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    await invitation_service.revoke_invitation(invitationId, auth.org_id, session)


@router.get("/{token}/details", response_model=InvitationLookupResponse)
async def lookup_invitation(
    token: str,
    session: AsyncSession = Depends(get_session),
):
    """Public: what accepting this invitation would do."""
    info = await invitation_service.lookup_invitation(token, session)
    return InvitationLookupResponse(**info)


@router.post("/{token}/accept")
async def accept_invitation(
    token: str,
    auth: AuthenticatedUser = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
):
    accepted = await invitation_service.accept_invitation(token, auth.user_id, session)
    if not accepted:
        raise HTTPException(status_code=404, detail="Invitation not found or expired")
    return {"message": "Invitation accepted"}
