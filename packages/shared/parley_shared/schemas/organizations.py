"""
Organization, membership and invitation schemas shared between server and clients.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common import Role


# ---------------------------------------------------------------------------
# Organization
# ---------------------------------------------------------------------------

class OrgUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    onboarding_completed: Optional[bool] = None


class OrgResponse(BaseModel):
    id: uuid.UUID
    name: str
    onboarding_completed: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

class MemberUser(BaseModel):
    id: uuid.UUID
    email: str
    name: str


class MemberResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    organization_id: uuid.UUID
    role: Role
    is_deactivated: bool
    deactivated_at: Optional[datetime] = None
    created_at: datetime
    user: MemberUser


class MemberListResponse(BaseModel):
    data: list[MemberResponse]


class MemberRoleUpdateRequest(BaseModel):
    """Owners are never assigned through this request."""
    role: Role = Field(..., description="New role: admin or member")


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------

class InvitationCreateRequest(BaseModel):
    role: Role = Role.MEMBER


class InvitationResponse(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    token: str
    role: Role
    expires_at: datetime
    created_at: datetime

    model_config = {"from_attributes": True}


class InvitationListResponse(BaseModel):
    data: list[InvitationResponse]


class InvitationLookupResponse(BaseModel):
    """Public view of an invitation: no token echo, no ids beyond the org."""
    organization_id: uuid.UUID
    organization_name: str
    role: Role
    expires_at: datetime
