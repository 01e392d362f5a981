"""Account and session schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from .common import Role


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class SignupRequest(BaseModel):
    """Create an account. Without an invite token a new organization is created."""
    email: EmailStr
    name: str = Field(min_length=1, max_length=200)
    password: str
    invite_token: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    model_preference: Optional[str] = Field(default=None, max_length=100)


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    model_preference: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class MembershipSummary(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    role: Role
    is_deactivated: bool


class OrganizationSummary(BaseModel):
    id: uuid.UUID
    name: str
    onboarding_completed: bool


class MeResponse(BaseModel):
    """The authenticated user with their organization context."""
    user: UserResponse
    organization: Optional[OrganizationSummary] = None
    membership: Optional[MembershipSummary] = None


class AuthResponse(BaseModel):
    user_id: str
    email: str
    message: str
