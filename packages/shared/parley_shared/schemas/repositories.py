"""GitHub repository link schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common import CloneStatus


class RepositoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    full_name: str = Field(
        ...,
        min_length=3,
        max_length=200,
        pattern=r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$",
        description="owner/name as shown on GitHub",
    )
    clone_url: str = Field(..., min_length=1, max_length=500)
    is_private: bool = False
    github_repo_id: Optional[str] = None


class RepositoryResponse(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    github_repo_id: Optional[str] = None
    name: str
    full_name: str
    clone_url: str
    is_private: bool
    clone_status: CloneStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class RepositoryListResponse(BaseModel):
    data: list[RepositoryResponse]
