"""
Repository endpoints.

GET    /api/repositories                 List linked repositories
POST   /api/repositories                 Link a GitHub repository (owner/admin)
DELETE /api/repositories/{repositoryId}  Unlink (owner/admin)
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, require_manager, require_member
from app.core.database import get_session
from app.services import repositories as repo_service
from parley_shared.schemas.repositories import (
    RepositoryCreateRequest,
    RepositoryListResponse,
    RepositoryResponse,
)

router = APIRouter()


@router.get("", response_model=RepositoryListResponse)
async def list_repositories(
    auth: AuthenticatedUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    repos = await repo_service.list_repositories(auth.org_id, session)
    return RepositoryListResponse(data=[RepositoryResponse.model_validate(r) for r in repos])


@router.post("", response_model=RepositoryResponse, status_code=201)
async def link_repository(
    body: RepositoryCreateRequest,
    auth: AuthenticatedUser = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    repo = await repo_service.link_repository(auth.org_id, body, session)
    return RepositoryResponse.model_validate(repo)


@router.delete("/{repositoryId}", status_code=204)
async def unlink_repository(
    repositoryId: uuid.UUID,
    auth: AuthenticatedUser = Depends(require_manager),
    session: AsyncSession = Depends(get_session),
):
    await repo_service.unlink_repository(auth.org_id, repositoryId, session)
