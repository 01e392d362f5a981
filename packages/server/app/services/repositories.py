"""
Repository service: GitHub repositories linked to an organization.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.repository import Repository
from parley_shared.schemas.common import CloneStatus
from parley_shared.schemas.repositories import RepositoryCreateRequest

log = structlog.get_logger()


async def list_repositories(org_id: uuid.UUID, session: AsyncSession) -> list[Repository]:
    result = await session.execute(
        select(Repository)
        .where(Repository.organization_id == org_id)
        .order_by(Repository.full_name)
    )
    return list(result.scalars().all())


async def link_repository(
    org_id: uuid.UUID, req: RepositoryCreateRequest, session: AsyncSession
) -> Repository:
    existing = await session.execute(
        select(Repository).where(
            Repository.organization_id == org_id,
            Repository.full_name == req.full_name,
        )
    )
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="Repository already linked")

    repo = Repository(
        organization_id=org_id,
        github_repo_id=req.github_repo_id,
        name=req.name,
        full_name=req.full_name,
        clone_url=req.clone_url,
        is_private=req.is_private,
        clone_status=CloneStatus.PENDING.value,
    )
    session.add(repo)
    await session.flush()

    log.info("repository.linked", repository_id=str(repo.id), org_id=str(org_id), full_name=req.full_name)
    return repo


async def unlink_repository(
    org_id: uuid.UUID, repository_id: uuid.UUID, session: AsyncSession
) -> None:
    result = await session.execute(
        select(Repository).where(
            Repository.id == repository_id,
            Repository.organization_id == org_id,
        )
    )
    repo = result.scalar_one_or_none()
    if not repo:
        raise HTTPException(status_code=404, detail="Repository not found")

    await session.delete(repo)
    await session.flush()
    log.info("repository.unlinked", repository_id=str(repository_id), org_id=str(org_id))
