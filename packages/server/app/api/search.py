"""
Conversation search.

GET /api/search?q=<text>&limit=<n>&impersonate=<userId>

Owners and admins may search on behalf of a lower-ranked member of their
own organization. A refused impersonation is not an error: the search
silently runs as the caller (see app.services.search).
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, require_active_auth
from app.core.config import get_settings
from app.core.database import get_session
from app.services import search as search_service
from parley_shared.schemas.conversations import SearchResponse

settings = get_settings()
router = APIRouter()


@router.get("", response_model=SearchResponse)
async def search(
    q: str = Query(default="", max_length=500),
    limit: int = Query(default=settings.search_default_limit),
    impersonate: Optional[str] = Query(default=None),
    auth: AuthenticatedUser = Depends(require_active_auth),
    session: AsyncSession = Depends(get_session),
):
    """Search conversations by title and item content."""
    target_user_id = await search_service.resolve_effective_search_user(
        auth, impersonate, auth.organization, session
    )
    results = await search_service.search_conversations(
        target_user_id,
        q,
        search_service.clamp_limit(limit, settings.search_max_limit),
        session,
    )
    return SearchResponse(results=results)
