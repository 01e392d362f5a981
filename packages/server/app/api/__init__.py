"""
API Router

All endpoints below are scoped to the authenticated user and, where
relevant, their organization. Mounted under /api.
"""

from fastapi import APIRouter

from . import conversations, invitations, organization, repositories, search

router = APIRouter()

router.include_router(organization.router, prefix="/organization", tags=["Organization"])
router.include_router(invitations.router, prefix="/invitations", tags=["Invitations"])
router.include_router(repositories.router, prefix="/repositories", tags=["Repositories"])
router.include_router(conversations.router, prefix="/conversations", tags=["Conversations"])
router.include_router(conversations.items_router, prefix="/items", tags=["Conversations"])
router.include_router(search.router, prefix="/search", tags=["Search"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: returns version and available endpoints."""
    return {
        "api": "parley",
        "version": "0.1.0",
        "endpoints": [
            "/organization",
            "/organization/members",
            "/invitations",
            "/repositories",
            "/conversations",
            "/items",
            "/search",
        ],
    }
