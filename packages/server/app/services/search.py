"""
Conversation search with organization-scoped impersonation.

Impersonation never fails loudly: any check that does not pass makes the
search run as the requester, and the HTTP response looks the same either
way. Each decision is written to the audit log instead.
"""

from __future__ import annotations

import uuid
from typing import Optional

import sqlalchemy as sa
import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import AuthenticatedUser
from app.core.permissions import can_impersonate, can_manage_organization
from app.models.conversation import Conversation
from app.models.item import Item
from app.models.organization import Organization
from app.services import organizations as org_service

log = structlog.get_logger()

SNIPPET_BEFORE = 40
SNIPPET_AFTER = 80


def clamp_limit(limit: int, maximum: int) -> int:
    return max(1, min(limit, maximum))


def _escape_like(query: str) -> str:
    return query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _snippet(text: str, query: str) -> Optional[str]:
    index = text.lower().find(query.lower())
    if index < 0:
        return None
    start = max(0, index - SNIPPET_BEFORE)
    end = min(len(text), index + len(query) + SNIPPET_AFTER)
    snippet = text[start:end].strip()
    if start > 0:
        snippet = "..." + snippet
    if end < len(text):
        snippet += "..."
    return snippet


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------

def _denied(requester: AuthenticatedUser, impersonate_user_id: str, reason: str) -> uuid.UUID:
    log.warning(
        "search.impersonation_denied",
        requester_id=str(requester.user_id),
        impersonate_user_id=impersonate_user_id,
        reason=reason,
    )
    return requester.user_id


async def resolve_effective_search_user(
    requester: AuthenticatedUser,
    impersonate_user_id: Optional[str],
    requester_org: Optional[Organization],
    session: AsyncSession,
) -> uuid.UUID:
    """Decide whose conversations to search.

    Returns ``impersonate_user_id`` only when the requester manages their
    organization, the target is a member of that same organization and the
    role hierarchy allows acting as the target. Otherwise the requester's
    own id.
    """
    if not impersonate_user_id:
        return requester.user_id

    if requester_org is None:
        return _denied(requester, impersonate_user_id, "no_organization")

    requester_role = requester.role
    if not can_manage_organization(requester_role):
        return _denied(requester, impersonate_user_id, "insufficient_role")

    if not await org_service.is_user_in_org(impersonate_user_id, requester_org.id, session):
        return _denied(requester, impersonate_user_id, "not_in_organization")

    # is_user_in_org only accepts well-formed ids
    target_id = uuid.UUID(impersonate_user_id)
    members = await org_service.get_members(requester_org.id, session)
    target_member = next((m for m in members if m["user_id"] == target_id), None)
    if target_member is None:
        return _denied(requester, impersonate_user_id, "member_not_found")

    if not can_impersonate(requester_role, target_member["role"]):
        return _denied(requester, impersonate_user_id, "role_hierarchy")

    log.info(
        "search.impersonation_granted",
        requester_id=str(requester.user_id),
        impersonate_user_id=impersonate_user_id,
        org_id=str(requester_org.id),
        target_role=target_member["role"],
    )
    return target_member["user_id"]


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

async def search_conversations(
    user_id: uuid.UUID, query: str, limit: int, session: AsyncSession
) -> list[dict]:
    """Conversations of ``user_id`` whose title or item content contains ``query``.

    Case-insensitive substring match, most recently updated first. An empty
    query returns the most recent conversations.
    """
    query = query.strip()
    stmt = select(Conversation).where(Conversation.user_id == user_id)

    content_text = Item.search_text
    pattern = f"%{_escape_like(query)}%"
    if query:
        matching = select(Item.conversation_id).where(content_text.ilike(pattern, escape="\\"))
        stmt = stmt.where(
            sa.or_(
                Conversation.title.ilike(pattern, escape="\\"),
                Conversation.id.in_(matching),
            )
        )

    result = await session.execute(
        stmt.order_by(Conversation.updated_at.desc()).limit(limit)
    )
    conversations = list(result.scalars().all())

    snippets: dict[uuid.UUID, str] = {}
    if query and conversations:
        items = await session.execute(
            select(Item)
            .where(
                Item.conversation_id.in_([c.id for c in conversations]),
                content_text.ilike(pattern, escape="\\"),
            )
            .order_by(Item.conversation_id, Item.position)
        )
        for item in items.scalars().all():
            if item.conversation_id in snippets:
                continue
            snippet = _snippet(item.search_text or "", query)
            if snippet:
                snippets[item.conversation_id] = snippet

    return [
        {
            "id": conv.id,
            "title": conv.title,
            "snippet": snippets.get(conv.id),
            "created_at": conv.created_at,
            "updated_at": conv.updated_at,
        }
        for conv in conversations
    ]
