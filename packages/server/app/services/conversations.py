"""
Conversation service: conversations and their ordered items.

Invariants kept here:
- items are returned in insertion order (``Item.position``)
- every item insert/update moves ``Conversation.updated_at`` forward, so it
  is never older than the newest item
- the first user message retitles a conversation still called "New Chat"
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Any, Optional

import sqlalchemy as sa
import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.base import as_utc, utcnow
from app.models.conversation import Conversation
from app.models.item import Item
from parley_shared.schemas.common import ItemRole, ItemType
from parley_shared.schemas.conversations import (
    DEFAULT_CONVERSATION_TITLE,
    ConversationCreateRequest,
    ItemCreate,
    ItemUpdateRequest,
)

log = structlog.get_logger()

TITLE_MAX_CHARS = 50


def item_text(content: Any) -> str:
    """Plain text of an item's content: the string itself or its ``text`` field."""
    if isinstance(content, str):
        return content
    if isinstance(content, dict) and isinstance(content.get("text"), str):
        return content["text"]
    return ""


def searchable_text(content: Any) -> Optional[str]:
    """Text that search matches against: message text, or every scalar value.

    Keys of structured content (tool call names and arguments, outputs) are
    left out so that a field name never matches a query.
    """
    text = item_text(content)
    if text:
        return text

    values: list[str] = []

    def collect(value: Any) -> None:
        if isinstance(value, dict):
            for nested in value.values():
                collect(nested)
        elif isinstance(value, list):
            for nested in value:
                collect(nested)
        elif isinstance(value, (str, int, float)) and not isinstance(value, bool):
            values.append(str(value))

    collect(content)
    return " ".join(values) or None


def title_from_text(text: str) -> str:
    title = text[:TITLE_MAX_CHARS].strip()
    if len(text) > TITLE_MAX_CHARS:
        title += "..."
    return title


def serialize_item(item: Item) -> dict:
    return {
        "id": item.id,
        "type": item.type,
        "role": item.role,
        "content": item.content,
        "tool_call_id": item.tool_call_id,
        "status": item.status,
        "created_at": item.created_at,
    }


def serialize_conversation(conv: Conversation, items: list[Item]) -> dict:
    return {
        "id": conv.id,
        "title": conv.title,
        "items": [serialize_item(i) for i in items],
        "created_at": conv.created_at,
        "updated_at": conv.updated_at,
    }


async def _items_for(
    conversation_ids: list[uuid.UUID], session: AsyncSession
) -> dict[uuid.UUID, list[Item]]:
    grouped: dict[uuid.UUID, list[Item]] = defaultdict(list)
    if not conversation_ids:
        return grouped
    result = await session.execute(
        select(Item)
        .where(Item.conversation_id.in_(conversation_ids))
        .order_by(Item.conversation_id, Item.position)
    )
    for item in result.scalars().all():
        grouped[item.conversation_id].append(item)
    return grouped


# ---------------------------------------------------------------------------
# Conversations
# ---------------------------------------------------------------------------

async def list_conversations(user_id: uuid.UUID, session: AsyncSession) -> list[dict]:
    """All of a user's conversations, most recently updated first, with items."""
    result = await session.execute(
        select(Conversation)
        .where(Conversation.user_id == user_id)
        .order_by(Conversation.updated_at.desc())
    )
    conversations = list(result.scalars().all())
    items = await _items_for([c.id for c in conversations], session)
    return [serialize_conversation(c, items.get(c.id, [])) for c in conversations]


async def get_owned_conversation(
    conversation_id: uuid.UUID,
    user_id: uuid.UUID,
    session: AsyncSession,
    *,
    for_update: bool = False,
) -> Conversation:
    """The conversation if ``user_id`` owns it; 404 otherwise (including someone else's)."""
    stmt = select(Conversation).where(
        Conversation.id == conversation_id, Conversation.user_id == user_id
    )
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    conv = result.scalar_one_or_none()
    if not conv:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conv


async def get_conversation(
    conversation_id: uuid.UUID, user_id: uuid.UUID, session: AsyncSession
) -> dict:
    conv = await get_owned_conversation(conversation_id, user_id, session)
    items = await _items_for([conv.id], session)
    return serialize_conversation(conv, items.get(conv.id, []))


async def create_conversation(
    user_id: uuid.UUID, req: ConversationCreateRequest, session: AsyncSession
) -> dict:
    conversation_id = req.id or uuid.uuid4()
    existing = await session.execute(
        select(Conversation.id).where(Conversation.id == conversation_id)
    )
    if existing.first() is not None:
        raise HTTPException(status_code=409, detail="Conversation already exists")

    now = utcnow()
    conv = Conversation(
        id=conversation_id,
        user_id=user_id,
        title=req.title or DEFAULT_CONVERSATION_TITLE,
        created_at=now,
        updated_at=now,
    )
    session.add(conv)
    await session.flush()

    log.info("conversation.created", conversation_id=str(conv.id), user_id=str(user_id))
    return serialize_conversation(conv, [])


async def rename_conversation(
    conversation_id: uuid.UUID, user_id: uuid.UUID, title: str, session: AsyncSession
) -> dict:
    conv = await get_owned_conversation(conversation_id, user_id, session)
    conv.title = title
    conv.updated_at = utcnow()
    session.add(conv)
    await session.flush()

    items = await _items_for([conv.id], session)
    return serialize_conversation(conv, items.get(conv.id, []))


async def delete_conversation(
    conversation_id: uuid.UUID, user_id: uuid.UUID, session: AsyncSession
) -> None:
    conv = await get_owned_conversation(conversation_id, user_id, session)
    await session.execute(sa.delete(Item).where(Item.conversation_id == conv.id))
    await session.delete(conv)
    await session.flush()
    log.info("conversation.deleted", conversation_id=str(conversation_id), user_id=str(user_id))


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------

async def add_item(
    conversation_id: uuid.UUID,
    user_id: uuid.UUID,
    req: ItemCreate,
    session: AsyncSession,
) -> dict:
    """Append an item, bump the conversation and retitle on the first user message."""
    conv = await get_owned_conversation(conversation_id, user_id, session, for_update=True)

    item_id = req.id or uuid.uuid4()
    existing = await session.execute(select(Item.id).where(Item.id == item_id))
    if existing.first() is not None:
        raise HTTPException(status_code=409, detail="Item already exists")

    result = await session.execute(
        select(sa.func.coalesce(sa.func.max(Item.position), 0)).where(
            Item.conversation_id == conv.id
        )
    )
    position = result.scalar_one() + 1

    item = Item(
        id=item_id,
        conversation_id=conv.id,
        position=position,
        type=req.type.value,
        role=req.role.value if req.role else None,
        content=req.content,
        search_text=searchable_text(req.content),
        tool_call_id=req.tool_call_id,
        status=req.status.value if req.status else None,
        created_at=utcnow(),
    )
    session.add(item)

    if (
        req.type == ItemType.MESSAGE
        and req.role == ItemRole.USER
        and conv.title == DEFAULT_CONVERSATION_TITLE
    ):
        text = item_text(req.content)
        if text.strip():
            conv.title = title_from_text(text)

    conv.updated_at = max(utcnow(), as_utc(item.created_at))
    session.add(conv)
    await session.flush()

    log.info(
        "item.added",
        item_id=str(item.id),
        conversation_id=str(conv.id),
        type=item.type,
        position=position,
    )
    return serialize_item(item)


async def update_item(
    item_id: uuid.UUID,
    user_id: uuid.UUID,
    req: ItemUpdateRequest,
    session: AsyncSession,
) -> dict:
    """Apply the fields present in ``req`` and bump the parent conversation."""
    result = await session.execute(
        select(Item, Conversation)
        .join(Conversation, Conversation.id == Item.conversation_id)
        .where(Item.id == item_id, Conversation.user_id == user_id)
    )
    row = result.first()
    if not row:
        raise HTTPException(status_code=404, detail="Item not found")
    item, conv = row

    updates = req.model_dump(exclude_unset=True, mode="json")
    if "content" in updates:
        item.content = updates["content"]
        item.search_text = searchable_text(item.content)
    if "status" in updates:
        item.status = updates["status"]
    session.add(item)

    conv.updated_at = max(utcnow(), as_utc(item.created_at))
    session.add(conv)
    await session.flush()

    log.info("item.updated", item_id=str(item_id), fields=sorted(updates))
    return serialize_item(item)
