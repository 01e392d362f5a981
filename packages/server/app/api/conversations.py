"""
Conversation and item endpoints. Conversations belong to the calling user;
anyone else's conversation is reported as not found.

GET    /api/conversations                          List with items
POST   /api/conversations                          Create
GET    /api/conversations/{conversationId}         Get with items
PATCH  /api/conversations/{conversationId}         Rename
DELETE /api/conversations/{conversationId}         Delete
POST   /api/conversations/{conversationId}/items   Append an item
PATCH  /api/items/{itemId}                         Update item content/status
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, require_active_auth
from app.core.database import get_session
from app.services import conversations as conversation_service
from parley_shared.schemas.conversations import (
    ConversationCreateRequest,
    ConversationResponse,
    ConversationUpdateRequest,
    ItemCreateRequest,
    ItemResponse,
    ItemUpdateRequest,
)

router = APIRouter()
items_router = APIRouter()


@router.get("", response_model=list[ConversationResponse])
async def list_conversations(
    auth: AuthenticatedUser = Depends(require_active_auth),
    session: AsyncSession = Depends(get_session),
):
    return await conversation_service.list_conversations(auth.user_id, session)


@router.post("", response_model=ConversationResponse, status_code=201)
async def create_conversation(
    body: ConversationCreateRequest,
    auth: AuthenticatedUser = Depends(require_active_auth),
    session: AsyncSession = Depends(get_session),
):
    return await conversation_service.create_conversation(auth.user_id, body, session)


@router.get("/{conversationId}", response_model=ConversationResponse)
async def get_conversation(
    conversationId: uuid.UUID,
    auth: AuthenticatedUser = Depends(require_active_auth),
    session: AsyncSession = Depends(get_session),
):
    return await conversation_service.get_conversation(conversationId, auth.user_id, session)


@router.patch("/{conversationId}", response_model=ConversationResponse)
async def rename_conversation(
    conversationId: uuid.UUID,
    body: ConversationUpdateRequest,
    auth: AuthenticatedUser = Depends(require_active_auth),
    session: AsyncSession = Depends(get_session),
):
    return await conversation_service.rename_conversation(
        conversationId, auth.user_id, body.title, session
    )


@router.delete("/{conversationId}", status_code=204)
async def delete_conversation(
    conversationId: uuid.UUID,
    auth: AuthenticatedUser = Depends(require_active_auth),
    session: AsyncSession = Depends(get_session),
):
    await conversation_service.delete_conversation(conversationId, auth.user_id, session)


@router.post("/{conversationId}/items", response_model=ItemResponse, status_code=201)
async def add_item(
    conversationId: uuid.UUID,
    body: ItemCreateRequest,
    auth: AuthenticatedUser = Depends(require_active_auth),
    session: AsyncSession = Depends(get_session),
):
    return await conversation_service.add_item(conversationId, auth.user_id, body.item, session)


@items_router.patch("/{itemId}", response_model=ItemResponse)
async def update_item(
    itemId: uuid.UUID,
    body: ItemUpdateRequest,
    auth: AuthenticatedUser = Depends(require_active_auth),
    session: AsyncSession = Depends(get_session),
):
    return await conversation_service.update_item(itemId, auth.user_id, body, session)
