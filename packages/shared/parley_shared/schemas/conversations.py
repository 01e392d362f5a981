"""Conversation, item and search schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from .common import ItemRole, ItemStatus, ItemType

DEFAULT_CONVERSATION_TITLE = "New Chat"


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------

class ItemCreate(BaseModel):
    id: Optional[uuid.UUID] = None
    type: ItemType
    role: Optional[ItemRole] = None
    content: Optional[Any] = None
    tool_call_id: Optional[str] = Field(default=None, max_length=200)
    status: Optional[ItemStatus] = None


class ItemCreateRequest(BaseModel):
    item: ItemCreate


class ItemUpdateRequest(BaseModel):
    """Partial update. Only fields present in the request body are applied."""
    content: Optional[Any] = None
    status: Optional[ItemStatus] = None


class ItemResponse(BaseModel):
    id: uuid.UUID
    type: ItemType
    role: Optional[ItemRole] = None
    content: Optional[Any] = None
    tool_call_id: Optional[str] = None
    status: Optional[ItemStatus] = None
    created_at: datetime

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Conversations
# ---------------------------------------------------------------------------

class ConversationCreateRequest(BaseModel):
    id: Optional[uuid.UUID] = None
    title: Optional[str] = Field(default=None, max_length=200)


class ConversationUpdateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)


class ConversationResponse(BaseModel):
    id: uuid.UUID
    title: str
    items: list[ItemResponse] = []
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

class SearchResult(BaseModel):
    id: uuid.UUID
    title: str
    snippet: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SearchResponse(BaseModel):
    results: list[SearchResult]
