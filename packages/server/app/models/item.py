"""Conversation item: message, tool call/output, system notice or review note."""

from typing import Any, Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, JSONType


class Item(CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "items"
    __table_args__ = (
        sa.UniqueConstraint("conversation_id", "position", name="items_conversation_position_unique"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    conversation_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid,
            sa.ForeignKey("conversations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    position: int = Field(nullable=False)  # insertion order within the conversation
    type: str = Field(nullable=False)  # message | tool_call | tool_output | system | review
    role: Optional[str] = None  # user | assistant
    content: Optional[Any] = Field(default=None, sa_column=sa.Column(JSONType, nullable=True))
    search_text: Optional[str] = Field(default=None, sa_column=sa.Column(sa.Text, nullable=True))
    tool_call_id: Optional[str] = None  # tool_output -> originating tool_call
    status: Optional[str] = None  # in_progress | completed | cancelled
