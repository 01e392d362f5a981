"""Conversation model, owned by a single user."""

import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Conversation(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "conversations"

    user_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
        )
    )
    title: str = Field(nullable=False, default="New Chat")
