"""Single-use organization invitation."""

from datetime import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class Invitation(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "invitations"

    organization_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid,
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    token: str = Field(unique=True, index=True, nullable=False)
    role: str = Field(nullable=False, default="member")  # role assigned on accept
    expires_at: datetime = Field(nullable=False, sa_type=sa.DateTime(timezone=True))
