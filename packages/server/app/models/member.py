"""Organization membership with a role."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class Member(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "members"
    __table_args__ = (
        sa.UniqueConstraint("user_id", "organization_id", name="user_org_unique"),
    )

    user_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
        )
    )
    organization_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid,
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    role: str = Field(nullable=False, default="member")  # owner | admin | member
    deactivated_at: Optional[datetime] = Field(
        default=None, sa_type=sa.DateTime(timezone=True)
    )  # null = active

    @property
    def is_deactivated(self) -> bool:
        return self.deactivated_at is not None
