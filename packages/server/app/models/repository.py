"""GitHub repository linked to an organization."""

from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class Repository(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "repositories"
    __table_args__ = (
        sa.UniqueConstraint("organization_id", "full_name", name="repositories_org_full_name_unique"),
    )

    organization_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid,
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    github_repo_id: Optional[str] = None
    name: str = Field(nullable=False)
    full_name: str = Field(nullable=False)
    clone_url: str = Field(nullable=False)
    is_private: bool = Field(default=False, nullable=False)
    clone_status: str = Field(default="pending", nullable=False)  # pending | cloning | ready | failed
