"""Organization model (tenant boundary)."""

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Organization(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "organizations"

    name: str = Field(nullable=False, default="My Organization")
    onboarding_completed: bool = Field(default=False, nullable=False)
