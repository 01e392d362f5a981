"""User model."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class User(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "users"

    email: str = Field(unique=True, index=True, nullable=False)  # stored lower-cased
    name: str = Field(nullable=False)
    password_hash: str = Field(nullable=False)  # bcrypt
    model_preference: Optional[str] = Field(default=None)
