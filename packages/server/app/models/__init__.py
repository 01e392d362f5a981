# SQLModel definitions, imported here to ensure metadata is populated for Alembic.
from .base import CreatedAtMixin, TimestampMixin, UUIDMixin  # noqa: F401
from .user import User  # noqa: F401
from .organization import Organization  # noqa: F401
from .member import Member  # noqa: F401
from .invitation import Invitation  # noqa: F401
from .repository import Repository  # noqa: F401
from .conversation import Conversation  # noqa: F401
from .item import Item  # noqa: F401
