"""
Shared fixtures: in-memory SQLite database, app client and a seeded
two-organization world.
"""

from __future__ import annotations

import uuid
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import app.models  # noqa: F401
from app.core.auth import create_jwt, hash_password
from app.core.database import get_session
from app.main import app as fastapi_app
from app.models.base import utcnow
from app.models.conversation import Conversation
from app.models.item import Item
from app.models.member import Member
from app.models.organization import Organization
from app.models.user import User

PASSWORD = "correct-horse-battery"
# one bcrypt hash shared by every seeded user
PASSWORD_HASH = hash_password(PASSWORD)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def no_redis():
    """Session revocation checks never reach a real Redis."""
    with patch("app.core.auth.is_session_revoked", AsyncMock(return_value=False)), patch(
        "app.core.auth.mark_session_revoked", AsyncMock()
    ):
        yield


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(session_factory):
    async def _session_override():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_session] = _session_override
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()


def bearer(user: User) -> dict[str, str]:
    token, _ = create_jwt(user.id)
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Seeding helpers
# ---------------------------------------------------------------------------

async def add_user(session: AsyncSession, name: str) -> User:
    user = User(
        id=uuid.uuid4(),
        email=f"{name.lower()}-{uuid.uuid4().hex[:6]}@example.com",
        name=name,
        password_hash=PASSWORD_HASH,
    )
    session.add(user)
    await session.flush()
    return user


async def add_org(session: AsyncSession, name: str) -> Organization:
    org = Organization(name=name)
    session.add(org)
    await session.flush()
    return org


async def add_member(
    session: AsyncSession, user: User, org: Organization, role: str, *, deactivated: bool = False
) -> Member:
    member = Member(
        user_id=user.id,
        organization_id=org.id,
        role=role,
        deactivated_at=utcnow() if deactivated else None,
    )
    session.add(member)
    await session.flush()
    return member


async def add_conversation(
    session: AsyncSession,
    user: User,
    title: str,
    *,
    messages: tuple[str, ...] = (),
    age_minutes: int = 0,
) -> Conversation:
    stamp = utcnow() - timedelta(minutes=age_minutes)
    conv = Conversation(user_id=user.id, title=title, created_at=stamp, updated_at=stamp)
    session.add(conv)
    await session.flush()
    for position, text in enumerate(messages, start=1):
        session.add(
            Item(
                conversation_id=conv.id,
                position=position,
                type="message",
                role="user",
                content={"text": text},
                search_text=text,
                created_at=stamp,
            )
        )
    await session.flush()
    return conv


@pytest.fixture
async def world(session):
    """Two organizations with every role, each user owning one conversation.

    Org A: owner, admin, admin2, member, and a deactivated member ``former``.
    Org B: owner_b, member_b.
    """
    org_a = await add_org(session, "Org A")
    org_b = await add_org(session, "Org B")

    users = {}
    memberships = {}
    for name, org, role, deactivated in (
        ("owner", org_a, "owner", False),
        ("admin", org_a, "admin", False),
        ("admin2", org_a, "admin", False),
        ("member", org_a, "member", False),
        ("former", org_a, "member", True),
        ("owner_b", org_b, "owner", False),
        ("member_b", org_b, "member", False),
    ):
        user = await add_user(session, name)
        users[name] = user
        memberships[name] = await add_member(session, user, org, role, deactivated=deactivated)

    conversations = {}
    for index, name in enumerate(users):
        conversations[name] = await add_conversation(
            session,
            users[name],
            f"Notes of {name}",
            messages=(f"shared keyword from {name}",),
            age_minutes=index,
        )

    await session.commit()
    return SimpleNamespace(
        org_a=org_a,
        org_b=org_b,
        users=users,
        members=memberships,
        conversations=conversations,
    )
