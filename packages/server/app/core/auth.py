"""
Authentication and Authorization for Parley.

Supports:
- Email/Password accounts with bcrypt hashes
- JWT sessions (cookie for browsers, Bearer header for API clients)
- Session revocation list in Redis
- Organization context resolution (user -> membership -> organization)
- Role-based authorization dependencies
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
import structlog
from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.database import get_session
from app.core.permissions import as_role, can_manage_organization
from app.core.redis import is_session_revoked, mark_session_revoked
from app.models.member import Member
from app.models.organization import Organization
from app.models.user import User

log = structlog.get_logger()
settings = get_settings()

SESSION_COOKIE = "parley_session"
CSRF_COOKIE = "parley_csrf"

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a password using bcrypt with cost factor 12."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12)).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode(), hashed.encode())


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    user_id: uuid.UUID,
    *,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """Create a signed session JWT. Returns (token, jti)."""
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(days=settings.session_expire_days))
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, jti


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


async def revoke_session(payload: dict) -> None:
    """Revoke a decoded session until its natural expiry."""
    jti = payload.get("jti")
    if not jti:
        return
    remaining = int(payload.get("exp", 0) - datetime.now(timezone.utc).timestamp())
    await mark_session_revoked(jti, remaining)


def generate_csrf_token() -> str:
    """Generate a random CSRF token."""
    return secrets.token_urlsafe(32)


def extract_session_token(request: Request) -> Optional[str]:
    """Session JWT from the Authorization header, falling back to the cookie."""
    authorization = request.headers.get("Authorization", "")
    if authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return request.cookies.get(SESSION_COOKIE)


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

class AuthenticatedUser:
    """Container for an authenticated user + their org context.

    ``organization`` and ``membership`` are None for a user who has not
    joined (or created) an organization yet.
    """

    def __init__(
        self,
        user: User,
        organization: Optional[Organization] = None,
        membership: Optional[Member] = None,
    ):
        self.user = user
        self.organization = organization
        self.membership = membership
        self.user_id = user.id

    @property
    def org_id(self) -> Optional[uuid.UUID]:
        return self.organization.id if self.organization else None

    @property
    def role(self) -> Optional[str]:
        return self.membership.role if self.membership else None


async def load_auth_context(user_id: uuid.UUID, session: AsyncSession) -> Optional[AuthenticatedUser]:
    """Load a user with their (first) membership and organization."""
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        return None

    result = await session.execute(
        select(Member, Organization)
        .join(Organization, Organization.id == Member.organization_id)
        .where(Member.user_id == user_id)
        .order_by(Member.created_at)
        .limit(1)
    )
    row = result.first()
    if not row:
        return AuthenticatedUser(user=user)
    membership, organization = row
    return AuthenticatedUser(user=user, organization=organization, membership=membership)


async def require_auth(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> AuthenticatedUser:
    """Resolve the session to a user. 401 when missing, invalid or revoked."""
    token = extract_session_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Authentication required")

    try:
        payload = decode_jwt(token)
        user_id = uuid.UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    jti = payload.get("jti")
    if jti and await is_session_revoked(jti):
        raise HTTPException(status_code=401, detail="Session has been revoked")

    auth = await load_auth_context(user_id, session)
    if not auth:
        raise HTTPException(status_code=401, detail="User not found")

    request.state.auth = auth
    return auth


async def require_active_auth(
    auth: AuthenticatedUser = Depends(require_auth),
) -> AuthenticatedUser:
    """Like require_auth, but a deactivated membership is refused."""
    if auth.membership and auth.membership.is_deactivated:
        log.info("auth.deactivated_member_refused", user_id=str(auth.user_id))
        raise HTTPException(status_code=403, detail="Membership has been deactivated")
    return auth


# ---------------------------------------------------------------------------
# Authorization dependencies (role checks)
# ---------------------------------------------------------------------------

async def require_member(
    auth: AuthenticatedUser = Depends(require_active_auth),
) -> AuthenticatedUser:
    """Any active member of an organization."""
    if auth.organization is None or as_role(auth.role) is None:
        raise HTTPException(status_code=404, detail="Organization not found")
    return auth


async def require_manager(
    auth: AuthenticatedUser = Depends(require_member),
) -> AuthenticatedUser:
    """Requires owner or admin role."""
    if not can_manage_organization(auth.role):
        raise HTTPException(status_code=403, detail="Owner or admin access required")
    return auth
