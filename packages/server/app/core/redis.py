"""Redis connection and the session revocation list stored in it."""

from __future__ import annotations

import redis.asyncio as redis

from app.core.config import get_settings

settings = get_settings()

REVOKED_SESSION_KEY = "parley:session:revoked:{jti}"

_client: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    """Get or create the shared Redis client."""
    global _client
    if _client is None:
        _client = redis.from_url(settings.redis_url, decode_responses=True)
    return _client


async def close_redis() -> None:
    """Close the Redis client on shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


async def mark_session_revoked(jti: str, ttl_seconds: int) -> None:
    """Remember a revoked session id until its JWT would have expired anyway."""
    client = await get_redis()
    await client.setex(REVOKED_SESSION_KEY.format(jti=jti), max(ttl_seconds, 1), "1")


async def is_session_revoked(jti: str) -> bool:
    client = await get_redis()
    return await client.exists(REVOKED_SESSION_KEY.format(jti=jti)) > 0
