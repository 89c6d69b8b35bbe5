"""Login sessions stored in Redis."""

import json
import secrets
from datetime import datetime, timezone
from typing import Any, Optional

import redis.asyncio as redis

from strength_sync.core.config import get_settings

settings = get_settings()

SESSION_KEY_PREFIX = "session:"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Return the shared Redis client, creating it on first use."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


async def create_session(user_id: int, user_data: dict[str, Any]) -> str:
    """Store a new session and return its id.

    Args:
        user_id: Owner of the session.
        user_data: Extra fields kept alongside the user id.

    Returns:
        Opaque session id for the session cookie.
    """
    client = await get_redis()
    session_id = secrets.token_urlsafe(32)
    payload = {
        "user_id": user_id,
        "created_at": datetime.now(timezone.utc).isoformat(),
        **user_data,
    }
    await client.setex(
        f"{SESSION_KEY_PREFIX}{session_id}",
        settings.session_ttl_seconds,
        json.dumps(payload),
    )
    return session_id


async def get_session(session_id: str) -> Optional[dict[str, Any]]:
    """Load session data, or None when missing or expired."""
    client = await get_redis()
    data = await client.get(f"{SESSION_KEY_PREFIX}{session_id}")
    if data is None:
        return None
    return json.loads(data)


async def delete_session(session_id: str) -> bool:
    """Remove a session. Returns True if one existed."""
    client = await get_redis()
    return await client.delete(f"{SESSION_KEY_PREFIX}{session_id}") > 0
