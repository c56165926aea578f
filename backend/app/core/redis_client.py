"""
Redis client initialization and connection management.

Redis only backs token revocation; the client is created lazily by
redis-py on first command so importing this module never opens a socket.
"""

import redis.asyncio as redis
from backend.app.core.config import settings


# Create async Redis client
redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def get_redis():
    """
    Get Redis client instance.

    This can be used as a FastAPI dependency if needed.
    """
    return redis_client


async def close_redis() -> None:
    """Close the Redis connection pool on shutdown."""
    await redis_client.aclose()
