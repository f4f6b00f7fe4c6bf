"""Redis client and connection management."""

import logging

import redis.asyncio as aioredis

from src.config.settings import settings

logger = logging.getLogger(__name__)

# Global Redis client
_client: aioredis.Redis | None = None


def get_redis() -> aioredis.Redis:
    """Get the shared Redis client instance."""
    if _client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _client


async def init_redis() -> None:
    """Create the Redis client and verify connectivity."""
    global _client

    try:
        logger.info(f"Connecting to Redis at {settings.redis_url.split('@')[-1]}")
        _client = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_timeout,
        )
        await _client.ping()
        logger.info("Redis connection successful")

    except Exception as e:
        logger.error(f"Failed to initialize Redis: {e}")
        raise


async def close_redis() -> None:
    """Close the Redis connection pool gracefully."""
    global _client

    if _client is not None:
        logger.info("Closing Redis connection")
        await _client.aclose()
        _client = None
        logger.info("Redis connection closed")
