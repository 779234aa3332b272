"""
Redis store handle for the page cache reader.
"""

from typing import Dict, List, Optional, Protocol

import redis.asyncio as redis

from shared.config import BaseConfig


class StoreReader(Protocol):
    """The read operations the cache reader needs from the store."""

    async def hgetall(self, key: str) -> Dict[str, str]: ...

    async def mget(self, keys: List[str]) -> List[Optional[str]]: ...


class PrefixedRedisStore:
    """Redis reader that prepends the site's key prefix to every key."""

    def __init__(self, client: redis.Redis, key_prefix: str = ""):
        self.redis = client
        self.key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def hgetall(self, key: str) -> Dict[str, str]:
        return await self.redis.hgetall(self._key(key))

    async def mget(self, keys: List[str]) -> List[Optional[str]]:
        return await self.redis.mget([self._key(key) for key in keys])

    async def ping(self) -> bool:
        return await self.redis.ping()

    async def close(self):
        await self.redis.aclose()


def create_store(config: BaseConfig) -> PrefixedRedisStore:
    """Create the long-lived store handle for a service."""
    client = redis.from_url(
        config.redis_url,
        encoding="utf-8",
        decode_responses=True,
        encoding_errors="replace",
        socket_connect_timeout=config.redis_socket_connect_timeout,
        socket_timeout=config.redis_socket_timeout,
    )
    return PrefixedRedisStore(client, config.redis_key_prefix)
