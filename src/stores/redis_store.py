import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.errors import StoreUnavailableError
from src.logger import logger
from src.stores.base import KeyValueStore


class RedisStore(KeyValueStore):
    """Key-value store backed by Redis.

    The connection pool is created lazily by redis-py, so an unreachable server
    does not prevent startup; every failed command is reported as
    `StoreUnavailableError` and handled by the callers as a miss.
    """

    def __init__(self, client: aioredis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float = 5.0) -> "RedisStore":
        client = aioredis.from_url(
            url,
            encoding="utf8",
            decode_responses=True,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
            socket_keepalive=True,
        )
        return cls(client)

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(key)
        except (RedisError, OSError) as exc:
            raise StoreUnavailableError(f"Redis GET failed for key={key}: {repr(exc)}") from exc

    async def put(self, key: str, value: str, ttl_seconds: int, keep_ttl: bool = False) -> None:
        try:
            if keep_ttl:
                # XX: never recreate a key that expired since it was read.
                await self._client.set(key, value, xx=True, keepttl=True)
            else:
                await self._client.set(key, value, ex=ttl_seconds)
        except (RedisError, OSError) as exc:
            raise StoreUnavailableError(f"Redis SET failed for key={key}: {repr(exc)}") from exc

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Redis connection closed")
