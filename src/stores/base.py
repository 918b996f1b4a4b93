from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract TTL-capable key-value store shared by the cache and the rate limiter.

    Implementations provide atomic get/put per key but no atomic read-modify-write.
    Failures must surface as `StoreUnavailableError` so callers can fail open.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent or expired."""
        raise NotImplementedError

    @abstractmethod
    async def put(self, key: str, value: str, ttl_seconds: int, keep_ttl: bool = False) -> None:
        """Store `value` under `key`.

        With `keep_ttl=False` the key expires `ttl_seconds` from now. With
        `keep_ttl=True` only an existing key is updated and its current expiry is
        left untouched; a missing (already expired) key is not recreated.
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release any underlying connections."""
        return None
