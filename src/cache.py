from fastapi import BackgroundTasks
from pydantic import ValidationError

from src.errors import StoreUnavailableError
from src.logger import logger
from src.models.common import GeolocationResult
from src.stores.base import KeyValueStore

CACHE_KEY_PREFIX = "loc:"


class LocationCache:
    """Read-through/write-through cache of successful lookups, keyed purely by IP.

    Reads are awaited by the caller; writes are scheduled on the request's
    `BackgroundTasks` so the response is not held back by the store.
    """

    def __init__(self, store: KeyValueStore, ttl_seconds: int = 300) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds

    @staticmethod
    def key_for(ip: str) -> str:
        return f"{CACHE_KEY_PREFIX}{ip}"

    async def get(self, ip: str) -> GeolocationResult | None:
        """Return the cached result for `ip`, or None on a miss.

        An unavailable store or an unreadable entry is treated as a miss.
        """
        key = self.key_for(ip)
        try:
            raw = await self._store.get(key)
        except StoreUnavailableError as exc:
            logger.warning(f"Cache read failed, treating as miss key={key} error={exc}")
            return None

        if raw is None:
            return None

        try:
            return GeolocationResult.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning(f"Discarding unreadable cache entry key={key} error={exc}")
            return None

    def put(self, ip: str, result: GeolocationResult, background_tasks: BackgroundTasks) -> bool:
        """Schedule a write of `result` for `ip` if it is a successful lookup.

        Returns True when a write was scheduled.
        """
        if not result.is_success:
            return False
        background_tasks.add_task(self._write, self.key_for(ip), result.to_json())
        return True

    async def _write(self, key: str, value: str) -> None:
        try:
            await self._store.put(key, value, self._ttl_seconds)
        except StoreUnavailableError as exc:
            logger.warning(f"Cache write failed key={key} error={exc}")
