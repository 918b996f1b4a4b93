import time
from collections.abc import Callable

from src.stores.base import KeyValueStore


class InMemoryStore(KeyValueStore):
    """Process-local TTL dictionary, used for local development and tests.

    State lives only as long as the process; running several workers gives each
    its own independent cache and counters.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: dict[str, tuple[str, float]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    async def put(self, key: str, value: str, ttl_seconds: int, keep_ttl: bool = False) -> None:
        self._purge_expired()
        if keep_ttl:
            if await self.get(key) is None:
                return
            _, expires_at = self._data[key]
            self._data[key] = (value, expires_at)
            return
        self._data[key] = (value, self._clock() + ttl_seconds)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._data.items() if now >= expires_at]
        for key in expired:
            del self._data[key]
