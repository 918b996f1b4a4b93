from enum import Enum

from fastapi import BackgroundTasks

from src.errors import StoreUnavailableError
from src.logger import logger
from src.stores.base import KeyValueStore

RATE_LIMIT_KEY_PREFIX = "rl:"


class RateLimitDecision(str, Enum):
    """Outcome of an admission check."""

    allowed = "allowed"
    rejected = "rejected"


class RateLimiter:
    """Fixed-window request counter per client, kept in the key-value store.

    The window starts with the first counted request and ends when its key
    expires; later increments keep the original expiry. The check and the
    increment are separate store operations, so concurrent requests from one
    client may overshoot the limit slightly.
    """

    def __init__(self, store: KeyValueStore, limit: int = 60, window_seconds: int = 60) -> None:
        self._store = store
        self._limit = limit
        self._window_seconds = window_seconds

    @staticmethod
    def key_for(client_id: str) -> str:
        return f"{RATE_LIMIT_KEY_PREFIX}{client_id}"

    async def admit(self, client_id: str, background_tasks: BackgroundTasks) -> RateLimitDecision:
        """Decide whether `client_id` may proceed and schedule the counter increment.

        A rejected request does not touch the counter. A store failure reads as
        zero requests so far.
        """
        key = self.key_for(client_id)
        count = await self._current_count(key)

        if count >= self._limit:
            logger.warning(f"Rate limit exceeded client={client_id} count={count} limit={self._limit}")
            return RateLimitDecision.rejected

        background_tasks.add_task(self._increment, key, count)
        return RateLimitDecision.allowed

    async def _current_count(self, key: str) -> int:
        try:
            raw = await self._store.get(key)
        except StoreUnavailableError as exc:
            logger.warning(f"Rate limit read failed, failing open key={key} error={exc}")
            return 0

        if raw is None:
            return 0
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Ignoring non-numeric rate limit counter key={key} value={raw!r}")
            return 0

    async def _increment(self, key: str, previous_count: int) -> None:
        try:
            await self._store.put(
                key,
                str(previous_count + 1),
                self._window_seconds,
                keep_ttl=previous_count > 0,
            )
        except StoreUnavailableError as exc:
            logger.warning(f"Rate limit write failed key={key} error={exc}")
