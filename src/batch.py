import asyncio

from fastapi import BackgroundTasks

from src.cache import LocationCache
from src.clients.base import BaseGeolocationClient
from src.logger import logger
from src.models.common import GeolocationResult


class BatchCoordinator:
    """Resolves a list of IPs, serving cache hits and fetching misses concurrently."""

    def __init__(self, cache: LocationCache, client: BaseGeolocationClient, max_size: int = 10) -> None:
        self._cache = cache
        self._client = client
        self._max_size = max_size

    async def resolve_batch(self, ips: list[str], background_tasks: BackgroundTasks) -> list[GeolocationResult]:
        """Return one result per IP of the first `max_size` entries, in input order.

        Entries past `max_size` are dropped silently. Duplicate IPs are resolved
        independently by position, so two misses for the same address produce two
        upstream calls.
        """
        truncated = ips[: self._max_size]
        results: list[GeolocationResult | None] = [None] * len(truncated)
        misses: list[tuple[int, str]] = []

        for index, ip in enumerate(truncated):
            cached = await self._cache.get(ip)
            if cached is not None:
                results[index] = cached
            else:
                misses.append((index, ip))

        logger.info(
            f"Resolving batch size={len(truncated)} dropped={len(ips) - len(truncated)} "
            f"cache_hits={len(truncated) - len(misses)} misses={len(misses)}"
        )

        if misses:
            fetched = await asyncio.gather(*(self._client.fetch(ip) for _, ip in misses))
            for (index, ip), result in zip(misses, fetched):
                results[index] = result
                self._cache.put(ip, result, background_tasks)

        return [result for result in results if result is not None]
