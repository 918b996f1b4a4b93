import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.errors import StoreUnavailableError
from src.stores.memory import InMemoryStore
from src.stores.redis_store import RedisStore
from tests.common import FakeClock


@pytest.mark.asyncio
async def test_memory_store_expires_entries() -> None:
    clock = FakeClock()
    store = InMemoryStore(clock=clock)

    await store.put("k", "v", ttl_seconds=10)
    clock.advance(9)
    assert await store.get("k") == "v"

    clock.advance(1)
    assert await store.get("k") is None


@pytest.mark.asyncio
async def test_memory_store_keep_ttl_preserves_original_expiry() -> None:
    clock = FakeClock()
    store = InMemoryStore(clock=clock)

    await store.put("k", "1", ttl_seconds=60)
    clock.advance(50)
    await store.put("k", "2", ttl_seconds=60, keep_ttl=True)
    assert await store.get("k") == "2"

    clock.advance(10)
    assert await store.get("k") is None


@pytest.mark.asyncio
async def test_memory_store_keep_ttl_does_not_recreate_missing_key() -> None:
    store = InMemoryStore(clock=FakeClock())

    await store.put("k", "5", ttl_seconds=60, keep_ttl=True)

    assert await store.get("k") is None


class _RecordingRedis:
    """Stand-in for redis.asyncio.Redis recording SET arguments."""

    def __init__(self) -> None:
        self.sets: list[tuple[str, str, dict]] = []
        self.closed = False

    async def get(self, key: str) -> str | None:
        return "cached" if key == "present" else None

    async def set(self, key: str, value: str, **kwargs) -> bool:
        self.sets.append((key, value, kwargs))
        return True

    async def aclose(self) -> None:
        self.closed = True


class _BrokenRedis:
    async def get(self, key: str) -> str | None:
        raise RedisConnectionError("connection refused")

    async def set(self, key: str, value: str, **kwargs) -> bool:
        raise RedisConnectionError("connection refused")


@pytest.mark.asyncio
async def test_redis_store_maps_put_options() -> None:
    redis = _RecordingRedis()
    store = RedisStore(redis)  # type: ignore[arg-type]

    await store.put("loc:1.1.1.1", "{}", ttl_seconds=300)
    await store.put("rl:client", "2", ttl_seconds=60, keep_ttl=True)

    assert await store.get("present") == "cached"
    assert redis.sets == [
        ("loc:1.1.1.1", "{}", {"ex": 300}),
        ("rl:client", "2", {"xx": True, "keepttl": True}),
    ]

    await store.close()
    assert redis.closed is True


@pytest.mark.asyncio
async def test_redis_store_wraps_connection_errors() -> None:
    store = RedisStore(_BrokenRedis())  # type: ignore[arg-type]

    with pytest.raises(StoreUnavailableError):
        await store.get("loc:1.1.1.1")
    with pytest.raises(StoreUnavailableError):
        await store.put("loc:1.1.1.1", "{}", ttl_seconds=300)


@pytest.mark.asyncio
async def test_memory_store_drops_expired_keys_on_write() -> None:
    clock = FakeClock()
    store = InMemoryStore(clock=clock)
    for n in range(50):
        await store.put(f"rl:client-{n}", "1", ttl_seconds=60)

    clock.advance(60)
    await store.put("rl:late-client", "1", ttl_seconds=60)

    assert list(store._data) == ["rl:late-client"]
