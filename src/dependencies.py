import json
from typing import Annotated

from fastapi import BackgroundTasks, Depends, Request
from pydantic import ValidationError
from starlette.datastructures import Headers

from src.batch import BatchCoordinator
from src.cache import LocationCache
from src.clients.base import BaseGeolocationClient
from src.clients.pearktrue_client import PearktrueClient
from src.config import Settings, settings
from src.errors import InvalidBatchRequestError, RateLimitExceededError
from src.models.request_models import BatchLocationRequest
from src.rate_limiter import RateLimitDecision, RateLimiter
from src.stores.base import KeyValueStore
from src.stores.memory import InMemoryStore
from src.stores.redis_store import RedisStore
from src.validators import is_valid_ip

UNKNOWN_CLIENT = "unknown"


def build_store(config: Settings) -> KeyValueStore:
    """Create the key-value store selected by `STORE_BACKEND`."""
    if config.STORE_BACKEND == "memory":
        return InMemoryStore()
    return RedisStore.from_url(config.REDIS_URL, socket_timeout=config.REDIS_SOCKET_TIMEOUT_SECONDS)


def resolve_client_ip(headers: Headers) -> str:
    """Resolve the caller's address from the trusted proxy headers.

    `CF-Connecting-IP` wins, then the first hop of `X-Forwarded-For`; without
    either the literal "unknown" is returned.
    """
    cf_connecting_ip = (headers.get("cf-connecting-ip") or "").strip()
    if cf_connecting_ip:
        return cf_connecting_ip

    forwarded_for = headers.get("x-forwarded-for") or ""
    first_hop = forwarded_for.split(",")[0].strip()
    if first_hop:
        return first_hop

    return UNKNOWN_CLIENT


def get_client_ip(request: Request) -> str:
    return resolve_client_ip(request.headers)


def get_store(request: Request) -> KeyValueStore:
    """Dependency returning the store opened in the application lifespan."""
    return request.app.state.store


def get_location_cache(store: Annotated[KeyValueStore, Depends(get_store)]) -> LocationCache:
    return LocationCache(store, ttl_seconds=settings.CACHE_TTL_SECONDS)


def get_rate_limiter(store: Annotated[KeyValueStore, Depends(get_store)]) -> RateLimiter:
    return RateLimiter(
        store,
        limit=settings.RATE_LIMIT_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )


def get_geolocation_client() -> BaseGeolocationClient:
    return PearktrueClient(
        base_url=settings.UPSTREAM_BASE_URL,
        timeout_seconds=settings.UPSTREAM_TIMEOUT_SECONDS,
        source_label=settings.UPSTREAM_SOURCE_LABEL,
    )


def get_batch_coordinator(
    cache: Annotated[LocationCache, Depends(get_location_cache)],
    client: Annotated[BaseGeolocationClient, Depends(get_geolocation_client)],
) -> BatchCoordinator:
    return BatchCoordinator(cache, client, max_size=settings.BATCH_MAX_SIZE)


async def get_batch_ips(request: Request) -> list[str]:
    """Parse and validate the batch body, rejecting it as a whole on any problem."""
    try:
        body = await request.json()
    except ValueError as exc:
        raise InvalidBatchRequestError("Malformed request body") from exc

    try:
        batch = BatchLocationRequest.model_validate(body)
    except ValidationError as exc:
        raise InvalidBatchRequestError("Please provide a non-empty array of IP addresses") from exc

    # Non-string members are offenders too, shown in their JSON form.
    invalid_ips = [ip if isinstance(ip, str) else json.dumps(ip) for ip in batch.ips if not is_valid_ip(ip)]
    if invalid_ips:
        raise InvalidBatchRequestError(f"Invalid IP addresses: {', '.join(invalid_ips)}")

    return batch.ips


async def enforce_rate_limit(
    background_tasks: BackgroundTasks,
    client_ip: Annotated[str, Depends(get_client_ip)],
    rate_limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
) -> None:
    """Admission check shared by the rate-limited routes."""
    decision = await rate_limiter.admit(client_ip, background_tasks)
    if decision is RateLimitDecision.rejected:
        raise RateLimitExceededError(client_ip)
