from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import BackgroundTasks, Depends, FastAPI, Request, Response, status
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.batch import BatchCoordinator
from src.cache import LocationCache
from src.clients.base import BaseGeolocationClient
from src.config import settings
from src.dependencies import (
    UNKNOWN_CLIENT,
    build_store,
    enforce_rate_limit,
    get_batch_coordinator,
    get_batch_ips,
    get_client_ip,
    get_geolocation_client,
    get_location_cache,
)
from src.errors import InvalidBatchRequestError, RateLimitExceededError
from src.exception_handlers import (
    CORS_HEADERS,
    failure_response,
    http_exception_handler,
    invalid_batch_exception_handler,
    pydantic_validation_exception_handler,
    rate_limit_exception_handler,
    result_response,
    unhandled_exception_handler,
)
from src.logger import logger
from src.models.request_models import IPLocationRequest
from src.models.response_models import BatchLocationResponse


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    app.state.store = build_store(settings)
    logger.info(f"Key-value store ready backend={settings.STORE_BACKEND}")
    try:
        yield
    finally:
        await app.state.store.close()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description="Edge gateway for IP geolocation lookups with rate limiting, caching and batch queries.",
    lifespan=lifespan,
)
logger.info("Started IP Geolocation Gateway")

# Register global exception handlers using the shared handlers module.
app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)
app.add_exception_handler(InvalidBatchRequestError, invalid_batch_exception_handler)
app.add_exception_handler(RateLimitExceededError, rate_limit_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


@app.middleware("http")
async def cors_middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Answer CORS preflight on every path and add CORS headers to all other responses."""
    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)

    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@app.get(
    "/api/ip-location",
    status_code=status.HTTP_200_OK,
    tags=["ip"],
    summary="Look up geolocation information for an IP address.",
)
async def ip_location(
    request: Request,
    background_tasks: BackgroundTasks,
    query: Annotated[IPLocationRequest, Depends()],
    client_ip: Annotated[str, Depends(get_client_ip)],
    _: Annotated[None, Depends(enforce_rate_limit)],
    cache: Annotated[LocationCache, Depends(get_location_cache)],
    client: Annotated[BaseGeolocationClient, Depends(get_geolocation_client)],
) -> Response:
    """Look up geolocation information for either a specific IP or the caller's IP.

    - If `query.ip` is provided, that IP is used.
    - Otherwise, the caller's IP is taken from the trusted proxy headers.
    - Fresh cached results are returned as stored; successful upstream results
      are cached after the response is sent.
    """
    target = query.ip or (client_ip if client_ip != UNKNOWN_CLIENT else None)

    if target:
        cached = await cache.get(target)
        if cached is not None:
            logger.info(f"Cache hit path={request.url.path} method={request.method} ip={target}")
            return result_response(cached)

    logger.info(
        "Performing upstream IP lookup "
        f"path={request.url.path} method={request.method} ip={target} client_ip={client_ip}"
    )
    result = await client.fetch(target)
    if target:
        cache.put(target, result, background_tasks)

    return result_response(result)


@app.post(
    "/api/batch-location",
    status_code=status.HTTP_200_OK,
    tags=["ip"],
    summary="Look up geolocation information for up to ten IP addresses.",
)
async def batch_location(
    request: Request,
    background_tasks: BackgroundTasks,
    ips: Annotated[list[str], Depends(get_batch_ips)],
    _: Annotated[None, Depends(enforce_rate_limit)],
    coordinator: Annotated[BatchCoordinator, Depends(get_batch_coordinator)],
) -> Response:
    """Resolve a batch of IPs; individual failures are reported per element."""
    logger.info(f"Performing batch IP lookup path={request.url.path} method={request.method} count={len(ips)}")
    results = await coordinator.resolve_batch(ips, background_tasks)
    payload = BatchLocationResponse(data=results, total=len(results))
    return Response(
        content=payload.model_dump_json(by_alias=True),
        media_type="application/json",
        status_code=status.HTTP_200_OK,
    )


@app.get(
    "/api/client-ip",
    status_code=status.HTTP_200_OK,
    tags=["ip"],
    summary="Look up geolocation information for the calling client.",
)
async def client_ip_location(
    request: Request,
    client_ip: Annotated[str, Depends(get_client_ip)],
    client: Annotated[BaseGeolocationClient, Depends(get_geolocation_client)],
) -> Response:
    """Look up the caller's own address directly, without cache or rate limiting."""
    if client_ip == UNKNOWN_CLIENT:
        logger.info(f"No trusted proxy header present path={request.url.path} method={request.method}")
        return failure_response(status.HTTP_400_BAD_REQUEST, "Unable to determine client IP address", ip="")

    logger.info(f"Performing client IP lookup path={request.url.path} method={request.method} client_ip={client_ip}")
    return result_response(await client.fetch(client_ip))
