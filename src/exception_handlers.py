from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.config import settings
from src.errors import InvalidBatchRequestError, RateLimitExceededError
from src.logger import logger
from src.models.common import GeolocationResult
from src.models.response_models import BatchErrorResponse, ErrorResponse

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

INVALID_IP_MESSAGE = "Invalid IP address"
RATE_LIMITED_MESSAGE = "Too many requests, please try again later"


def http_status_for(code: int) -> int:
    """HTTP status mirroring an envelope code; non-error codes map to 200."""
    if status.HTTP_400_BAD_REQUEST <= code <= 599:
        return code
    return status.HTTP_200_OK


def result_response(result: GeolocationResult) -> JSONResponse:
    return JSONResponse(status_code=http_status_for(result.status_code), content=result.to_wire())


def _failure_result(code: int, message: str, ip: str) -> GeolocationResult:
    return GeolocationResult(
        status_code=code,
        message=message,
        ip=ip,
        location=None,
        source_label=settings.UPSTREAM_SOURCE_LABEL,
    )


def failure_response(code: int, message: str, ip: str) -> JSONResponse:
    return result_response(_failure_result(code, message, ip))


def _points_at_ip(errors: list[dict[str, Any]]) -> bool:
    # Handle both request-level ("query", "ip") and model-level ("ip") locations.
    return any(error.get("loc", ())[-1:] == ("ip",) for error in errors)


async def pydantic_validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle Pydantic validation errors raised during dependency resolution."""
    ip = request.query_params.get("ip", "")
    logger.info(
        "Pydantic validation error during request handling "
        f"path={request.url.path} method={request.method} ip={ip} errors={exc.errors()}"
    )
    message = INVALID_IP_MESSAGE if _points_at_ip(exc.errors()) else "Invalid request parameters"
    return failure_response(status.HTTP_400_BAD_REQUEST, message, ip)


async def invalid_batch_exception_handler(request: Request, exc: InvalidBatchRequestError) -> JSONResponse:
    logger.info(f"Rejected batch request path={request.url.path} method={request.method} error={exc}")
    payload = BatchErrorResponse(msg=str(exc))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=payload.model_dump())


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceededError) -> JSONResponse:
    return failure_response(status.HTTP_429_TOO_MANY_REQUESTS, RATE_LIMITED_MESSAGE, exc.client_id)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors (404, 405) as JSON envelopes."""
    payload = ErrorResponse(code=exc.status_code, msg=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=payload.model_dump(), headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected errors to return a structured 500 response."""
    logger.exception(
        f"Unhandled exception while processing request: {repr(exc)} path={request.url.path} method={request.method}"
    )
    payload = ErrorResponse(
        code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        msg="An unexpected error occurred while processing the request.",
    )
    # Served outside the app middleware stack, so CORS headers are set here.
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=payload.model_dump(),
        headers=CORS_HEADERS,
    )
