from typing import Any

import httpx
from pydantic import ValidationError

from src.clients.base import BaseGeolocationClient
from src.errors import InvalidUpstreamResponseError, UpstreamError, UpstreamServiceError
from src.logger import logger
from src.models.common import GeolocationResult, LocationRecord

MISSING_IP_MESSAGE = "This API requires an IP address parameter"
LOOKUP_FAILED_MESSAGE = "Lookup failed"
TRANSPORT_FAILED_MESSAGE = "Upstream API request failed"
BAD_RESPONSE_MESSAGE = "Invalid response from upstream API"


class PearktrueClient(BaseGeolocationClient):
    """Client for the api.pearktrue.cn IP details API.

    The provider wraps every answer in a `{code, msg, ip, data, api_source}`
    envelope and reports failures inside it, so the HTTP status of the response
    is not used to decide success.
    """

    def __init__(
        self,
        base_url: str = "https://api.pearktrue.cn",
        timeout_seconds: float = 5.0,
        source_label: str = "https://api.pearktrue.cn/",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._source_label = source_label

    async def fetch(self, ip: str | None) -> GeolocationResult:
        """Look up `ip`, converting every failure into a non-200 result."""
        if not ip:
            return self._failure(400, MISSING_IP_MESSAGE, ip="")

        try:
            envelope = await self._request(ip)
            return self._normalize_envelope(ip, envelope)
        except InvalidUpstreamResponseError as exc:
            logger.warning(f"Malformed upstream response ip={ip} error={exc}")
            return self._failure(400, BAD_RESPONSE_MESSAGE, ip=ip)
        except UpstreamError as exc:
            logger.warning(f"Upstream request failed ip={ip} error={exc}")
            return self._failure(500, TRANSPORT_FAILED_MESSAGE, ip=ip)

    async def _request(self, ip: str) -> dict[str, Any]:
        url = f"{self._base_url}/api/ip/details/"
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                response = await client.get(url, params={"ip": ip})
        except httpx.HTTPError as exc:
            raise UpstreamServiceError(f"Request to IP provider failed: {repr(exc)}") from exc

        return self._parse_json(response)

    @staticmethod
    def _parse_json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamServiceError(f"Failed to decode IP provider response as JSON: {exc}") from exc
        if data is None:
            raise UpstreamServiceError("IP provider returned an empty JSON body")
        if not isinstance(data, dict):
            # Decoded, but not an envelope: no usable code, falls back to 400.
            return {}
        return data

    def _normalize_envelope(self, ip: str, envelope: dict[str, Any]) -> GeolocationResult:
        """Map the provider envelope into a `GeolocationResult`.

        Success requires `code == 200` and a non-null `data` object. Anything else
        keeps the provider's code/message when present and falls back to 400.
        """
        code = self._coerce_code(envelope.get("code"))
        message = str(envelope.get("msg") or "")
        source = str(envelope.get("api_source") or self._source_label)
        data = envelope.get("data")

        if code == 200 and isinstance(data, dict):
            try:
                location = LocationRecord.model_validate(data)
            except ValidationError as exc:
                raise InvalidUpstreamResponseError(f"Unexpected location payload: {exc}") from exc
            return GeolocationResult(
                status_code=200,
                message=message,
                ip=str(envelope.get("ip") or ip),
                location=location,
                source_label=source,
            )

        # Null data under a 200 still counts as a failed lookup.
        if code is None or code == 200 or code < 100:
            code = 400
        return GeolocationResult(
            status_code=code,
            message=message or LOOKUP_FAILED_MESSAGE,
            ip=ip,
            location=None,
            source_label=source,
        )

    @staticmethod
    def _coerce_code(value: Any) -> int | None:
        if isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    def _failure(self, code: int, message: str, ip: str) -> GeolocationResult:
        return GeolocationResult(
            status_code=code,
            message=message,
            ip=ip,
            location=None,
            source_label=self._source_label,
        )
