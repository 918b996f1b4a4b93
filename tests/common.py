from http import HTTPStatus
from typing import Any

import httpx

from src.clients.base import BaseGeolocationClient
from src.models.common import GeolocationResult, LocationRecord

SOURCE_LABEL = "https://api.pearktrue.cn/"


class MockResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.text = text

    def json(self) -> Any:
        return self._payload


class MockAsyncClient:
    """Minimal async context-manager mock for httpx.AsyncClient."""

    def __init__(self, response: MockResponse, calls: list[dict[str, Any]] | None = None) -> None:
        self._response = response
        self._calls = calls if calls is not None else []

    async def __aenter__(self) -> "MockAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str, **kwargs: Any) -> MockResponse:
        self._calls.append({"url": url, **kwargs})
        return self._response


class FailingAsyncClient:
    """Async client that raises an httpx error on enter to simulate network failure.

    The target URL is provided at construction time, so tests can reuse this
    implementation with different base URLs and error types.
    """

    def __init__(self, url: str, *args: Any, error_cls: type[httpx.HTTPError] = httpx.ConnectError, **kwargs: Any) -> None:
        self._url = url
        self._error_cls = error_cls

    async def __aenter__(self) -> "FailingAsyncClient":
        request = httpx.Request("GET", self._url)
        raise self._error_cls("Network failure", request=request)

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str, **kwargs: Any) -> MockResponse:
        return MockResponse(status_code=HTTPStatus.OK, payload={})


def make_success_result(ip: str, city: str = "Mountain View") -> GeolocationResult:
    return GeolocationResult(
        status_code=200,
        message="success",
        ip=ip,
        location=LocationRecord(
            continent="North America",
            continent_code="NA",
            country="United States",
            country_code="US",
            city=city,
            latitude=37.386,
            longitude=-122.0838,
            timezone="America/Los_Angeles",
        ),
        source_label=SOURCE_LABEL,
    )


def make_failure_result(ip: str, code: int = 500, message: str = "Upstream API request failed") -> GeolocationResult:
    return GeolocationResult(status_code=code, message=message, ip=ip, location=None, source_label=SOURCE_LABEL)


class StubGeolocationClient(BaseGeolocationClient):
    """Test double for the upstream client that records every lookup.

    Addresses listed in `failing_ips` produce a 500 result; everything else
    succeeds. A missing address yields the same 400 the real client returns.
    """

    def __init__(self, failing_ips: set[str] | None = None) -> None:
        self.calls: list[str | None] = []
        self._failing_ips = failing_ips or set()

    async def fetch(self, ip: str | None) -> GeolocationResult:
        self.calls.append(ip)
        if not ip:
            return make_failure_result("", code=400, message="This API requires an IP address parameter")
        if ip in self._failing_ips:
            return make_failure_result(ip)
        return make_success_result(ip)


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
