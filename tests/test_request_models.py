from typing import Any

import pytest
from pydantic import ValidationError

from src.models.request_models import BatchLocationRequest, IPLocationRequest


def _build_request(ip: Any) -> IPLocationRequest:
    """Helper to construct IPLocationRequest, used to keep tests small."""
    return IPLocationRequest(ip=ip)


def test_ip_location_request_allows_valid_ipv4() -> None:
    req = _build_request("8.8.8.8")
    assert req.ip == "8.8.8.8"


def test_ip_location_request_allows_full_ipv6() -> None:
    req = _build_request("2001:4860:4860:0000:0000:0000:0000:8888")
    assert req.ip == "2001:4860:4860:0000:0000:0000:0000:8888"


def test_ip_location_request_rejects_compressed_ipv6() -> None:
    """Zero-compressed IPv6 is not accepted."""
    with pytest.raises(ValidationError):
        _build_request("2001:4860:4860::8888")


def test_ip_location_request_normalizes_empty_to_none() -> None:
    """Empty string is treated as None (caller IP lookup, no validation error)."""
    req = _build_request("")
    assert req.ip is None


@pytest.mark.parametrize("padded", ["   ", " 8.8.8.8", "8.8.8.8\n", " 8.8.8.8\n"])
def test_ip_location_request_rejects_surrounding_whitespace(padded: str) -> None:
    """Values are validated verbatim, never trimmed."""
    with pytest.raises(ValidationError):
        _build_request(padded)


def test_ip_location_request_allows_none() -> None:
    req = _build_request(None)
    assert req.ip is None


def test_ip_location_request_rejects_invalid_ip() -> None:
    with pytest.raises(ValidationError):
        _build_request("qwerty")


@pytest.mark.parametrize("body", [{"ips": []}, {"ips": "1.1.1.1"}, {}, ["1.1.1.1"]])
def test_batch_request_rejects_bad_shapes(body: Any) -> None:
    with pytest.raises(ValidationError):
        BatchLocationRequest.model_validate(body)


def test_batch_request_accepts_string_list() -> None:
    assert BatchLocationRequest.model_validate({"ips": ["1.1.1.1"]}).ips == ["1.1.1.1"]


def test_batch_request_keeps_non_string_members_for_reporting() -> None:
    assert BatchLocationRequest.model_validate({"ips": ["1.1.1.1", 5, None]}).ips == ["1.1.1.1", 5, None]
