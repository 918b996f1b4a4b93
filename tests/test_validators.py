import pytest

from src.validators import is_valid_ip


@pytest.mark.parametrize(
    "candidate",
    [
        "1.1.1.1",
        "8.8.8.8",
        "0.0.0.0",
        "255.255.255.255",
        "192.168.001.001",
        "2001:4860:4860:0000:0000:0000:0000:8888",
        "fe80:0:0:0:202:b3ff:fe1e:8329",
        "ABCD:EF01:2345:6789:ABCD:EF01:2345:6789",
    ],
)
def test_valid_addresses_are_accepted(candidate: str) -> None:
    assert is_valid_ip(candidate) is True


@pytest.mark.parametrize(
    "candidate",
    [
        "",
        "not-an-ip",
        "256.1.1.1",
        "1.1.1",
        "1.1.1.1.1",
        " 1.1.1.1",
        "1.1.1.1\n",
        "::1",
        "2001:4860:4860::8888",
        "2001:4860:4860:0:0:0:0:0:8888",
        "12345:0:0:0:0:0:0:1",
        "gggg:0:0:0:0:0:0:1",
    ],
)
def test_invalid_addresses_are_rejected(candidate: str) -> None:
    assert is_valid_ip(candidate) is False


def test_non_string_input_is_rejected() -> None:
    assert is_valid_ip(None) is False  # type: ignore[arg-type]
