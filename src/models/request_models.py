from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.validators import is_valid_ip


class IPLocationRequest(BaseModel):
    """Request model for single IP geolocation lookup via query parameters.

    If `ip` is provided, the gateway looks up that explicit address.
    If `ip` is omitted or blank, the caller's own address (resolved from the
    trusted proxy headers) is used instead.
    """

    ip: str | None = Field(
        default=None,
        description="IPv4 (dotted quad) or full 8-group IPv6 address. If omitted, the caller's IP is used.",
        examples=["8.8.8.8", "2001:4860:4860:0000:0000:0000:0000:8888"],
    )

    @field_validator("ip", mode="before")
    @classmethod
    def _validate_ip(cls, value: str | None) -> str | None:
        """Validate that ip is either empty/None or a valid IP address.

        - None or empty string -> treated as None (caller IP lookup, no error).
        - Anything else is checked as-is, surrounding whitespace included; an
          invalid literal raises a validation error and the endpoint handler is
          never invoked.
        """
        if value is None or value == "":
            return None

        if not is_valid_ip(value):
            raise ValueError("ip must be a valid IPv4 or IPv6 address")

        return value


class BatchLocationRequest(BaseModel):
    """Body of `POST /api/batch-location`.

    Only the shape is checked here (a non-empty array); members, including
    non-string ones, are checked by the route so that every offender can be
    reported.
    """

    ips: list[Any] = Field(min_length=1, examples=[["1.1.1.1", "8.8.8.8"]])
