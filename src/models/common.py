from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LocationRecord(BaseModel):
    """Normalized location details for a single IP address.

    Every field is best-effort: providers routinely omit some of them, so a missing
    value is represented as None rather than treated as an error. Wire names follow
    the provider's camelCase keys.
    """

    model_config = ConfigDict(populate_by_name=True)

    continent: str | None = None
    continent_code: str | None = Field(default=None, alias="continentCode")
    country: str | None = None
    country_code: str | None = Field(default=None, alias="countryCode")
    region: str | None = None
    region_code: str | None = Field(default=None, alias="regionCode")
    subdivisions: str | None = None
    city: str | None = None
    districts: str | None = None
    address: str | None = None
    organization: str | None = None
    latitude: float | None = Field(default=None, alias="lat")
    longitude: float | None = Field(default=None, alias="lon")
    timezone: str | None = None

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_lat_lon(cls, value: Any) -> float | None:
        """Allow latitude/longitude to be provided as strings, numbers, or null.

        Providers may return these fields as strings; this validator normalizes them
        into floats while gracefully handling missing or invalid values.
        """
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @field_validator(
        "continent",
        "continent_code",
        "country",
        "country_code",
        "region",
        "region_code",
        "subdivisions",
        "city",
        "districts",
        "address",
        "organization",
        "timezone",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        if value is None:
            return None
        return str(value)


class GeolocationResult(BaseModel):
    """Canonical lookup result, shared by single lookups, batch items and the cache.

    `location` is present iff `status_code == 200`.
    """

    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(alias="code")
    message: str = Field(alias="msg")
    ip: str = ""
    location: LocationRecord | None = Field(default=None, alias="data")
    source_label: str = Field(default="", alias="api_source")

    @property
    def is_success(self) -> bool:
        return self.status_code == 200 and self.location is not None

    def to_wire(self) -> dict[str, Any]:
        """Dump using the public JSON field names."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
