from pydantic import BaseModel, Field

from src.models.common import GeolocationResult


class BatchLocationResponse(BaseModel):
    """Envelope returned by a structurally valid batch lookup."""

    code: int = 200
    msg: str = "Batch lookup completed"
    data: list[GeolocationResult]
    total: int = Field(ge=0)


class BatchErrorResponse(BaseModel):
    """Envelope returned when a batch request is rejected as a whole."""

    code: int = 400
    msg: str
    data: None = None


class ErrorResponse(BaseModel):
    """Envelope for gateway-level errors that are not tied to a lookup."""

    code: int
    msg: str
    data: None = None
