class AppError(Exception):
    """Base application error for the IP geolocation gateway."""


class UpstreamError(AppError):
    """Base error for geolocation provider failures."""


class UpstreamServiceError(UpstreamError):
    """Raised when the provider cannot be reached (network failure, timeout)."""


class InvalidUpstreamResponseError(UpstreamError):
    """Raised when the provider answers with something that is not a usable JSON envelope."""


class StoreUnavailableError(AppError):
    """Raised when the key-value store cannot serve a read or a write."""


class RateLimitExceededError(AppError):
    """Raised when a client has used up its request quota for the current window."""

    def __init__(self, client_id: str) -> None:
        super().__init__(f"Rate limit exceeded for client {client_id}")
        self.client_id = client_id


class InvalidBatchRequestError(AppError):
    """Raised when a batch body is malformed or names an invalid IP address."""
