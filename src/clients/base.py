from abc import ABC, abstractmethod

from src.models.common import GeolocationResult


class BaseGeolocationClient(ABC):
    """Abstract base for upstream geolocation providers.

    Concrete implementations map provider-specific responses into the normalized
    `GeolocationResult` shape. `fetch` never raises: every failure is reported as a
    result with `status_code != 200`.
    """

    @abstractmethod
    async def fetch(self, ip: str | None) -> GeolocationResult:
        """Look up geolocation information for an explicit IP address."""
        raise NotImplementedError
