"""Error types raised by the bin registry and route planning services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RejectionReason(str, Enum):
    NOT_POSITIVE = "not_positive"
    CAPACITY_EXCEEDED = "capacity_exceeded"


class AdmissionRejected(ValueError):
    """A bin submission failed the capacity check; nothing was stored."""

    def __init__(self, reason: RejectionReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message


class MissingLocationError(ValueError):
    """A bin was submitted without a pinned coordinate."""


class NoBinsError(ValueError):
    """A route was requested while the registry holds no bins."""


class MalformedRouteError(ValueError):
    """The directions response cannot be turned into a route plan."""


class PersistenceFailed(RuntimeError):
    """Writing the bin set to the key-value store failed."""


@dataclass(slots=True)
class StorageCorrupt:
    """Recorded when persisted bins could not be read back."""

    detail: str


class ServiceStatusError(RuntimeError):
    """Base for external service failures that carry the service status code."""

    def __init__(self, status_code: str, message: str | None = None) -> None:
        super().__init__(message or f"Service returned status {status_code}")
        self.status_code = status_code


class RoutingServiceError(ServiceStatusError):
    """The directions service failed or could not be reached."""


class GeocodingError(ServiceStatusError):
    """The geocoding service failed or could not be reached."""


class MissingCredentialError(RuntimeError):
    """A required external service credential is not configured."""

    def __init__(self, setting_name: str, service: str) -> None:
        env_var = f"BINROUTE_{setting_name.upper()}"
        super().__init__(f"{service} is not configured. Set the {env_var} environment variable.")
        self.setting_name = setting_name
        self.env_var = env_var
