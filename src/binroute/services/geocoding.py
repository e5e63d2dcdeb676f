"""Reverse geocoding used to label pinned bins."""

from __future__ import annotations

import logging

import httpx

from ..config import settings
from ..errors import GeocodingError, MissingCredentialError
from ..models.domain import Coordinate

logger = logging.getLogger(__name__)


class GoogleGeocoder:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_maps_api_key
        if not self.api_key:
            raise MissingCredentialError("google_maps_api_key", "Google Maps geocoding")
        self.base_url = (base_url or settings.google_maps_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0), transport=self._transport)

    async def reverse(self, coordinate: Coordinate) -> str | None:
        """Return the best-match address for ``coordinate``, or None when nothing matches."""
        params = {"latlng": coordinate.as_query(), "key": self.api_key}
        url = f"{self.base_url}/maps/api/geocode/json"
        async with self._get_client() as client:
            try:
                response = await client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as exc:
                raise GeocodingError("TIMEOUT", f"Geocoding request timed out: {exc}") from exc
            except httpx.HTTPStatusError as exc:
                code = exc.response.status_code
                raise GeocodingError(f"HTTP_{code}", f"Geocoding request failed with HTTP {code}") from exc
            except httpx.HTTPError as exc:
                raise GeocodingError("NETWORK_ERROR", f"Geocoding service unreachable: {exc}") from exc
            except ValueError as exc:
                raise GeocodingError("INVALID_RESPONSE", "Geocoding response was not valid JSON") from exc

        status = data.get("status", "UNKNOWN_ERROR") if isinstance(data, dict) else "INVALID_RESPONSE"
        if status == "ZERO_RESULTS":
            return None
        if status != "OK":
            message = data.get("error_message") if isinstance(data, dict) else None
            logger.warning(f"Geocoding failed for {coordinate.as_query()}: {status} {message or ''}".rstrip())
            raise GeocodingError(status)

        results = data.get("results") or []
        if not results:
            return None
        if not isinstance(results, list) or not isinstance(results[0], dict):
            raise GeocodingError("INVALID_RESPONSE", "Geocoding response has no result objects")
        address = results[0].get("formatted_address")
        return address if isinstance(address, str) and address else None


def get_geocoder() -> GoogleGeocoder | None:
    """Geocoder for the configured key, or None when geocoding is not set up."""
    if not settings.google_maps_api_key:
        return None
    return GoogleGeocoder()
