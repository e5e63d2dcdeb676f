"""HTTP client for the Google Directions API."""

from __future__ import annotations

import logging

import httpx

from ...config import settings
from ...errors import MissingCredentialError, RoutingServiceError
from .models import DirectionsLeg, DirectionsResult, RouteRequest

logger = logging.getLogger(__name__)


def _leg_value(leg: dict, name: str) -> float | None:
    block = leg.get(name)
    if not isinstance(block, dict):
        return None
    value = block.get("value")
    return float(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else None


def _is_index(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_directions_response(data: dict) -> DirectionsResult:
    """Normalize a Directions API JSON body into a ``DirectionsResult``."""
    if not isinstance(data, dict):
        return DirectionsResult(status="INVALID_RESPONSE")
    status = str(data.get("status") or "UNKNOWN_ERROR")
    if status != "OK":
        return DirectionsResult(status=status)

    routes = data.get("routes") or []
    if not isinstance(routes, list) or not routes or not isinstance(routes[0], dict):
        return DirectionsResult(status=status)
    route = routes[0]
    legs = [
        DirectionsLeg(distance_m=_leg_value(leg, "distance"), duration_s=_leg_value(leg, "duration"))
        for leg in route.get("legs") or []
        if isinstance(leg, dict)
    ]
    order = route.get("waypoint_order") or []
    if not isinstance(order, list) or not all(_is_index(index) for index in order):
        return DirectionsResult(status="INVALID_RESPONSE")
    overview = route.get("overview_polyline") or {}
    points = overview.get("points") if isinstance(overview, dict) else None
    if points is not None and not isinstance(points, str):
        return DirectionsResult(status="INVALID_RESPONSE")
    return DirectionsResult(status=status, legs=legs, waypoint_order=list(order), polyline=points)


class GoogleDirectionsClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_maps_api_key
        if not self.api_key:
            raise MissingCredentialError("google_maps_api_key", "Google Maps routing")
        self.base_url = (base_url or settings.google_maps_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0), transport=self._transport)

    def _params(self, request: RouteRequest) -> dict[str, str]:
        params = {
            "origin": request.origin.as_query(),
            "destination": request.destination.coordinate.as_query(),
            "mode": request.travel_mode,
            "key": self.api_key,
        }
        if request.waypoints:
            stops = [
                waypoint.coordinate.as_query() if waypoint.stopover else f"via:{waypoint.coordinate.as_query()}"
                for waypoint in request.waypoints
            ]
            prefix = ["optimize:true"] if request.optimize_waypoints else []
            params["waypoints"] = "|".join(prefix + stops)
        return params

    async def directions(self, request: RouteRequest) -> DirectionsResult:
        url = f"{self.base_url}/maps/api/directions/json"
        logger.debug(f"Requesting directions through {len(request.waypoints)} waypoints")
        async with self._get_client() as client:
            try:
                response = await client.get(url, params=self._params(request))
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as exc:
                logger.warning(f"Directions request timed out: {exc}")
                raise RoutingServiceError("TIMEOUT", f"Directions request timed out: {exc}") from exc
            except httpx.HTTPStatusError as exc:
                code = exc.response.status_code
                logger.warning(f"Directions request failed with HTTP {code}")
                raise RoutingServiceError(f"HTTP_{code}") from exc
            except httpx.HTTPError as exc:
                logger.warning(f"Directions service unreachable at {self.base_url}: {exc}")
                raise RoutingServiceError("NETWORK_ERROR", f"Directions service unreachable: {exc}") from exc
            except ValueError as exc:
                raise RoutingServiceError("INVALID_RESPONSE", "Directions response was not valid JSON") from exc

        result = parse_directions_response(data)
        if not result.ok:
            detail = data.get("error_message", "") if isinstance(data, dict) else ""
            logger.warning(f"Directions service returned {result.status}: {detail}")
        return result
