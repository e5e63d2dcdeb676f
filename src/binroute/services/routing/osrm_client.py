"""HTTP client for the OSRM trip service."""

from __future__ import annotations

import logging

import httpx

from ...config import settings
from ...errors import MissingCredentialError, RoutingServiceError
from .models import DirectionsLeg, DirectionsResult, RouteRequest

logger = logging.getLogger(__name__)


def _is_number(value) -> bool:
    return value is None or (isinstance(value, (int, float)) and not isinstance(value, bool))


def parse_trip_response(data: dict, waypoint_count: int) -> DirectionsResult:
    """Normalize an OSRM ``trip`` body into a ``DirectionsResult``.

    ``waypoint_count`` is the number of intermediate stops in the request.
    OSRM reports each input's position in the trip as ``waypoint_index``;
    the intermediate inputs (1..n) sorted by that position give the order.
    """
    if not isinstance(data, dict):
        return DirectionsResult(status="INVALID_RESPONSE")
    code = str(data.get("code") or "UnknownError")
    if code != "Ok":
        return DirectionsResult(status=code)

    trips = data.get("trips") or []
    if not isinstance(trips, list) or not trips or not isinstance(trips[0], dict):
        return DirectionsResult(status="NoTrips")
    trip = trips[0]
    legs = []
    for leg in trip.get("legs") or []:
        if not isinstance(leg, dict):
            continue
        distance, duration = leg.get("distance"), leg.get("duration")
        if not (_is_number(distance) and _is_number(duration)):
            return DirectionsResult(status="INVALID_RESPONSE")
        legs.append(DirectionsLeg(distance_m=distance, duration_s=duration))
    geometry = trip.get("geometry")
    if geometry is not None and not isinstance(geometry, str):
        return DirectionsResult(status="INVALID_RESPONSE")

    waypoints = data.get("waypoints") or []
    if not isinstance(waypoints, list):
        return DirectionsResult(status="InvalidWaypoints")
    order: list[int] = []
    if waypoint_count:
        intermediate = waypoints[1 : waypoint_count + 1]
        if len(intermediate) != waypoint_count or not all(isinstance(item, dict) for item in intermediate):
            return DirectionsResult(status="InvalidWaypoints")
        positions = [(item.get("waypoint_index"), idx) for idx, item in enumerate(intermediate)]
        if any(isinstance(position, bool) or not isinstance(position, int) for position, _ in positions):
            return DirectionsResult(status="InvalidWaypoints")
        order = [idx for _, idx in sorted(positions)]

    return DirectionsResult(status="OK", legs=legs, waypoint_order=order, polyline=geometry)


class OSRMTripClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.osrm_base_url
        if not self.base_url:
            raise MissingCredentialError("osrm_base_url", "OSRM routing")
        self.base_url = self.base_url.rstrip("/")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0), transport=self._transport)

    async def directions(self, request: RouteRequest) -> DirectionsResult:
        # OSRM expects "lon,lat;lon,lat;..."
        coordinate_str = ";".join(
            f"{coordinate.longitude},{coordinate.latitude}" for coordinate in request.coordinates()
        )
        params = {
            "source": "first",
            "destination": "last",
            "roundtrip": "false",
            "overview": "full",
            "geometries": "polyline",
            "steps": "false",
        }
        url = f"{self.base_url}/trip/v1/{self.profile}/{coordinate_str}"
        logger.debug(f"Requesting OSRM trip through {len(request.waypoints)} waypoints")

        async with self._get_client() as client:
            try:
                response = await client.get(url, params=params)
                data = response.json()
            except httpx.TimeoutException as exc:
                logger.warning(f"OSRM trip request timed out: {exc}")
                raise RoutingServiceError("TIMEOUT", f"OSRM trip request timed out: {exc}") from exc
            except httpx.HTTPError as exc:
                logger.warning(f"Failed to connect to OSRM service at {self.base_url}: {exc}")
                raise RoutingServiceError("NETWORK_ERROR", f"OSRM service unreachable: {exc}") from exc
            except ValueError as exc:
                # OSRM answers errors with a JSON body; anything else is a transport-level failure
                raise RoutingServiceError(
                    f"HTTP_{response.status_code}", "OSRM response was not valid JSON"
                ) from exc

        result = parse_trip_response(data, len(request.waypoints))
        if not result.ok:
            detail = data.get("message", "") if isinstance(data, dict) else ""
            logger.warning(f"OSRM trip failed with {result.status}: {detail}")
        return result


def check_health(base_url: str | None = None) -> bool:
    """Check OSRM reachability with a minimal two-point route request."""
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    try:
        test_coords = "13.388860,52.517037;13.385983,52.496891"
        url = f"{base.rstrip('/')}/route/v1/{settings.osrm_profile}/{test_coords}"
        response = httpx.get(url, params={"overview": "false"}, timeout=5.0)
        response.raise_for_status()
        return response.json().get("code") == "Ok"
    except (httpx.HTTPError, ValueError):
        return False
