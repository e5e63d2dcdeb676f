"""Route plan state machine and directions result interpretation."""

from __future__ import annotations

import logging
import math
from typing import Callable, Protocol, Sequence

from ...errors import MalformedRouteError, NoBinsError, RoutingServiceError
from ...models.domain import BinRecord, Coordinate
from .models import (
    DirectionsLeg,
    DirectionsResult,
    OutcomeKind,
    PlanOutcome,
    PlanStatus,
    RoutePlan,
    RouteRequest,
    RouteSummary,
)
from .polyline import decode_polyline
from .request_builder import build_route_request

logger = logging.getLogger(__name__)

PLANNED_MESSAGE = "Route planned successfully!"
CLEARED_MESSAGE = "Route cleared."


class DirectionsClient(Protocol):
    async def directions(self, request: RouteRequest) -> DirectionsResult: ...


def _leg_number(value) -> float:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise MalformedRouteError(f"Leg value {value!r} is not a number.")
    return value


def summarize_legs(legs: Sequence[DirectionsLeg]) -> RouteSummary:
    """Total distance in km (2 decimals) and duration in whole minutes (half-up)."""
    if not legs:
        raise MalformedRouteError("Directions response contains no legs.")
    total_distance = sum(_leg_number(leg.distance_m) for leg in legs)
    total_duration = sum(_leg_number(leg.duration_s) for leg in legs)
    return RouteSummary(
        total_distance_km=round(total_distance / 1000, 2),
        total_duration_min=int(math.floor(total_duration / 60 + 0.5)),
    )


def order_stops(request: RouteRequest, waypoint_order: Sequence[int]) -> list[BinRecord]:
    waypoints = [waypoint.bin for waypoint in request.waypoints]
    order = list(waypoint_order)
    if any(isinstance(index, bool) or not isinstance(index, int) for index in order):
        raise MalformedRouteError(f"Waypoint order {order} contains non-integer indices.")
    if not order and waypoints:
        order = list(range(len(waypoints)))
    if sorted(order) != list(range(len(waypoints))):
        raise MalformedRouteError(f"Waypoint order {order} does not cover {len(waypoints)} waypoints.")
    return [waypoints[index] for index in order] + [request.destination]


def _decode_path(polyline: str | None) -> list[tuple[float, float]]:
    if not polyline:
        return []
    try:
        return decode_polyline(polyline)
    except (ValueError, IndexError, TypeError) as exc:
        logger.warning(f"Ignoring undecodable route polyline: {exc}")
        return []


class RoutePlanner:
    """Owns one driver's route plan: unplanned -> planning -> planned.

    Only one directions request is in flight at a time. Each request carries a
    generation number; a response is applied only while the plan is still
    planning under that generation, so responses arriving after a clear or a
    bin change are dropped.
    """

    def __init__(self, client_factory: Callable[[], DirectionsClient]) -> None:
        self._client_factory = client_factory
        self._plan = RoutePlan()
        self._generation = 0

    @property
    def plan(self) -> RoutePlan:
        return self._plan

    @property
    def status(self) -> PlanStatus:
        return self._plan.status

    def _reset(self, status_code: str | None = None) -> None:
        self._plan = RoutePlan(status=PlanStatus.UNPLANNED, status_code=status_code)

    async def request_plan(self, bins: Sequence[BinRecord], depot: Coordinate) -> PlanOutcome:
        if self._plan.status is PlanStatus.PLANNING:
            return PlanOutcome(OutcomeKind.ALREADY_PLANNING, "A route is already being planned.")
        if self._plan.status is PlanStatus.PLANNED:
            return PlanOutcome(OutcomeKind.ALREADY_PLANNED, "Route already planned. Clear it to plan again.")

        try:
            request = build_route_request(bins, depot)
        except NoBinsError as exc:
            return PlanOutcome(OutcomeKind.NO_BINS, str(exc))

        # Raises MissingCredentialError before any state changes.
        client = self._client_factory()

        self._generation += 1
        generation = self._generation
        self._plan = RoutePlan(status=PlanStatus.PLANNING)
        logger.info(f"Planning route for {len(bins)} bins (request #{generation})")

        try:
            result = await client.directions(request)
        except RoutingServiceError as exc:
            return self._fail(generation, exc.status_code)
        except Exception:
            if generation == self._generation and self._plan.status is PlanStatus.PLANNING:
                self._reset("UNKNOWN_ERROR")
            raise

        try:
            return self._apply(generation, request, result)
        except Exception:
            logger.exception(f"Could not interpret directions response for request #{generation}")
            return self._fail(generation, "MALFORMED_RESPONSE")

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation and self._plan.status is PlanStatus.PLANNING

    def _fail(self, generation: int, status_code: str) -> PlanOutcome:
        if not self._is_current(generation):
            logger.info(f"Discarding failed response for superseded request #{generation}")
            return PlanOutcome(OutcomeKind.STALE, "Route request was superseded.", status_code)
        logger.warning(f"Route planning failed: {status_code}")
        self._reset(status_code)
        return PlanOutcome(OutcomeKind.ROUTING_FAILED, f"Route planning failed: {status_code}", status_code)

    def _apply(self, generation: int, request: RouteRequest, result: DirectionsResult) -> PlanOutcome:
        if not self._is_current(generation):
            logger.info(f"Discarding late response for superseded request #{generation}")
            return PlanOutcome(OutcomeKind.STALE, "Route request was superseded.", result.status)
        if not result.ok:
            return self._fail(generation, result.status)
        try:
            summary = summarize_legs(result.legs)
            stops = order_stops(request, result.waypoint_order)
        except MalformedRouteError as exc:
            logger.warning(f"Malformed directions response: {exc}")
            return self._fail(generation, "MALFORMED_RESPONSE")

        self._plan = RoutePlan(
            status=PlanStatus.PLANNED,
            ordered_stops=stops,
            summary=summary,
            path=_decode_path(result.polyline),
            status_code=result.status,
        )
        logger.info(f"Route planned: {summary.distance_text}, {summary.duration_text}")
        return PlanOutcome(OutcomeKind.PLANNED, PLANNED_MESSAGE, result.status)

    def clear_plan(self) -> bool:
        """Drop a planned or in-flight route. Returns False when there was nothing to clear."""
        if self._plan.status is PlanStatus.UNPLANNED:
            return False
        self._reset()
        return True

    def invalidate(self) -> None:
        if self._plan.status is not PlanStatus.UNPLANNED:
            logger.info(f"Bin set changed; discarding {self._plan.status.value} route")
            self._reset()
