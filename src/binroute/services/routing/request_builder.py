"""Builds directions requests from the registered bins."""

from __future__ import annotations

from typing import Sequence

from ...errors import NoBinsError
from ...models.domain import BinRecord, Coordinate
from .models import RouteRequest, Waypoint


def build_route_request(bins: Sequence[BinRecord], depot: Coordinate) -> RouteRequest:
    """Route from the depot through every bin.

    The last registered bin is the destination and every other bin is a
    waypoint the directions service may reorder, so the result is only
    optimal for that fixed endpoint. Bins sharing a coordinate stay separate
    stops.
    """
    if not bins:
        raise NoBinsError("No bins to plan route.")

    *intermediate, destination = bins
    return RouteRequest(
        origin=depot,
        destination=destination,
        waypoints=tuple(Waypoint(bin=record, stopover=True) for record in intermediate),
        optimize_waypoints=True,
        travel_mode="driving",
    )
