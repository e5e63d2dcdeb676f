"""Driver-side route planning orchestration."""

from __future__ import annotations

import logging
from typing import Callable

from ...config import settings
from ...models.domain import BinRecord, Coordinate, Depot
from ..bins.registry import BinRegistry
from .google_client import GoogleDirectionsClient
from .interpreter import CLEARED_MESSAGE, DirectionsClient, RoutePlanner
from .models import PlanOutcome
from .osrm_client import OSRMTripClient

logger = logging.getLogger(__name__)

WAITING_MESSAGE = "No bins reported yet. Waiting for submissions."


def get_directions_client() -> DirectionsClient:
    """Client for ``BINROUTE_ROUTING_PROVIDER``; raises MissingCredentialError when unconfigured."""
    if settings.routing_provider == "osrm":
        return OSRMTripClient()
    return GoogleDirectionsClient()


def default_depot() -> Depot:
    return Depot(
        code="DEPOT",
        coordinate=Coordinate(latitude=settings.depot_latitude, longitude=settings.depot_longitude),
    )


class DriverSession:
    """The driver's view: its own copy of the bins plus the route planned over them."""

    def __init__(
        self,
        registry: BinRegistry,
        depot: Depot | None = None,
        client_factory: Callable[[], DirectionsClient] | None = None,
    ) -> None:
        self.registry = registry
        self.depot = depot or default_depot()
        self.planner = RoutePlanner(client_factory or get_directions_client)
        registry.subscribe(self.planner.invalidate)

    def reload(self) -> tuple[BinRecord, ...]:
        """Pick up bins other front ends have saved since the last load."""
        self.registry.load()
        bins = self.registry.list()
        logger.info(f"Driver reloaded {len(bins)} bins")
        return bins

    async def plan_route(self) -> PlanOutcome:
        return await self.planner.request_plan(self.registry.list(), self.depot.coordinate)

    def clear_route(self) -> str | None:
        return CLEARED_MESSAGE if self.planner.clear_plan() else None

    def status_message(self) -> str | None:
        return WAITING_MESSAGE if not len(self.registry) else None
