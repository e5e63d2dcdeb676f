"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from ...models.domain import BinRecord, Coordinate


@dataclass(frozen=True, slots=True)
class Waypoint:
    bin: BinRecord
    stopover: bool = True

    @property
    def coordinate(self) -> Coordinate:
        return self.bin.coordinate


@dataclass(frozen=True, slots=True)
class RouteRequest:
    origin: Coordinate
    destination: BinRecord
    waypoints: tuple[Waypoint, ...]
    optimize_waypoints: bool = True
    travel_mode: str = "driving"

    def coordinates(self) -> list[Coordinate]:
        """Origin, waypoints in request order, then destination."""
        return [self.origin, *(waypoint.coordinate for waypoint in self.waypoints), self.destination.coordinate]


@dataclass(frozen=True, slots=True)
class DirectionsLeg:
    distance_m: float | None
    duration_s: float | None


@dataclass(slots=True)
class DirectionsResult:
    status: str
    legs: List[DirectionsLeg] = field(default_factory=list)
    waypoint_order: List[int] = field(default_factory=list)
    polyline: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "OK"


@dataclass(frozen=True, slots=True)
class RouteSummary:
    total_distance_km: float
    total_duration_min: int

    @property
    def distance_text(self) -> str:
        return f"{self.total_distance_km:.2f} km"

    @property
    def duration_text(self) -> str:
        return f"{self.total_duration_min} min"


class PlanStatus(str, Enum):
    UNPLANNED = "unplanned"
    PLANNING = "planning"
    PLANNED = "planned"


class OutcomeKind(str, Enum):
    PLANNED = "planned"
    NO_BINS = "no_bins"
    ALREADY_PLANNING = "already_planning"
    ALREADY_PLANNED = "already_planned"
    ROUTING_FAILED = "routing_failed"
    STALE = "stale"


@dataclass(slots=True)
class RoutePlan:
    status: PlanStatus = PlanStatus.UNPLANNED
    ordered_stops: List[BinRecord] = field(default_factory=list)
    summary: RouteSummary | None = None
    path: List[tuple[float, float]] = field(default_factory=list)
    status_code: str | None = None


@dataclass(frozen=True, slots=True)
class PlanOutcome:
    kind: OutcomeKind
    message: str
    status_code: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.kind is OutcomeKind.PLANNED
