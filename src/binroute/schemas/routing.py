"""Driver route request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..services.routing.models import RoutePlan
from .bins import BinModel


class DepotModel(BaseModel):
    code: str
    latitude: float
    longitude: float


class RouteSummaryModel(BaseModel):
    total_distance_km: float
    total_duration_min: int
    distance: str
    duration: str


class RoutePlanModel(BaseModel):
    status: str
    ordered_stops: List[BinModel] = Field(default_factory=list)
    summary: Optional[RouteSummaryModel] = None
    path: List[List[float]] = Field(default_factory=list)
    status_code: Optional[str] = None

    @classmethod
    def from_plan(cls, plan: RoutePlan) -> "RoutePlanModel":
        summary = None
        if plan.summary is not None:
            summary = RouteSummaryModel(
                total_distance_km=plan.summary.total_distance_km,
                total_duration_min=plan.summary.total_duration_min,
                distance=plan.summary.distance_text,
                duration=plan.summary.duration_text,
            )
        return cls(
            status=plan.status.value,
            ordered_stops=[BinModel.from_record(record) for record in plan.ordered_stops],
            summary=summary,
            path=[[lat, lng] for lat, lng in plan.path],
            status_code=plan.status_code,
        )


class DriverBinsResponse(BaseModel):
    depot: DepotModel
    bins: List[BinModel]
    plan: RoutePlanModel
    message: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)


class RoutePlanResponse(BaseModel):
    plan: RoutePlanModel
    message: Optional[str] = None
