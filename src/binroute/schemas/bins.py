"""Bin submission request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import BinRecord
from ..services.bins.ledger import CapacityLedger


class BinSubmission(BaseModel):
    amount: float | str = Field(..., description="Waste weight in kg; numeric strings are accepted.")
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    location: Optional[str] = Field(
        default=None,
        description="Address label. When omitted the pin is reverse-geocoded.",
    )


class BinModel(BaseModel):
    id: str
    location: str
    amount: float
    latitude: float
    longitude: float
    created_at: datetime

    @classmethod
    def from_record(cls, record: BinRecord) -> "BinModel":
        return cls(
            id=record.id,
            location=record.location,
            amount=record.amount,
            latitude=record.coordinate.latitude,
            longitude=record.coordinate.longitude,
            created_at=record.created_at,
        )


class CapacityModel(BaseModel):
    capacity_limit_kg: float
    committed_kg: float
    remaining_kg: float
    utilization_percent: float

    @classmethod
    def from_ledger(cls, ledger: CapacityLedger) -> "CapacityModel":
        return cls(**ledger.snapshot())


class BinListResponse(BaseModel):
    bins: List[BinModel]
    capacity: CapacityModel
    warnings: List[str] = Field(default_factory=list)


class BinSubmissionResponse(BaseModel):
    bin: BinModel
    capacity: CapacityModel
    message: str
    warnings: List[str] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str
    capacity: Optional[CapacityModel] = None


class GeocodeResponse(BaseModel):
    latitude: float
    longitude: float
    address: Optional[str] = None
