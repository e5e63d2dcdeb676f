"""Domain models for reported bins and the depot."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing Z."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A pinned latitude/longitude pair."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise ValueError("Coordinate values must be finite numbers.")
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude}")

    def as_query(self) -> str:
        return f"{self.latitude},{self.longitude}"

    def placeholder_label(self) -> str:
        return f"Pinned: {self.latitude:.4f}, {self.longitude:.4f}"


@dataclass(frozen=True, slots=True)
class BinRecord:
    """A full bin reported by a client, waiting for pickup."""

    id: str
    location: str
    amount: float
    coordinate: Coordinate
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Bin id must not be empty.")
        if isinstance(self.amount, bool) or not isinstance(self.amount, (int, float)):
            raise ValueError(f"Bin amount must be a number, got {self.amount!r}.")
        if not math.isfinite(self.amount) or self.amount <= 0:
            raise ValueError(f"Bin amount must be positive, got {self.amount}.")

    @classmethod
    def create(cls, location: str | None, amount: float, coordinate: Coordinate) -> "BinRecord":
        label = (location or "").strip() or coordinate.placeholder_label()
        return cls(id=uuid.uuid4().hex, location=label, amount=float(amount), coordinate=coordinate)

    def to_storage(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "location": self.location,
            "amount": self.amount,
            "lat": self.coordinate.latitude,
            "lng": self.coordinate.longitude,
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_storage(cls, payload: dict[str, Any]) -> "BinRecord":
        """Rebuild a record from its persisted form.

        Accepts either flat ``lat``/``lng`` keys or a nested ``coordinate``
        object. Raises ``KeyError``, ``TypeError`` or ``ValueError`` on bad input.
        """
        if not isinstance(payload, dict):
            raise TypeError(f"Expected an object, got {type(payload).__name__}.")
        position = payload.get("coordinate")
        if isinstance(position, dict):
            lat, lng = position["lat"], position["lng"]
        else:
            lat, lng = payload["lat"], payload["lng"]
        created_raw = payload.get("createdAt")
        created_at = parse_timestamp(str(created_raw)) if created_raw else _utc_now()
        amount = payload["amount"]
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise ValueError(f"Stored amount is not numeric: {amount!r}")
        return cls(
            id=str(payload["id"]),
            location=str(payload.get("location") or ""),
            amount=float(amount),
            coordinate=Coordinate(latitude=float(lat), longitude=float(lng)),
            created_at=created_at,
        )


@dataclass(frozen=True, slots=True)
class Depot:
    """The truck's fixed starting position."""

    code: str
    coordinate: Coordinate
