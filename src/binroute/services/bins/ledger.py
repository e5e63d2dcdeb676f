"""Truck capacity accounting for reported bins."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable

from ...errors import AdmissionRejected, RejectionReason
from ...models.domain import BinRecord

# Slack for float rounding when an amount exactly fills the truck.
CAPACITY_TOLERANCE_KG = 1e-9


@dataclass(frozen=True, slots=True)
class Admission:
    accepted: bool
    amount: float | None = None
    reason: RejectionReason | None = None
    message: str | None = None

    def raise_if_rejected(self) -> float:
        if not self.accepted:
            raise AdmissionRejected(self.reason, self.message or "Submission rejected.")
        return self.amount


def coerce_amount(value: Any) -> float | None:
    """Return a finite float for numeric input (numbers or numeric strings), else None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class CapacityLedger:
    """Tracks committed weight against a fixed truck capacity."""

    def __init__(self, capacity_limit: float) -> None:
        if not math.isfinite(capacity_limit) or capacity_limit <= 0:
            raise ValueError("Capacity limit must be a positive number.")
        self.capacity_limit = float(capacity_limit)
        self._committed = 0.0

    @property
    def committed(self) -> float:
        return self._committed

    @property
    def remaining(self) -> float:
        return max(0.0, self.capacity_limit - self._committed)

    @property
    def utilization_percent(self) -> float:
        return min(100.0, self._committed / self.capacity_limit * 100)

    def try_admit(self, amount: Any) -> Admission:
        number = coerce_amount(amount)
        if number is None or number <= 0:
            return Admission(
                accepted=False,
                reason=RejectionReason.NOT_POSITIVE,
                message="Please enter a valid positive waste amount.",
            )
        if number - (self.capacity_limit - self._committed) > CAPACITY_TOLERANCE_KG:
            return Admission(
                accepted=False,
                amount=number,
                reason=RejectionReason.CAPACITY_EXCEEDED,
                message=f"Amount exceeds remaining truck capacity of {self.remaining:.2f} kg.",
            )
        return Admission(accepted=True, amount=number)

    def recompute(self, records: Iterable[BinRecord]) -> float:
        self._committed = math.fsum(record.amount for record in records)
        return self._committed

    def snapshot(self) -> dict[str, float]:
        return {
            "capacity_limit_kg": self.capacity_limit,
            "committed_kg": self._committed,
            "remaining_kg": self.remaining,
            "utilization_percent": self.utilization_percent,
        }
