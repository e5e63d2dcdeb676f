"""Client-side bin submission."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ...errors import GeocodingError, MissingLocationError, PersistenceFailed
from ...models.domain import BinRecord, Coordinate
from ..geocoding import GoogleGeocoder
from .registry import BinRegistry

logger = logging.getLogger(__name__)

SUBMITTED_MESSAGE = "Bin details submitted successfully!"
CLEARED_MESSAGE = "All submitted bin data has been cleared."
SAVE_FAILED_WARNING = "Failed to save bin. Data might be lost on refresh."


@dataclass(slots=True)
class SubmissionResult:
    record: BinRecord
    warnings: list[str] = field(default_factory=list)

    @property
    def persisted(self) -> bool:
        return SAVE_FAILED_WARNING not in self.warnings


async def resolve_location(coordinate: Coordinate, geocoder: GoogleGeocoder | None, warnings: list[str]) -> str:
    if geocoder is None:
        return coordinate.placeholder_label()
    try:
        address = await geocoder.reverse(coordinate)
    except GeocodingError as exc:
        logger.warning(f"Reverse geocoding failed for {coordinate.as_query()}: {exc.status_code}")
        warnings.append(f"Address lookup failed ({exc.status_code}); using pinned coordinates.")
        return coordinate.placeholder_label()
    return address or coordinate.placeholder_label()


async def submit_bin(
    registry: BinRegistry,
    amount: Any,
    coordinate: Coordinate | None,
    location: str | None = None,
    geocoder: GoogleGeocoder | None = None,
) -> SubmissionResult:
    """Validate, label and register a reported bin.

    Validation failures raise before anything is stored or looked up. A failed
    store write is reported as a warning and the bin stays registered.
    """
    if coordinate is None:
        raise MissingLocationError("Please pin a location and enter the waste amount.")
    admitted = registry.ledger.try_admit(amount).raise_if_rejected()

    warnings: list[str] = []
    label = (location or "").strip()
    if not label:
        label = await resolve_location(coordinate, geocoder, warnings)

    record = BinRecord.create(location=label, amount=admitted, coordinate=coordinate)
    try:
        registry.add(record)
    except PersistenceFailed:
        warnings.append(SAVE_FAILED_WARNING)
    logger.info(f"Registered bin {record.id} ({record.amount} kg); committed {registry.ledger.committed} kg")
    return SubmissionResult(record=record, warnings=warnings)
