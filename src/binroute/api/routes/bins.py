"""Client-facing bin submission endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, Request, status

from ...errors import AdmissionRejected, GeocodingError, MissingCredentialError, MissingLocationError, RejectionReason
from ...models.domain import Coordinate
from ...schemas.bins import (
    BinListResponse,
    BinModel,
    BinSubmission,
    BinSubmissionResponse,
    CapacityModel,
    GeocodeResponse,
    MessageResponse,
)
from ...services.bins.registry import BinRegistry
from ...services.bins.service import CLEARED_MESSAGE, SUBMITTED_MESSAGE, submit_bin
from ...services.geocoding import GoogleGeocoder, get_geocoder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bins", tags=["bins"])


def _registry(request: Request) -> BinRegistry:
    return request.app.state.client_registry


def _storage_warnings(registry: BinRegistry) -> list[str]:
    if registry.storage_issue is None:
        return []
    return ["Could not load previously submitted bins."]


@router.get("", response_model=BinListResponse, status_code=status.HTTP_200_OK)
def list_bins(request: Request) -> BinListResponse:
    registry = _registry(request)
    return BinListResponse(
        bins=[BinModel.from_record(record) for record in registry.list()],
        capacity=CapacityModel.from_ledger(registry.ledger),
        warnings=_storage_warnings(registry),
    )


@router.get("/capacity", response_model=CapacityModel, status_code=status.HTTP_200_OK)
def get_capacity(request: Request) -> CapacityModel:
    return CapacityModel.from_ledger(_registry(request).ledger)


@router.post("", response_model=BinSubmissionResponse, status_code=status.HTTP_201_CREATED)
async def create_bin(payload: BinSubmission, request: Request) -> BinSubmissionResponse:
    registry = _registry(request)
    coordinate = None
    if payload.latitude is not None and payload.longitude is not None:
        try:
            coordinate = Coordinate(latitude=payload.latitude, longitude=payload.longitude)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    try:
        result = await submit_bin(
            registry,
            amount=payload.amount,
            coordinate=coordinate,
            location=payload.location,
            geocoder=get_geocoder(),
        )
    except MissingLocationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except AdmissionRejected as exc:
        code = (
            status.HTTP_409_CONFLICT
            if exc.reason is RejectionReason.CAPACITY_EXCEEDED
            else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(status_code=code, detail={"reason": exc.reason.value, "message": exc.message}) from exc
    except Exception as exc:
        logger.exception(f"Error submitting bin: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to submit bin: {str(exc)}",
        ) from exc

    return BinSubmissionResponse(
        bin=BinModel.from_record(result.record),
        capacity=CapacityModel.from_ledger(registry.ledger),
        message=SUBMITTED_MESSAGE,
        warnings=result.warnings,
    )


@router.delete("", response_model=MessageResponse, status_code=status.HTTP_200_OK)
def clear_bins(request: Request) -> MessageResponse:
    registry = _registry(request)
    registry.clear()
    return MessageResponse(message=CLEARED_MESSAGE, capacity=CapacityModel.from_ledger(registry.ledger))


@router.get("/geocode", response_model=GeocodeResponse, status_code=status.HTTP_200_OK)
async def reverse_geocode(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
) -> GeocodeResponse:
    try:
        geocoder = GoogleGeocoder()
    except MissingCredentialError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    try:
        address = await geocoder.reverse(Coordinate(latitude=latitude, longitude=longitude))
    except GeocodingError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Address lookup failed: {exc.status_code}",
        ) from exc
    return GeocodeResponse(latitude=latitude, longitude=longitude, address=address)
