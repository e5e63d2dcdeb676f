"""Driver-facing route planning endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, status

from ...errors import MissingCredentialError
from ...schemas.bins import BinModel
from ...schemas.routing import DepotModel, DriverBinsResponse, RoutePlanModel, RoutePlanResponse
from ...services.routing.models import OutcomeKind
from ...services.routing.service import DriverSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/driver", tags=["driver"])

_OUTCOME_STATUS = {
    OutcomeKind.NO_BINS: status.HTTP_400_BAD_REQUEST,
    OutcomeKind.ALREADY_PLANNING: status.HTTP_409_CONFLICT,
    OutcomeKind.ALREADY_PLANNED: status.HTTP_409_CONFLICT,
    OutcomeKind.STALE: status.HTTP_409_CONFLICT,
    OutcomeKind.ROUTING_FAILED: status.HTTP_502_BAD_GATEWAY,
}


def _session(request: Request) -> DriverSession:
    return request.app.state.driver_session


def _bins_response(session: DriverSession) -> DriverBinsResponse:
    depot = session.depot
    warnings = []
    if session.registry.storage_issue is not None:
        warnings.append("Could not load bin data.")
    return DriverBinsResponse(
        depot=DepotModel(code=depot.code, latitude=depot.coordinate.latitude, longitude=depot.coordinate.longitude),
        bins=[BinModel.from_record(record) for record in session.registry.list()],
        plan=RoutePlanModel.from_plan(session.planner.plan),
        message=session.status_message(),
        warnings=warnings,
    )


@router.get("/bins", response_model=DriverBinsResponse, status_code=status.HTTP_200_OK)
def get_driver_bins(request: Request) -> DriverBinsResponse:
    return _bins_response(_session(request))


@router.post("/reload", response_model=DriverBinsResponse, status_code=status.HTTP_200_OK)
def reload_bins(request: Request) -> DriverBinsResponse:
    session = _session(request)
    session.reload()
    return _bins_response(session)


@router.get("/route", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def get_route(request: Request) -> RoutePlanResponse:
    return RoutePlanResponse(plan=RoutePlanModel.from_plan(_session(request).planner.plan))


@router.post("/route", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
async def plan_route(request: Request) -> RoutePlanResponse:
    session = _session(request)
    try:
        outcome = await session.plan_route()
    except MissingCredentialError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error planning route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to plan route: {str(exc)}",
        ) from exc

    if not outcome.succeeded:
        detail = {"outcome": outcome.kind.value, "message": outcome.message}
        if outcome.status_code:
            detail["status_code"] = outcome.status_code
        raise HTTPException(status_code=_OUTCOME_STATUS[outcome.kind], detail=detail)

    return RoutePlanResponse(plan=RoutePlanModel.from_plan(session.planner.plan), message=outcome.message)


@router.delete("/route", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def clear_route(request: Request) -> RoutePlanResponse:
    session = _session(request)
    message = session.clear_route()
    if message is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No route to clear.")
    return RoutePlanResponse(plan=RoutePlanModel.from_plan(session.planner.plan), message=message)
