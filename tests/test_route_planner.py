import asyncio

import pytest

from binroute.errors import MissingCredentialError, NoBinsError, RoutingServiceError
from binroute.models.domain import BinRecord, Coordinate
from binroute.services.routing.interpreter import RoutePlanner, summarize_legs
from binroute.services.routing.models import DirectionsLeg, DirectionsResult, OutcomeKind, PlanStatus
from binroute.services.routing.request_builder import build_route_request

DEPOT = Coordinate(6.902146919051226, 79.86086322142651)


def _bin(name: str, lat: float, lng: float, amount: float = 10) -> BinRecord:
    return BinRecord.create(location=name, amount=amount, coordinate=Coordinate(lat, lng))


def _abc() -> list[BinRecord]:
    return [_bin("A", 1, 1), _bin("B", 2, 2), _bin("C", 3, 3)]


def _ok_result(order=(1, 0)) -> DirectionsResult:
    # D->B 5km/10min, B->A 3km/6min, A->C 4km/8min
    return DirectionsResult(
        status="OK",
        legs=[
            DirectionsLeg(distance_m=5000, duration_s=600),
            DirectionsLeg(distance_m=3000, duration_s=360),
            DirectionsLeg(distance_m=4000, duration_s=480),
        ],
        waypoint_order=list(order),
    )


class StubClient:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.requests = []

    async def directions(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.result


class GatedClient(StubClient):
    """Holds every response until ``release`` is set."""

    def __init__(self, result):
        super().__init__(result=result)
        self.release = None

    async def directions(self, request):
        self.requests.append(request)
        await self.release.wait()
        return self.result


def test_build_request_pins_last_bin_as_destination():
    a, b, c = _abc()
    request = build_route_request([a, b, c], DEPOT)

    assert request.origin == DEPOT
    assert request.destination is c
    assert [waypoint.bin for waypoint in request.waypoints] == [a, b]
    assert all(waypoint.stopover for waypoint in request.waypoints)
    assert request.optimize_waypoints
    assert request.travel_mode == "driving"


def test_build_request_single_bin_has_no_waypoints():
    only = _bin("A", 1, 1)
    request = build_route_request([only], DEPOT)

    assert request.destination is only
    assert request.waypoints == ()


def test_build_request_keeps_duplicate_coordinates():
    bins = [_bin("A", 1, 1), _bin("A2", 1, 1), _bin("C", 3, 3)]
    request = build_route_request(bins, DEPOT)

    assert len(request.waypoints) == 2


def test_build_request_without_bins():
    with pytest.raises(NoBinsError):
        build_route_request([], DEPOT)


def test_summarize_legs_rounds_for_display():
    summary = summarize_legs(_ok_result().legs)

    assert summary.total_distance_km == 12.00
    assert summary.total_duration_min == 24
    assert summary.distance_text == "12.00 km"
    assert summary.duration_text == "24 min"


def test_summarize_legs_rounds_half_minutes_up_and_skips_missing_values():
    summary = summarize_legs(
        [DirectionsLeg(distance_m=1234, duration_s=90), DirectionsLeg(distance_m=None, duration_s=None)]
    )

    assert summary.total_distance_km == 1.23
    assert summary.total_duration_min == 2


def test_successful_plan_orders_stops_and_summarizes():
    a, b, c = _abc()
    client = StubClient(result=_ok_result())
    planner = RoutePlanner(lambda: client)

    outcome = asyncio.run(planner.request_plan([a, b, c], DEPOT))

    assert outcome.kind is OutcomeKind.PLANNED
    assert planner.status is PlanStatus.PLANNED
    assert planner.plan.ordered_stops == [b, a, c]
    assert planner.plan.summary.total_distance_km == 12.00
    assert planner.plan.summary.total_duration_min == 24
    assert len(client.requests) == 1


def test_no_bins_keeps_plan_unplanned():
    client = StubClient(result=_ok_result())
    planner = RoutePlanner(lambda: client)

    outcome = asyncio.run(planner.request_plan([], DEPOT))

    assert outcome.kind is OutcomeKind.NO_BINS
    assert planner.status is PlanStatus.UNPLANNED
    assert client.requests == []


def test_non_ok_status_reverts_to_unplanned():
    planner = RoutePlanner(lambda: StubClient(result=DirectionsResult(status="ZERO_RESULTS")))

    outcome = asyncio.run(planner.request_plan(_abc(), DEPOT))

    assert outcome.kind is OutcomeKind.ROUTING_FAILED
    assert outcome.status_code == "ZERO_RESULTS"
    assert outcome.message == "Route planning failed: ZERO_RESULTS"
    assert planner.status is PlanStatus.UNPLANNED
    assert planner.plan.summary is None


def test_transport_error_reverts_to_unplanned():
    planner = RoutePlanner(lambda: StubClient(error=RoutingServiceError("TIMEOUT")))

    outcome = asyncio.run(planner.request_plan(_abc(), DEPOT))

    assert outcome.kind is OutcomeKind.ROUTING_FAILED
    assert outcome.status_code == "TIMEOUT"
    assert planner.status is PlanStatus.UNPLANNED


@pytest.mark.parametrize(
    "result",
    [
        DirectionsResult(status="OK", legs=[]),
        DirectionsResult(status="OK", legs=[DirectionsLeg(100, 60)], waypoint_order=[0, 0]),
        DirectionsResult(status="OK", legs=[DirectionsLeg(100, 60)], waypoint_order=[5, 1]),
        DirectionsResult(status="OK", legs=[DirectionsLeg(100, 60)], waypoint_order=[1.0, 0.0]),
        DirectionsResult(status="OK", legs=[DirectionsLeg("1000", 60)], waypoint_order=[1, 0]),
        DirectionsResult(status="OK", legs=[DirectionsLeg(100, 60)], waypoint_order=None),
    ],
)
def test_malformed_response_is_a_routing_failure(result):
    planner = RoutePlanner(lambda: StubClient(result=result))

    outcome = asyncio.run(planner.request_plan(_abc(), DEPOT))

    assert outcome.kind is OutcomeKind.ROUTING_FAILED
    assert outcome.status_code == "MALFORMED_RESPONSE"
    assert planner.status is PlanStatus.UNPLANNED

    retry = asyncio.run(planner.request_plan(_abc(), DEPOT))
    assert retry.kind is OutcomeKind.ROUTING_FAILED


def test_undecodable_polyline_still_plans_without_path():
    result = _ok_result()
    result.polyline = 12345
    planner = RoutePlanner(lambda: StubClient(result=result))

    outcome = asyncio.run(planner.request_plan(_abc(), DEPOT))

    assert outcome.kind is OutcomeKind.PLANNED
    assert planner.plan.path == []


def test_missing_credential_leaves_state_untouched():
    def factory():
        raise MissingCredentialError("google_maps_api_key", "Google Maps routing")

    planner = RoutePlanner(factory)
    with pytest.raises(MissingCredentialError):
        asyncio.run(planner.request_plan(_abc(), DEPOT))
    assert planner.status is PlanStatus.UNPLANNED


def test_second_request_while_planning_is_rejected():
    bins = _abc()

    async def scenario():
        client = GatedClient(_ok_result())
        client.release = asyncio.Event()
        planner = RoutePlanner(lambda: client)

        first = asyncio.create_task(planner.request_plan(bins, DEPOT))
        await asyncio.sleep(0)
        assert planner.status is PlanStatus.PLANNING

        second = await planner.request_plan(bins, DEPOT)
        client.release.set()
        return await first, second, client, planner

    first, second, client, planner = asyncio.run(scenario())

    assert second.kind is OutcomeKind.ALREADY_PLANNING
    assert first.kind is OutcomeKind.PLANNED
    assert len(client.requests) == 1
    assert planner.status is PlanStatus.PLANNED


def test_request_while_planned_is_reported():
    planner = RoutePlanner(lambda: StubClient(result=_ok_result()))
    asyncio.run(planner.request_plan(_abc(), DEPOT))

    outcome = asyncio.run(planner.request_plan(_abc(), DEPOT))

    assert outcome.kind is OutcomeKind.ALREADY_PLANNED
    assert planner.status is PlanStatus.PLANNED


def test_late_response_after_clear_is_dropped():
    bins = _abc()

    async def scenario():
        client = GatedClient(_ok_result())
        client.release = asyncio.Event()
        planner = RoutePlanner(lambda: client)

        pending = asyncio.create_task(planner.request_plan(bins, DEPOT))
        await asyncio.sleep(0)
        assert planner.clear_plan() is True
        client.release.set()
        return await pending, planner

    outcome, planner = asyncio.run(scenario())

    assert outcome.kind is OutcomeKind.STALE
    assert planner.status is PlanStatus.UNPLANNED
    assert planner.plan.summary is None


def test_late_response_does_not_overwrite_newer_request():
    bins = _abc()

    async def scenario():
        slow = GatedClient(_ok_result(order=(0, 1)))
        slow.release = asyncio.Event()
        fast = StubClient(result=_ok_result(order=(1, 0)))
        clients = iter([slow, fast])
        planner = RoutePlanner(lambda: next(clients))

        stale = asyncio.create_task(planner.request_plan(bins, DEPOT))
        await asyncio.sleep(0)
        planner.invalidate()
        fresh = await planner.request_plan(bins, DEPOT)
        slow.release.set()
        return await stale, fresh, planner

    stale, fresh, planner = asyncio.run(scenario())

    assert fresh.kind is OutcomeKind.PLANNED
    assert stale.kind is OutcomeKind.STALE
    a, b, c = bins
    assert planner.plan.ordered_stops == [b, a, c]


def test_clear_plan_from_planned_and_unplanned():
    planner = RoutePlanner(lambda: StubClient(result=_ok_result()))
    assert planner.clear_plan() is False

    asyncio.run(planner.request_plan(_abc(), DEPOT))
    assert planner.clear_plan() is True
    assert planner.status is PlanStatus.UNPLANNED
    assert planner.plan.ordered_stops == []


def test_invalidate_drops_planned_route():
    planner = RoutePlanner(lambda: StubClient(result=_ok_result()))
    asyncio.run(planner.request_plan(_abc(), DEPOT))

    planner.invalidate()

    assert planner.status is PlanStatus.UNPLANNED
    assert planner.plan.summary is None
