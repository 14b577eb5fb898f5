import threading

import pytest
from shapely.geometry import LineString, Point

from detour.planner import bypass_waypoint, detour_anchor, plan_detour, select_nearest_hazard
from hazards.models import HazardArea, HazardReport, HazardSet, Severity
from hazards.policy import HazardPolicy

from conftest import FakeRouter


@pytest.fixture
def far_area():
    return HazardArea.rectangle(south=17.38, west=78.48, north=17.39, east=78.49)


def _leg_from(calls, start):
    return [call for call in calls if call[0] == start]


def test_nearest_hazard_prefers_closer_report(origin, far_area):
    near_report = HazardReport.new(17.31, 78.41, Severity.LOW)
    hazards = HazardSet(reports=(near_report,), areas=(far_area,))

    nearest = select_nearest_hazard(origin, hazards)

    assert nearest.hazard is near_report
    assert isinstance(nearest.geometry, Point)
    # ~1.5 km as the crow flies
    assert 1.0 < nearest.distance_km < 2.0


def test_nearest_hazard_uses_area_boundary_not_area(origin):
    """
    Origin sits inside a big area: distance is to the ring edge, not zero.
    """
    surrounding = HazardArea.rectangle(south=17.25, west=78.35, north=17.45, east=78.55)
    report = HazardReport.new(17.36, 78.46, Severity.HIGH)  # ~9 km away

    nearest = select_nearest_hazard(origin, HazardSet(reports=(report,), areas=(surrounding,)))

    assert nearest.hazard is surrounding
    assert isinstance(nearest.geometry, LineString)
    # closest edge is 0.05 deg away (south / west side), a bit over 5 km
    assert 5.0 < nearest.distance_km < 6.0


def test_nearest_hazard_tie_goes_to_first_seen(origin):
    first = HazardReport.new(17.32, 78.42, Severity.LOW)
    second = HazardReport.new(17.32, 78.42, Severity.HIGH)

    nearest = select_nearest_hazard(origin, HazardSet(reports=(first, second)))

    assert nearest.hazard is first


def test_nearest_hazard_none_when_empty(origin):
    assert select_nearest_hazard(origin, HazardSet()) is None


def test_nearest_hazard_skips_malformed_area(origin, far_area):
    degenerate = HazardArea.new("polygon", [[(17.30, 78.40), (17.30, 78.40)]])
    nearest = select_nearest_hazard(origin, HazardSet(areas=(degenerate, far_area)))
    assert nearest.hazard is far_area


def test_anchor_is_nearest_route_point_to_hazard(straight_route):
    # hazard just north-west of the midpoint, perpendicular to the line
    anchor = detour_anchor(straight_route, Point(78.44, 17.36))
    assert anchor == pytest.approx((17.35, 78.45))


def test_bypass_waypoint_offsets_both_axes(straight_route):
    waypoint = bypass_waypoint(straight_route, Point(78.45, 17.35), offset_deg=0.01)
    assert waypoint == pytest.approx((17.36, 78.46))


def test_plan_detour_requests_two_legs_and_merges(straight_route, origin, high_report_on_route):
    router = FakeRouter(points=7)
    hazards = HazardSet(reports=(high_report_on_route,))

    alternate = plan_detour(straight_route, origin, hazards, router)

    # 1. both legs were requested
    assert len(router.calls) == 2
    (leg_a,) = _leg_from(router.calls, origin)
    waypoint = leg_a[1]
    assert waypoint == pytest.approx((17.36, 78.46))
    (leg_b,) = _leg_from(router.calls, waypoint)
    assert leg_b[1] == straight_route[-1]

    # 2. no points dropped in the merge, leg A first
    assert len(alternate) == 7 + 7
    assert alternate[0] == origin
    assert alternate[-1] == pytest.approx(straight_route[-1])
    assert alternate[6] == pytest.approx(waypoint)


def test_plan_detour_none_when_leg_b_fails(straight_route, origin, high_report_on_route):
    destination = straight_route[-1]
    router = FakeRouter(fail_when=lambda start, end: end == destination)

    alternate = plan_detour(straight_route, origin, HazardSet(reports=(high_report_on_route,)), router)

    assert alternate is None


def test_plan_detour_none_when_leg_a_raises(straight_route, origin, high_report_on_route):
    router = FakeRouter(raise_when=lambda start, end: start == origin)

    alternate = plan_detour(straight_route, origin, HazardSet(reports=(high_report_on_route,)), router)

    assert alternate is None


def test_plan_detour_none_when_leg_is_empty(straight_route, origin, high_report_on_route):
    alternate = plan_detour(
        straight_route, origin, HazardSet(reports=(high_report_on_route,)), lambda start, end: ()
    )
    assert alternate is None


def test_plan_detour_none_without_hazards(straight_route, origin, fake_router):
    assert plan_detour(straight_route, origin, HazardSet(), fake_router) is None
    assert fake_router.calls == []


def test_plan_detour_legs_run_concurrently(straight_route, origin, high_report_on_route):
    """
    Each leg waits for the other one to start. Run one after the other, the
    barrier would time out and the detour would come back as None.
    """
    barrier = threading.Barrier(2, timeout=5)
    inner = FakeRouter()

    def router(start, end):
        barrier.wait()
        return inner(start, end)

    alternate = plan_detour(straight_route, origin, HazardSet(reports=(high_report_on_route,)), router)

    assert alternate is not None
    assert len(alternate) == 10


def test_plan_detour_gives_up_after_leg_timeout(straight_route, origin, high_report_on_route):
    release = threading.Event()
    inner = FakeRouter()
    destination = straight_route[-1]

    def router(start, end):
        if end == destination:
            release.wait(5)
        return inner(start, end)

    policy = HazardPolicy(detour_leg_timeout_s=0.05)
    try:
        alternate = plan_detour(
            straight_route, origin, HazardSet(reports=(high_report_on_route,)), router, policy
        )
    finally:
        release.set()

    assert alternate is None


def test_plan_detour_anchors_on_nearest_area(straight_route, origin, crossing_rectangle):
    router = FakeRouter()

    alternate = plan_detour(straight_route, origin, HazardSet(areas=(crossing_rectangle,)), router)

    assert alternate is not None
    (leg_a,) = _leg_from(router.calls, origin)
    # the route runs corner to corner through the rectangle, the anchor is where it meets the ring
    anchor = (leg_a[1][0] - 0.01, leg_a[1][1] - 0.01)
    assert anchor == pytest.approx((17.34, 78.44)) or anchor == pytest.approx((17.36, 78.46))
