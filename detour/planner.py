"""
Purpose: Build one alternate route around the hazard nearest the start.
What it does:

1. picks the hazard closest to the origin (report point, or the edge of a drawn area)
2. finds the route point nearest that hazard (the detour anchor) and shifts it
   by a fixed offset to get a bypass waypoint
3. asks the routing collaborator for origin -> waypoint and waypoint -> destination,
   both at the same time
4. glues the two legs together

Only the single nearest hazard is avoided. A route blocked by two separate hazards
may still cross the second one.

Rule: Routing failures never escape this module, they come back as None.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

from geopy.distance import geodesic
from shapely.geometry import LineString, Point
from shapely.ops import nearest_points

from hazards.geometry import (
    MalformedHazard,
    area_boundary,
    point_geometry,
    route_line,
    to_latlon,
)
from hazards.models import HazardArea, HazardReport, HazardSet, LatLon, Route
from hazards.policy import HazardPolicy, default_hazard_policy

logger = logging.getLogger(__name__)

# route(from, to) -> Route | None
RouteRequester = Callable[[LatLon, LatLon], Optional[Sequence[LatLon]]]


@dataclass(frozen=True)
class NearestHazard:
    """
    The hazard the detour is anchored on.
    geometry is a Point for reports and the outer ring LineString for areas.
    """
    hazard: Union[HazardReport, HazardArea]
    distance_km: float
    geometry: Union[Point, LineString]


def _distance_km(origin: LatLon, geometry: Union[Point, LineString]) -> float:
    # nearest point is found in degrees, the distance to it is measured on the ellipsoid
    if isinstance(geometry, Point):
        target = to_latlon(geometry)
    else:
        _, on_geometry = nearest_points(point_geometry(origin), geometry)
        target = to_latlon(on_geometry)
    return geodesic(origin, target).km


def select_nearest_hazard(origin: LatLon, hazards: HazardSet) -> Optional[NearestHazard]:
    """
    Closest hazard to origin. Reports are scanned before areas and only a
    strictly smaller distance replaces the current best, so ties go to the
    first one seen.
    """
    nearest: Optional[NearestHazard] = None

    for report in hazards.reports:
        geometry = point_geometry(report.location)
        distance = _distance_km(origin, geometry)
        if nearest is None or distance < nearest.distance_km:
            nearest = NearestHazard(hazard=report, distance_km=distance, geometry=geometry)

    for area in hazards.areas:
        try:
            geometry = area_boundary(area)
        except MalformedHazard as e:
            logger.warning(f"Ignoring hazard area for detour: {e}")
            continue
        distance = _distance_km(origin, geometry)
        if nearest is None or distance < nearest.distance_km:
            nearest = NearestHazard(hazard=area, distance_km=distance, geometry=geometry)

    return nearest


def detour_anchor(route: Sequence[LatLon], hazard_geometry: Union[Point, LineString]) -> LatLon:
    """Point on the route closest to the hazard geometry."""
    on_route, _ = nearest_points(route_line(route), hazard_geometry)
    return to_latlon(on_route)


def bypass_waypoint(
    route: Sequence[LatLon],
    hazard_geometry: Union[Point, LineString],
    offset_deg: float = 0.01,
) -> LatLon:
    lat, lon = detour_anchor(route, hazard_geometry)
    return (lat + offset_deg, lon + offset_deg)


def _request_leg(route_requester: RouteRequester, start: LatLon, end: LatLon) -> Optional[Route]:
    try:
        leg = route_requester(start, end)
    except Exception as e:  # any collaborator failure means no leg
        logger.warning(f"Detour leg {start} -> {end} failed: {e}")
        return None

    if not leg:
        logger.warning(f"Detour leg {start} -> {end} returned no route")
        return None
    return tuple(tuple(point) for point in leg)


def request_legs(
    route_requester: RouteRequester,
    origin: LatLon,
    waypoint: LatLon,
    destination: LatLon,
    timeout_s: Optional[float] = None,
) -> Optional[tuple]:
    """
    Fires origin -> waypoint and waypoint -> destination together and waits for both.
    Returns (leg_a, leg_b) or None if either is missing.
    """
    executor = ThreadPoolExecutor(max_workers=2)
    try:
        leg_a_future = executor.submit(_request_leg, route_requester, origin, waypoint)
        leg_b_future = executor.submit(_request_leg, route_requester, waypoint, destination)

        _, pending = wait([leg_a_future, leg_b_future], timeout=timeout_s)
        if pending:
            logger.warning(f"Detour legs timed out after {timeout_s}s")
            return None

        leg_a = leg_a_future.result()
        leg_b = leg_b_future.result()
    finally:
        # don't block on a leg that is still in flight after a timeout
        executor.shutdown(wait=False)

    if leg_a is None or leg_b is None:
        return None
    return leg_a, leg_b


def plan_detour(
    route: Sequence[LatLon],
    origin: LatLon,
    hazards: HazardSet,
    route_requester: RouteRequester,
    policy: Optional[HazardPolicy] = None,
) -> Optional[Route]:
    """
    Alternate route around the hazard nearest to origin, or None.

    Only call this when route_intersects_hazards(route, hazards) is True.

    Args:
        route: the blocked route, (lat, lon) points
        origin: the trip's geocoded start
        hazards: the same snapshot the intersection check used
        route_requester: routing collaborator, route(from, to) -> Route | None
        policy: detour offset and optional leg timeout

    Returns:
        leg A points followed by leg B points, or None when no hazard exists
        or either leg could not be routed.
    """
    policy = policy or default_hazard_policy()

    nearest = select_nearest_hazard(origin, hazards)
    if nearest is None:
        return None

    waypoint = bypass_waypoint(route, nearest.geometry, policy.detour_offset_deg)
    destination = tuple(route[-1])
    logger.info(
        f"Detouring around hazard {nearest.hazard.id} "
        f"({nearest.distance_km:.2f} km from start) via {waypoint}"
    )

    legs = request_legs(route_requester, origin, waypoint, destination, policy.detour_leg_timeout_s)
    if legs is None:
        logger.warning("No alternate route available")
        return None

    leg_a, leg_b = legs
    return leg_a + leg_b
