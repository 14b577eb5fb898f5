"""
Purpose: Decide whether a route passes through any hazard.
What it does:
- builds the route LineString once
- tests it against every report's 100 m circle, then every drawn area's polygon
- returns True on the first hit

Malformed areas are logged and skipped so one bad drawing can't hide the others.

Rule: Pure function of (route, hazard snapshot). No HTTP, no registry access.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from hazards.geometry import MalformedHazard, area_polygon, report_buffer, route_line
from hazards.models import HazardSet, LatLon
from hazards.policy import HazardPolicy, default_hazard_policy

logger = logging.getLogger(__name__)


def route_intersects_hazards(
    route: Sequence[LatLon],
    hazards: HazardSet,
    policy: Optional[HazardPolicy] = None,
) -> bool:
    """
    True if the route touches any hazard geometry.

    Args:
        route: (lat, lon) points, at least two
        hazards: snapshot of reports and areas
        policy: buffer radius / circle resolution

    Raises:
        ValueError if the route has fewer than two points.
    """
    line = route_line(route)

    if hazards.is_empty:
        return False

    policy = policy or default_hazard_policy()

    for report in hazards.reports:
        circle = report_buffer(report, policy.report_buffer_m, policy.buffer_segments)
        if line.intersects(circle):
            logger.debug(f"Route crosses hazard report {report.id}")
            return True

    for area in hazards.areas:
        try:
            polygon = area_polygon(area)
        except MalformedHazard as e:
            logger.warning(f"Skipping hazard area: {e}")
            continue
        if line.intersects(polygon):
            logger.debug(f"Route crosses hazard area {area.id}")
            return True

    return False
