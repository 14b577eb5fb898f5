#Purpose: The geometry boundary for hazards and routes.
#Sole responsibility: turn (lat, lon) domain values into shapely geometries and back.
#Shapely works in (x, y) = (lon, lat). This is the only module that flips the order
#for geometry, the OSRM client does the same for its wire format.
#Typical responsibilities:
#route -> LineString
#hazard report -> geodesic circle Polygon (buffer in metres, not degrees)
#hazard area -> Polygon (outer ring + holes), malformed rings rejected
#point -> (lat, lon)

from typing import List, Sequence

from geopy.distance import geodesic
from shapely.affinity import translate
from shapely.geometry import LineString, MultiPolygon, Point, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.validation import make_valid

from .models import HazardArea, HazardReport, LatLon, Ring

MIN_RING_POINTS = 3


class MalformedHazard(Exception):
    """A drawn hazard area whose rings cannot form a polygon."""
    pass


def to_lonlat(coordinate: LatLon) -> tuple:
    lat, lon = coordinate
    return (lon, lat)


def to_latlon(point: Point) -> LatLon:
    """shapely Point (x=lon, y=lat) -> (lat, lon)"""
    return (point.y, point.x)


def route_line(route: Sequence[LatLon]) -> LineString:
    if len(route) < 2:
        raise ValueError("A route needs at least two coordinates.")
    return LineString([to_lonlat(coordinate) for coordinate in route])


def point_geometry(coordinate: LatLon) -> Point:
    return Point(to_lonlat(coordinate))


def report_buffer(report: HazardReport, radius_m: float = 100.0, segments: int = 64) -> BaseGeometry:
    """
    Geodesic circle of radius_m around the report location.

    Each vertex is the geodesic destination from the centre at an evenly spaced
    bearing, so the radius is true metres at any latitude.

    geopy wraps longitudes into [-180, 180], so vertices are unwrapped around the
    centre first. A circle that then pokes past the antimeridian also gets a copy
    shifted by 360 degrees, so routes on either side of it are tested correctly.
    """
    centre = report.location
    centre_lon = centre[1]
    distance = geodesic(meters=radius_m)
    vertices = []
    for step in range(segments):
        bearing = 360.0 * step / segments
        destination = distance.destination(centre, bearing=bearing)
        lon = destination.longitude
        if lon - centre_lon > 180:
            lon -= 360
        elif lon - centre_lon < -180:
            lon += 360
        vertices.append((lon, destination.latitude))

    circle = Polygon(vertices)
    min_lon, _, max_lon, _ = circle.bounds
    if max_lon > 180:
        return MultiPolygon([circle, translate(circle, xoff=-360)])
    if min_lon < -180:
        return MultiPolygon([circle, translate(circle, xoff=360)])
    return circle


def _distinct_points(ring: Ring) -> List[LatLon]:
    distinct: List[LatLon] = []
    for coordinate in ring:
        if coordinate not in distinct:
            distinct.append(coordinate)
    return distinct


def area_polygon(area: HazardArea) -> BaseGeometry:
    """
    Polygon of the area's rings, no buffer.
    Raises MalformedHazard when the outer ring has fewer than 3 distinct points.
    Self-intersecting rings are repaired rather than rejected.
    """
    if not area.rings:
        raise MalformedHazard(f"Hazard area {area.id} has no rings.")

    outer = area.outer_ring
    distinct_count = len(_distinct_points(outer))
    if distinct_count < MIN_RING_POINTS:
        raise MalformedHazard(
            f"Hazard area {area.id} needs at least {MIN_RING_POINTS} distinct ring points, got {distinct_count}."
        )

    # holes that are themselves degenerate are dropped, the outer ring still counts
    holes = [
        [to_lonlat(coordinate) for coordinate in ring]
        for ring in area.rings[1:]
        if len(_distinct_points(ring)) >= MIN_RING_POINTS
    ]
    polygon = Polygon([to_lonlat(coordinate) for coordinate in outer], holes)
    if not polygon.is_valid:
        return make_valid(polygon)
    return polygon


def area_boundary(area: HazardArea) -> LineString:
    """
    The outer ring as a closed line. Used for 'distance to the edge of the zone'.
    """
    outer = area.outer_ring
    if len(_distinct_points(outer)) < MIN_RING_POINTS:
        raise MalformedHazard(f"Hazard area {area.id} has a degenerate outer ring.")
    coordinates = [to_lonlat(coordinate) for coordinate in outer]
    if coordinates[0] != coordinates[-1]:
        coordinates.append(coordinates[0])
    return LineString(coordinates)


def validate_area(area: HazardArea) -> None:
    """Raises MalformedHazard if the area cannot be turned into a polygon."""
    area_polygon(area)
