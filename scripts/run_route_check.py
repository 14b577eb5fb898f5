"""
Runs one hazard-aware route calculation against the live Nominatim + OSRM services.

Example:
    python -m scripts.run_route_check "Charminar, Hyderabad" "Hitech City, Hyderabad" \
        --report 17.385,78.4867,High --rectangle 17.34,78.44,17.36,78.46
"""
import argparse
import logging
import sys
from typing import List

from hazards.models import AreaShape, LatLon
from hazards.registry import HazardRegistry
from hazards.geometry import MalformedHazard
from routing.osrm_client import OSRMClient
from routing.geocoding import NominatimGeocoder
from detour.evaluator import OutcomeStatus, RouteEvaluator


def parse_report(value: str):
    try:
        lat, lon, severity = value.split(",")
        return float(lat), float(lon), severity.strip()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected LAT,LON,SEVERITY, got {value!r}")


def parse_ring(value: str) -> List[LatLon]:
    try:
        ring = []
        for pair in value.split(";"):
            lat, lon = pair.split(",")
            ring.append((float(lat), float(lon)))
        return ring
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected 'LAT,LON;LAT,LON;...', got {value!r}")


def parse_bounds(value: str):
    try:
        south, west, north, east = (float(part) for part in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected SOUTH,WEST,NORTH,EAST, got {value!r}")
    return south, west, north, east


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check a driving route against hazard zones.")
    parser.add_argument("start", help="start address")
    parser.add_argument("end", help="destination address")
    parser.add_argument("--report", action="append", type=parse_report, default=[],
                        metavar="LAT,LON,SEVERITY", help="hazard report (Low/Medium/High)")
    parser.add_argument("--area", action="append", type=parse_ring, default=[],
                        metavar="LAT,LON;LAT,LON;...", help="hazard polygon outer ring")
    parser.add_argument("--rectangle", action="append", type=parse_bounds, default=[],
                        metavar="S,W,N,E", help="hazard rectangle bounds")
    parser.add_argument("--profile", default="driving", help="OSRM profile")
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    registry = HazardRegistry()
    for lat, lon, severity in args.report:
        registry.report_hazard(lat, lon, severity)
    for ring in args.area:
        try:
            registry.add_area(AreaShape.POLYGON, [ring])
        except MalformedHazard as e:
            print(f"Skipping area: {e}")
    for south, west, north, east in args.rectangle:
        try:
            registry.add_rectangle(south, west, north, east)
        except MalformedHazard as e:
            print(f"Skipping rectangle: {e}")

    evaluator = RouteEvaluator(
        geocoder=NominatimGeocoder(),
        router=OSRMClient(profile=args.profile),
        registry=registry,
    )

    print("=== HAZARD ROUTE CHECK ===")
    print(f"Hazards: {len(registry.reports)} reports, {len(registry.areas)} areas")
    outcome = evaluator.calculate(args.start, args.end)

    if outcome.status != OutcomeStatus.OK:
        print(f"[FAILED] {outcome.message}")
        return 1

    evaluation = outcome.evaluation
    print(f"Start {outcome.start} -> End {outcome.end}")
    print(f"Primary route: {len(evaluation.route)} points")
    if not evaluation.hazard_flag:
        print("[CLEAR] Route does not cross any hazard.")
        return 0

    print(f"[HAZARD] {outcome.message}")
    if evaluation.alternate:
        print(f"Alternate route: {len(evaluation.alternate)} points")
    return 2


if __name__ == "__main__":
    sys.exit(main())
