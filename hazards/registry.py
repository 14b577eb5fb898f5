"""
Purpose: Owns the session's hazard reports and drawn areas.
What it does:
- Holds the in-memory lists of:
   - reports (point hazards with a severity)
   - areas (drawn rectangles/polygons)

Provides operations:
   - report_hazard(lat, lon, severity)
   - add_area(shape, rings)
   - add_rectangle(south, west, north, east)
   - remove_area(area_id)
   - reset()
   - snapshot()

Evaluation never reads these lists directly: it takes a HazardSet snapshot
when it starts, so edits made while a route is being evaluated don't leak in.

Rule: Registry owns state, detour/ owns the route logic.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional, Sequence

from .geometry import validate_area
from .models import AreaShape, HazardArea, HazardReport, HazardSet, LatLon, Severity

logger = logging.getLogger(__name__)

ReportCreatedCallback = Callable[[HazardReport], None]
AreaCreatedCallback = Callable[[HazardArea], None]


class HazardRegistry:
    """
    In-memory, session-only hazard store.

    Listeners are passed in explicitly; the UI layer decides what
    "report created" means for it (close a popup, draw a marker, ...).
    """

    def __init__(
        self,
        on_report_created: Optional[ReportCreatedCallback] = None,
        on_area_created: Optional[AreaCreatedCallback] = None,
    ):
        self._lock = threading.Lock()
        self._reports: List[HazardReport] = []
        self._areas: Dict[str, HazardArea] = {}  # insertion ordered
        self.on_report_created = on_report_created
        self.on_area_created = on_area_created

    # --- Public API ---

    def report_hazard(self, lat: float, lon: float, severity: str | Severity) -> HazardReport:
        """
        Records a hazard report at (lat, lon).
        """
        report = HazardReport.new(lat, lon, severity)
        with self._lock:
            self._reports.append(report)

        logger.info(f"Hazard reported at {report.location} severity={report.severity.value}")
        if self.on_report_created:
            self.on_report_created(report)
        return report

    def add_area(self, shape: str | AreaShape, rings: Sequence[Sequence[LatLon]]) -> HazardArea:
        """
        Records a drawn hazard area.
        Raises MalformedHazard if the outer ring has fewer than 3 points.
        """
        area = HazardArea.new(shape, rings)
        validate_area(area)
        with self._lock:
            self._areas[area.id] = area

        logger.info(f"Hazard area {area.id} added ({area.shape.value}, {len(area.outer_ring)} points)")
        if self.on_area_created:
            self.on_area_created(area)
        return area

    def add_rectangle(self, south: float, west: float, north: float, east: float) -> HazardArea:
        """
        Records a drawn rectangle from its bounds.
        Raises MalformedHazard when the bounds collapse to a line or a point.
        """
        area = HazardArea.rectangle(south, west, north, east)
        validate_area(area)
        with self._lock:
            self._areas[area.id] = area

        logger.info(f"Hazard rectangle {area.id} added ({south}, {west}) -> ({north}, {east})")
        if self.on_area_created:
            self.on_area_created(area)
        return area

    def remove_area(self, area_id: str) -> bool:
        with self._lock:
            removed = self._areas.pop(area_id, None)
        return removed is not None

    def reset(self) -> None:
        """Drops every report and area."""
        with self._lock:
            self._reports.clear()
            self._areas.clear()

    def snapshot(self) -> HazardSet:
        with self._lock:
            return HazardSet(reports=tuple(self._reports), areas=tuple(self._areas.values()))

    @property
    def reports(self) -> List[HazardReport]:
        with self._lock:
            return list(self._reports)

    @property
    def areas(self) -> List[HazardArea]:
        with self._lock:
            return list(self._areas.values())
